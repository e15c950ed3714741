import io
import logging

import pytest
from fastapi.testclient import TestClient

from hooksink.config import Settings
from hooksink.main import create_app
from hooksink.sinks import ConsoleSink

ENV_VARS = (
    "SHARED_SECRET",
    "OUTPUT_TYPE",
    "FILE_LOCATION",
    "MAX_SIZE",
    "MAX_BACKUP",
    "MAX_AGE",
    "PORT",
    "FORMATTER",
    "HOST",
    "LOG_LEVEL",
    "SERVICE_NAME",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


class BrokenStream(io.StringIO):
    def write(self, s):
        raise OSError("disk full")


@pytest.fixture
def broken_stream():
    return BrokenStream()


@pytest.fixture
def stream():
    return io.StringIO()


@pytest.fixture
def make_client(stream):
    def _make(sink=None, on_fatal=None, **overrides):
        overrides.setdefault("shared_secret", "s3cret")
        settings = Settings(**overrides)
        sink = sink or ConsoleSink(formatter=settings.formatter, stream=stream)
        return TestClient(create_app(settings, sink, on_fatal=on_fatal))

    return _make
