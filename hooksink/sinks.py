"""Payload sinks: where accepted webhook bodies end up.

A sink owns a private, non-propagating logger with exactly one handler, so
payload entries never mix with the service's own logs (which go through the
root logger).
"""

from __future__ import annotations

import itertools
import logging
import sys
from typing import Any, TextIO

from hooksink.config import Settings
from hooksink.exceptions import SinkWriteError
from hooksink.logging_setup import make_formatter
from hooksink.rotation import MEGABYTE, CompressingRotatingFileHandler

logger = logging.getLogger("hooksink")

_ids = itertools.count()


class _ConsoleHandler(logging.StreamHandler):
    def handleError(self, record: logging.LogRecord) -> None:
        raise


class Sink:
    """One log entry per payload. ``write`` raises ``SinkWriteError`` when the handler fails."""

    kind = "base"

    def __init__(self, handler: logging.Handler, formatter: str = "plain") -> None:
        handler.setFormatter(make_formatter(formatter))
        self.handler = handler
        self.formatter = formatter
        self._logger = logging.getLogger(f"hooksink.payload.{self.kind}.{next(_ids)}")
        self._logger.handlers = [handler]
        self._logger.setLevel(logging.INFO)
        self._logger.propagate = False

    def write(self, payload: bytes, **fields: Any) -> None:
        text = payload.decode("utf-8", errors="replace")
        try:
            self._logger.info(text, extra=fields or None)
        except Exception as e:
            raise SinkWriteError(self.kind, e) from e

    def close(self) -> None:
        self._logger.removeHandler(self.handler)
        self.handler.close()


class ConsoleSink(Sink):
    kind = "stdout"

    def __init__(self, formatter: str = "plain", stream: TextIO | None = None) -> None:
        super().__init__(_ConsoleHandler(stream or sys.stdout), formatter)


class RotatingFileSink(Sink):
    kind = "file"

    def __init__(
        self,
        filename: str,
        *,
        max_size_mb: int = 10,
        max_backups: int = 3,
        max_age_days: int = 28,
        compress: bool = True,
        formatter: str = "plain",
    ) -> None:
        handler = CompressingRotatingFileHandler(
            filename,
            max_bytes=max_size_mb * MEGABYTE,
            max_backups=max_backups,
            max_age_days=max_age_days,
            compress=compress,
        )
        super().__init__(handler, formatter)
        self.filename = handler.baseFilename


def build_sink(settings: Settings) -> Sink:
    if settings.output_type == "file":
        sink: Sink = RotatingFileSink(
            settings.file_location,
            max_size_mb=settings.max_size,
            max_backups=settings.max_backup,
            max_age_days=settings.max_age,
            compress=True,
            formatter=settings.formatter,
        )
        logger.info(
            "sink_ready",
            extra={
                "sink": sink.kind,
                "path": sink.filename,
                "max_size_mb": settings.max_size,
                "max_backup": settings.max_backup,
                "max_age_days": settings.max_age,
            },
        )
        return sink

    sink = ConsoleSink(formatter=settings.formatter)
    logger.info("sink_ready", extra={"sink": sink.kind})
    return sink
