import json

import pytest
from starlette.requests import Request

from hooksink.sinks import ConsoleSink

SECRET = {"Authorization": "s3cret"}


def entries(stream) -> list[str]:
    return [line for line in stream.getvalue().splitlines() if line]


def test_accepts_authorized_post(make_client, stream):
    client = make_client()
    r = client.post("/api/hook", content=b"hello world", headers=SECRET)
    assert r.status_code == 200
    assert r.text == "ok"
    lines = entries(stream)
    assert len(lines) == 1
    assert "hello world" in lines[0]


@pytest.mark.parametrize(
    "body",
    [
        b"",
        b'{"event": "push", "ref": "refs/heads/main"}',
        "привет, мир".encode("utf-8"),
        b"line one\nline two",
        b"x" * 100_000,
    ],
)
def test_one_json_entry_per_payload(make_client, stream, body):
    client = make_client(formatter="json")
    r = client.post("/api/hook", content=body, headers=SECRET)
    assert r.status_code == 200
    lines = entries(stream)
    assert len(lines) == 1
    entry = json.loads(lines[0])
    assert entry["msg"] == body.decode("utf-8")
    assert entry["level"] == "INFO"
    assert entry["time"]


def test_plain_entries_are_not_json(make_client, stream):
    client = make_client()
    client.post("/api/hook", content=b"plain payload", headers=SECRET)
    line = entries(stream)[0]
    assert "INFO plain payload" in line
    with pytest.raises(json.JSONDecodeError):
        json.loads(line)


@pytest.mark.parametrize("method", ["GET", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE", "PROPFIND", "PURGE"])
def test_rejects_non_post(make_client, stream, method):
    client = make_client()
    r = client.request(method, "/api/hook", content=b"payload", headers=SECRET)
    assert r.status_code == 405
    assert r.text == "Method not allowed"
    assert r.headers["allow"] == "POST"
    assert entries(stream) == []


def test_head_is_rejected(make_client, stream):
    r = make_client().head("/api/hook", headers=SECRET)
    assert r.status_code == 405
    assert entries(stream) == []


def test_method_is_checked_before_secret(make_client, stream):
    r = make_client().get("/api/hook", headers={"Authorization": "wrong"})
    assert r.status_code == 405


@pytest.mark.parametrize(
    "headers",
    [
        {},
        {"Authorization": ""},
        {"Authorization": "wrong"},
        {"Authorization": "S3CRET"},
        {"Authorization": "Bearer s3cret"},
        {"Authorization": "s3cret2"},
    ],
)
def test_rejects_wrong_secret(make_client, stream, headers):
    r = make_client().post("/api/hook", content=b"payload", headers=headers)
    assert r.status_code == 401
    assert r.text == "Unauthorized"
    assert entries(stream) == []


def test_empty_secret_accepts_only_empty_header(make_client, stream):
    client = make_client(shared_secret="")
    assert client.post("/api/hook", content=b"anonymous").status_code == 200
    assert client.post("/api/hook", content=b"with header", headers={"Authorization": "x"}).status_code == 401
    lines = entries(stream)
    assert len(lines) == 1
    assert "anonymous" in lines[0]


def test_body_read_failure_still_returns_ok(make_client, stream, monkeypatch):
    async def broken_body(self):
        raise OSError("connection reset")

    monkeypatch.setattr(Request, "body", broken_body)
    client = make_client(formatter="json")
    r = client.post("/api/hook", content=b"lost", headers=SECRET)
    assert r.status_code == 200
    assert r.text == "ok"
    entry = json.loads(entries(stream)[0])
    assert entry["msg"] == ""
    assert entry["read_error"] == "OSError: connection reset"


def test_sink_failure_is_fatal(make_client, broken_stream):
    failures = []
    sink = ConsoleSink(stream=broken_stream)
    client = make_client(sink=sink, on_fatal=failures.append)
    r = client.post("/api/hook", content=b"payload", headers=SECRET)
    assert r.status_code == 500
    assert r.text == "Internal Server Error"
    assert len(failures) == 1
    assert "disk full" in str(failures[0])


def test_sink_failure_without_callback(make_client, broken_stream):
    client = make_client(sink=ConsoleSink(stream=broken_stream))
    r = client.post("/api/hook", content=b"payload", headers=SECRET)
    assert r.status_code == 500


def test_metrics_count_outcomes(make_client):
    client = make_client()
    client.post("/api/hook", content=b"payload", headers=SECRET)
    client.post("/api/hook", content=b"payload", headers={"Authorization": "nope"})
    r = client.get("/metrics")
    assert r.status_code == 200
    assert 'hooksink_hooks_total{result="accepted"}' in r.text
    assert 'hooksink_hooks_total{result="unauthorized"}' in r.text
    assert 'http_server_requests_total{method="POST",route="/api/hook",status="200"}' in r.text


def test_non_ascii_secret_matches_utf8_header(make_client, stream):
    client = make_client(shared_secret="pässwörd")
    r = client.post("/api/hook", content=b"payload", headers={"Authorization": "pässwörd".encode("utf-8")})
    assert r.status_code == 200
    assert len(entries(stream)) == 1


def test_non_ascii_secret_rejects_other_encodings(make_client, stream):
    client = make_client(shared_secret="pässwörd")
    r = client.post("/api/hook", content=b"payload", headers={"Authorization": "pässwörd".encode("latin-1")})
    assert r.status_code == 401
    assert entries(stream) == []
