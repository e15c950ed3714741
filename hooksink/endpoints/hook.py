"""Webhook receiver endpoint."""

import hmac
import logging

import anyio.to_thread
from fastapi import APIRouter, Request, status
from fastapi.responses import PlainTextResponse

from hooksink.config import Settings
from hooksink.endpoints import AnyMethod
from hooksink.metrics import HOOKS, PAYLOAD_SIZE
from hooksink.sinks import Sink

logger = logging.getLogger("hooksink")

router = APIRouter()


def get_sink(request: Request) -> Sink:
    """Fetch the payload sink from app state"""
    sink = getattr(request.app.state, "sink", None)
    if sink is None:
        raise RuntimeError("Sink not initialized")
    return sink


def get_settings(request: Request) -> Settings:
    """Fetch settings from app state"""
    return request.app.state.settings


def secret_matches(incoming: str, expected: str) -> bool:
    # Byte-for-byte, in constant time. Header values arrive latin-1 decoded, so encoding back
    # yields the bytes on the wire. An empty expected secret matches only an empty header.
    return hmac.compare_digest(incoming.encode("latin-1"), expected.encode("utf-8"))


async def hook(request: Request):
    sink = get_sink(request)
    settings = get_settings(request)

    if request.method != "POST":
        HOOKS.labels(result="method_not_allowed").inc()
        return PlainTextResponse(
            "Method not allowed",
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            headers={"Allow": "POST"},
        )

    incoming = request.headers.get("authorization", "")
    if not secret_matches(incoming, settings.shared_secret.get_secret_value()):
        HOOKS.labels(result="unauthorized").inc()
        return PlainTextResponse("Unauthorized", status_code=status.HTTP_401_UNAUTHORIZED)

    # The caller always gets 200 once authenticated; a failed read is recorded on the entry instead.
    fields = {}
    try:
        body = await request.body()
    except Exception as e:
        body = b""
        fields["read_error"] = f"{type(e).__name__}: {e}"
        logger.warning("hook_body_read_failed", extra={"error": fields["read_error"]})

    # File writes may rotate and gzip; keep that off the event loop.
    await anyio.to_thread.run_sync(lambda: sink.write(body, **fields))

    HOOKS.labels(result="accepted").inc()
    PAYLOAD_SIZE.observe(len(body))
    return PlainTextResponse("ok")


# methods=None: every verb reaches the handler, which answers non-POST with a plain-text 405.
router.add_route("/api/hook", AnyMethod(hook), methods=None, include_in_schema=False)
