"""Custom exceptions and handlers for the webhook receiver"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import PlainTextResponse

from hooksink.metrics import HOOKS

logger = logging.getLogger("hooksink")


class SinkWriteError(OSError):
    """Raised when the active sink cannot persist an entry"""
    def __init__(self, sink: str, cause: BaseException):
        self.sink = sink
        self.cause = cause
        super().__init__(f"{sink} sink write failed: {cause}")


async def sink_write_handler(request: Request, exc: SinkWriteError):
    HOOKS.labels(result="sink_error").inc()
    logger.critical("sink_write_failed", extra={"sink": exc.sink, "error": str(exc.cause)})
    on_fatal = getattr(request.app.state, "on_fatal", None)
    if on_fatal is not None:
        on_fatal(exc)
    return PlainTextResponse("Internal Server Error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app"""
    app.add_exception_handler(SinkWriteError, sink_write_handler)
