"""FastAPI application for the webhook receiver."""

from typing import Callable

from fastapi import FastAPI

from hooksink.config import Settings
from hooksink.endpoints.health import router as health_router
from hooksink.endpoints.hook import router as hook_router
from hooksink.exceptions import register_exception_handlers
from hooksink.middleware import http_metrics_middleware
from hooksink.sinks import Sink


def create_app(
    settings: Settings,
    sink: Sink,
    on_fatal: Callable[[BaseException], None] | None = None,
) -> FastAPI:
    """Build the app around an already constructed sink.

    ``on_fatal`` is called when the sink fails to write; the entrypoint uses it
    to stop the server.
    """
    app = FastAPI(title="hooksink", version="0.1.0", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.settings = settings
    app.state.sink = sink
    app.state.on_fatal = on_fatal

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(hook_router)

    app.middleware("http")(http_metrics_middleware)
    return app
