"""Process entrypoint: ``python -m hooksink`` or the ``hooksink`` script."""

import logging
import sys

import uvicorn
from pydantic import ValidationError

from hooksink.config import load_settings
from hooksink.logging_setup import setup_logging
from hooksink.main import create_app
from hooksink.sinks import build_sink

logger = logging.getLogger("hooksink")


def main() -> None:
    setup_logging("INFO")

    # Fail fast: a bad value must never degrade to a default or reach the listener.
    try:
        settings = load_settings()
    except ValidationError as e:
        logger.error("config_error", extra={"error": str(e)})
        sys.exit(1)

    setup_logging(settings.log_level, settings.formatter)

    try:
        sink = build_sink(settings)
    except OSError as e:
        logger.error("sink_error", extra={"error": str(e), "path": settings.file_location})
        sys.exit(1)

    if not settings.shared_secret.get_secret_value():
        # Only requests with an empty (or missing) Authorization header will be accepted.
        logger.warning("shared_secret_empty")

    logger.info(f"Starting webhook server with mode: {settings.output_type}")
    logger.info(f"Starting webhook server on port {settings.port}")
    logger.info("config", extra={"config": settings.safe_summary()})

    fatal: list[BaseException] = []
    server: uvicorn.Server | None = None

    def on_fatal(exc: BaseException) -> None:
        fatal.append(exc)
        if server is not None:
            server.should_exit = True

    app = create_app(settings, sink, on_fatal=on_fatal)
    # log_config=None: uvicorn's records go through the handlers installed above.
    server = uvicorn.Server(uvicorn.Config(app, host=settings.host, port=settings.port, log_config=None))
    try:
        server.run()
    finally:
        sink.close()

    if fatal:
        logger.critical("shutdown_after_sink_failure", extra={"error": str(fatal[0])})
        sys.exit(1)


if __name__ == "__main__":
    main()
