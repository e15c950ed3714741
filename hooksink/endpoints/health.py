"""Health check and system endpoints."""

from fastapi import APIRouter, Request, Response
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from hooksink.endpoints import AnyMethod

router = APIRouter()


async def healthz(request: Request):
    """Liveness probe, independent of configuration and method."""
    return PlainTextResponse("ok")


# methods=None: every verb, including extension methods, reaches the handler.
router.add_route("/healthz", AnyMethod(healthz), methods=None, include_in_schema=False)


@router.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
