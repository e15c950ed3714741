"""HTTP middleware for metrics."""

import time

from fastapi import Request, Response

from hooksink.metrics import HTTP_INFLIGHT, HTTP_LAT, HTTP_REQ_SIZE, HTTP_REQS

# Unknown paths are folded into one label to keep series bounded.
_ROUTES = {"/healthz", "/api/hook"}


def _content_length(headers) -> int | None:
    try:
        v = headers.get("content-length")
        return int(v) if v is not None else None
    except ValueError:
        return None


async def http_metrics_middleware(request: Request, call_next):
    """Middleware to track HTTP metrics."""
    # Avoid self-scrape noise
    path = request.url.path
    if path == "/metrics":
        return await call_next(request)

    method = request.method
    route = path if path in _ROUTES else "other"
    req_size = _content_length(request.headers)

    HTTP_INFLIGHT.labels(method=method, route=route).inc()
    start = time.perf_counter()
    response: Response | None = None
    try:
        response = await call_next(request)
        return response
    finally:
        dur_s = max(0.0, time.perf_counter() - start)
        status = str(response.status_code) if response is not None else "500"
        HTTP_REQS.labels(method=method, route=route, status=status).inc()
        HTTP_LAT.labels(method=method, route=route, status=status).observe(dur_s)
        if req_size is not None:
            HTTP_REQ_SIZE.labels(method=method, route=route).observe(req_size)
        HTTP_INFLIGHT.labels(method=method, route=route).dec()
