"""Prometheus metrics definitions for the webhook receiver."""

from prometheus_client import Counter, Gauge, Histogram

# Hook outcomes
HOOKS = Counter("hooksink_hooks_total", "Webhook calls by outcome", ["result"])
PAYLOAD_SIZE = Histogram(
    "hooksink_payload_bytes",
    "Accepted webhook payload size (bytes)",
    buckets=(0, 200, 500, 1_000, 2_000, 5_000, 10_000, 50_000, 200_000, 1_000_000, 5_000_000, 20_000_000),
)

# Standard HTTP server metrics (shared names across services; Prometheus "job" label disambiguates)
HTTP_INFLIGHT = Gauge("http_server_inflight_requests", "In-flight HTTP requests", ["method", "route"])
HTTP_REQS = Counter("http_server_requests_total", "HTTP requests", ["method", "route", "status"])
HTTP_LAT = Histogram(
    "http_server_request_duration_seconds",
    "HTTP request duration (seconds)",
    ["method", "route", "status"],
    buckets=(0.001, 0.005, 0.01, 0.02, 0.05, 0.1, 0.2, 0.5, 1, 2, 5, 10, 30, 60),
)
HTTP_REQ_SIZE = Histogram(
    "http_server_request_size_bytes",
    "HTTP request size (bytes), from Content-Length when available",
    ["method", "route"],
    buckets=(0, 200, 500, 1_000, 2_000, 5_000, 10_000, 50_000, 200_000, 1_000_000, 5_000_000, 20_000_000),
)

# Pre-create label series so dashboards show 0 instead of "No data" right after startup.
for _result in ("accepted", "unauthorized", "method_not_allowed", "sink_error"):
    HOOKS.labels(result=_result).inc(0)
