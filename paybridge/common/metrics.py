"""Prometheus metric definitions for the checkout service."""

from prometheus_client import Counter, Histogram, generate_latest
from starlette.responses import Response


payment_requests_total = Counter("payment_requests_total", "Total payment requests", ["service"])
payment_envelopes_total = Counter(
    "payment_envelopes_total",
    "Envelopes returned to callers by outcome",
    ["service", "outcome"],
)
gateway_requests_total = Counter(
    "gateway_requests_total",
    "Outbound gateway calls by endpoint and HTTP status",
    ["service", "endpoint", "status_code"],
)
gateway_latency_seconds = Histogram(
    "gateway_latency_seconds",
    "Outbound gateway call latency seconds",
    ["service", "endpoint"],
)
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["service", "route", "method", "status_code"],
)
http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration seconds",
    ["service", "route", "method"],
)


def metrics_response() -> Response:
    """Expose all registered Prometheus metrics in text format."""

    return Response(content=generate_latest(), media_type="text/plain")
