"""Public entrypoint for PayWay checkout requests.

Validates the caller's input, runs the checkout pipeline and always answers
with a JSON envelope.
"""

from time import perf_counter
from uuid import uuid4

from fastapi import Depends, FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from paybridge.common.config import settings
from paybridge.common.logging import configure_logging, logger, trace_id_ctx
from paybridge.common.metrics import (
    http_request_duration_seconds,
    http_requests_total,
    metrics_response,
)
from paybridge.common.startup import log_startup_config
from paybridge.common.tracing import instrument_app, setup_tracing
from paybridge.services.checkout.envelopes import validation_envelope
from paybridge.services.checkout.schemas import PayRequest
from paybridge.services.checkout.service import CheckoutService

configure_logging()
setup_tracing(settings.service_name)
log_startup_config(
    settings.service_name,
    [
        "SERVICE_NAME",
        "MERCHANT_ID",
        "API_KEY",
        "PAYWAY_QR_GENERATION_URL",
        "PAYWAY_CARD_LINK_URL",
        "GATEWAY_TIMEOUT_SECONDS",
        "GATEWAY_VERIFY_TLS",
    ],
)
app = FastAPI(title="PayBridge Checkout")
instrument_app(app)
service = CheckoutService(settings)


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    """Record request count and latency for every HTTP call."""

    start = perf_counter()
    route = request.url.path
    method = request.method
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        route_obj = request.scope.get("route")
        if route_obj is not None and getattr(route_obj, "path", None):
            route = route_obj.path
        return response
    finally:
        elapsed = max(0.0, perf_counter() - start)
        http_request_duration_seconds.labels(
            service=settings.service_name,
            route=route,
            method=method,
        ).observe(elapsed)
        http_requests_total.labels(
            service=settings.service_name,
            route=route,
            method=method,
            status_code=str(status_code),
        ).inc()


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Reject bad input with field-level detail before any gateway call."""

    logger.info("payment request rejected path=%s errors=%s", request.url.path, len(exc.errors()))
    return validation_envelope(exc.errors())


FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def read_pay_request(request: Request) -> PayRequest:
    """Validate a form-encoded or JSON body into a `PayRequest`."""

    content_type = request.headers.get("content-type", "").lower()
    if content_type.startswith(FORM_CONTENT_TYPES):
        raw = dict((await request.form()).items())
    else:
        try:
            raw = await request.json()
        except ValueError as exc:
            raise RequestValidationError(
                [{"type": "json_invalid", "loc": ("body",), "msg": "Body must be JSON or form data", "input": None}]
            ) from exc
    try:
        return PayRequest.model_validate(raw)
    except ValidationError as exc:
        raise RequestValidationError(
            [{**error, "loc": ("body", *error["loc"])} for error in exc.errors()]
        ) from exc


@app.post("/api/pay")
async def pay(
    req: PayRequest = Depends(read_pay_request),
    x_correlation_id: str | None = Header(default=None),
):
    """Sign the payment, send it to PayWay and normalize the response.

    Returns a `redirect` envelope for card checkout pages, a `direct` envelope
    for JSON payments, or a failure envelope.
    """

    trace_id_ctx.set(x_correlation_id or str(uuid4()))
    return await service.process(req)


@app.get("/metrics")
def metrics():
    """Prometheus scrape endpoint."""

    return metrics_response()


@app.get("/health")
def health():
    """Container health probe endpoint."""

    return {"ok": True}
