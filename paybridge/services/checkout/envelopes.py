"""Shapes every outcome into the JSON envelope returned to the frontend."""

import json

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from paybridge.common.errors import GatewayContractViolation, PaymentError
from paybridge.common.logging import logger
from paybridge.common.state_machine import ResponseState, classify
from paybridge.services.checkout.gateway import GatewayResponse
from paybridge.services.checkout.schemas import (
    DebugInfo,
    DirectEnvelope,
    ErrorEnvelope,
    GatewayFailureEnvelope,
    RedirectEnvelope,
    ValidationFailureEnvelope,
)


def envelope_response(envelope: BaseModel, status_code: int = 200) -> JSONResponse:
    return JSONResponse(content=jsonable_encoder(envelope), status_code=status_code)


def debug_info(response: GatewayResponse) -> DebugInfo:
    return DebugInfo(
        http_status=response.status_code,
        response_headers=response.headers,
        raw_response=response.text,
        content_type=response.content_type,
    )


def redirect_envelope(response: GatewayResponse, transaction_id: str) -> RedirectEnvelope:
    return RedirectEnvelope(
        transaction_id=transaction_id,
        checkout_html=response.text,
        content_type=response.content_type,
        response_size=len(response.content),
    )


def direct_envelope(response: GatewayResponse, transaction_id: str) -> DirectEnvelope:
    try:
        data = json.loads(response.text)
    except ValueError as exc:
        raise GatewayContractViolation(
            "Gateway returned a body that is not valid JSON",
            debug_info(response).model_dump(),
        ) from exc
    return DirectEnvelope(transaction_id=transaction_id, data=data)


def failure_envelope(response: GatewayResponse) -> GatewayFailureEnvelope:
    return GatewayFailureEnvelope(
        error=f"Unexpected HTTP status: {response.status_code} {response.reason_phrase}".rstrip(),
        debug_info=debug_info(response),
    )


def build_gateway_envelope(response: GatewayResponse, transaction_id: str) -> tuple[ResponseState, JSONResponse]:
    """Classify the gateway response and render the matching envelope.

    Failures mirror the gateway's HTTP status; successes are always 200.
    """

    state = classify(response.status_code, response.content_type)
    logger.info("gateway response classified state=%s", state.value)
    if state is ResponseState.HTTP_FAILURE:
        return state, envelope_response(failure_envelope(response), response.status_code)
    if state is ResponseState.HTML_SUCCESS:
        return state, envelope_response(redirect_envelope(response, transaction_id))
    return state, envelope_response(direct_envelope(response, transaction_id))


def payment_error_envelope(exc: PaymentError) -> JSONResponse:
    """Render a pipeline error with its own status and detail."""

    body = {"success": False, "message": exc.message, **exc.detail()}
    return JSONResponse(content=jsonable_encoder(body), status_code=exc.status_code)


def error_envelope(message: str, error: str, status_code: int = 500) -> JSONResponse:
    return envelope_response(ErrorEnvelope(message=message, error=error), status_code)


def validation_envelope(errors: list[dict]) -> JSONResponse:
    """Group pydantic error entries by field name, Laravel style."""

    fields: dict[str, list[str]] = {}
    for entry in errors:
        loc = [str(part) for part in entry.get("loc", ())]
        name = ".".join(loc[1:]) if len(loc) > 1 else ".".join(loc) or "body"
        fields.setdefault(name, []).append(entry.get("msg", "invalid value"))
    return envelope_response(ValidationFailureEnvelope(errors=fields), 422)
