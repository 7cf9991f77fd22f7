"""Request, payload and envelope schemas for the checkout endpoint."""

from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


CURRENCY = "USD"
CENT = Decimal("0.01")
MIN_AMOUNT = CENT
MAX_AMOUNT = Decimal("99999999.99")
LIFETIME = 6
QR_IMAGE_TEMPLATE = "template4_color"
CARD_PAYMENT_OPTION = "cards"

PAYMENT_TYPE_REDIRECT = "redirect"
PAYMENT_TYPE_DIRECT = "direct"


class PayRequest(BaseModel):
    """Payload accepted by `POST /api/pay`."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    amount: Decimal = Field(ge=MIN_AMOUNT, le=MAX_AMOUNT, allow_inf_nan=False)
    payment_option: str = Field(min_length=1)
    description: str | None = Field(default=None, max_length=255)

    @field_validator("amount")
    @classmethod
    def at_most_two_decimal_places(cls, value: Decimal) -> Decimal:
        # Bounds are checked first, so quantize never sees an extreme exponent.
        if value != value.quantize(CENT):
            raise ValueError("Amount must have at most 2 decimal places")
        return value


class PaymentPayload(BaseModel):
    """Fully signed request; `hash` covers every other signed field."""

    model_config = ConfigDict(frozen=True)

    req_time: str
    merchant_id: str
    tran_id: str
    amount: Decimal
    currency: str
    payment_option: str
    description: str
    lifetime: int
    qr_image_template: str
    hash: str


class RedirectEnvelope(BaseModel):
    """Card checkout: the caller must render `checkout_html` for the payer."""

    success: Literal[True] = True
    message: str = "Checkout page received"
    transaction_id: str
    payment_type: Literal["redirect"] = PAYMENT_TYPE_REDIRECT
    checkout_html: str
    content_type: str | None
    response_size: int
    instructions: str = "Display the checkout_html for card payment"


class DirectEnvelope(BaseModel):
    """QR and other JSON payments, gateway body forwarded verbatim."""

    success: Literal[True] = True
    message: str = "Payment processed successfully"
    transaction_id: str
    payment_type: Literal["direct"] = PAYMENT_TYPE_DIRECT
    data: Any


class DebugInfo(BaseModel):
    http_status: int
    response_headers: dict[str, list[str]]
    raw_response: str
    content_type: str | None


class GatewayFailureEnvelope(BaseModel):
    success: Literal[False] = False
    message: str = "Payment gateway error"
    error: str
    debug_info: DebugInfo


class ErrorEnvelope(BaseModel):
    success: Literal[False] = False
    message: str
    error: str


class ValidationFailureEnvelope(BaseModel):
    success: Literal[False] = False
    message: str = "Validation failed"
    errors: dict[str, list[str]]
