"""Turns a validated `PayRequest` into a signed `PaymentPayload`."""

from datetime import datetime, timezone
from typing import Callable

from paybridge.common.config import CommonSettings
from paybridge.common.errors import ConfigurationError
from paybridge.common.ids import generate_transaction_id
from paybridge.services.checkout.schemas import (
    CURRENCY,
    LIFETIME,
    QR_IMAGE_TEMPLATE,
    PaymentPayload,
    PayRequest,
)
from paybridge.services.checkout.signing import sign_fields


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PaymentRequestBuilder:
    """Assembles the outbound payload; the hash is always computed last."""

    def __init__(
        self,
        config: CommonSettings,
        clock: Callable[[], datetime] = _utc_now,
        id_factory: Callable[[datetime], str] = generate_transaction_id,
    ) -> None:
        self.config = config
        self.clock = clock
        self.id_factory = id_factory

    def build(self, req: PayRequest) -> PaymentPayload:
        now = self.clock()
        merchant_id = self.config.merchant_id
        if not merchant_id:
            raise ConfigurationError("MERCHANT_ID is not configured")

        fields = {
            "req_time": now.strftime("%Y%m%d%H%M%S"),
            "merchant_id": merchant_id,
            "tran_id": self.id_factory(now),
            "amount": req.amount,
            "currency": CURRENCY,
            "payment_option": req.payment_option,
            "description": req.description or "",
            "lifetime": LIFETIME,
            "qr_image_template": QR_IMAGE_TEMPLATE,
        }
        fields["hash"] = sign_fields(fields, self.config.api_key)
        return PaymentPayload(**fields)
