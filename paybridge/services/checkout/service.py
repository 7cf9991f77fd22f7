"""Checkout pipeline: build, sign, dispatch, classify, envelope.

Stateless per request. Every outcome, including unexpected exceptions, ends
as exactly one success or failure envelope.
"""

import httpx
from fastapi.responses import JSONResponse

from paybridge.common.config import CommonSettings
from paybridge.common.errors import ConfigurationError, PaymentError
from paybridge.common.logging import logger, transaction_id_ctx
from paybridge.common.metrics import payment_envelopes_total, payment_requests_total
from paybridge.services.checkout.builder import PaymentRequestBuilder
from paybridge.services.checkout.envelopes import (
    build_gateway_envelope,
    error_envelope,
    payment_error_envelope,
)
from paybridge.services.checkout.gateway import PayWayClient
from paybridge.services.checkout.schemas import PayRequest


class CheckoutService:
    """Runs one payment request through the gateway and normalizes the answer."""

    def __init__(
        self,
        config: CommonSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.builder = PaymentRequestBuilder(config)
        self.gateway = PayWayClient(config, transport=transport)

    def _count(self, outcome: str) -> None:
        payment_envelopes_total.labels(service=self.config.service_name, outcome=outcome).inc()

    async def process(self, req: PayRequest) -> JSONResponse:
        payment_requests_total.labels(service=self.config.service_name).inc()
        try:
            payload = self.builder.build(req)
            transaction_id_ctx.set(payload.tran_id)
            logger.info(
                "payment payload signed payment_option=%s amount=%s",
                payload.payment_option,
                payload.amount,
            )
            response = await self.gateway.send(payload)
            state, envelope = build_gateway_envelope(response, payload.tran_id)
            self._count(state.value.lower())
            return envelope
        except ConfigurationError as exc:
            logger.error("payment service misconfigured: %s", exc)
            self._count("configuration_error")
            return payment_error_envelope(exc)
        except PaymentError as exc:
            logger.warning("payment failed error_type=%s error=%s", type(exc).__name__, exc)
            self._count(type(exc).__name__.lower())
            return payment_error_envelope(exc)
        except Exception as exc:
            logger.exception("payment processing failed: %s", exc)
            self._count("unexpected_error")
            return error_envelope("Payment processing failed", str(exc), 500)
