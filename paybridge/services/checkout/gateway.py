"""Single outbound call to the PayWay gateway."""

from time import perf_counter

import httpx
from pydantic import BaseModel, ConfigDict

from paybridge.common.config import CommonSettings
from paybridge.common.errors import NetworkError
from paybridge.common.logging import logger
from paybridge.common.metrics import gateway_latency_seconds, gateway_requests_total
from paybridge.common.tracing import tracer
from paybridge.services.checkout.schemas import CARD_PAYMENT_OPTION, PaymentPayload
from paybridge.services.checkout.signing import stringify


# `description` is collected but never sent.
WIRE_FIELDS: tuple[str, ...] = (
    "req_time",
    "merchant_id",
    "tran_id",
    "amount",
    "currency",
    "payment_option",
    "lifetime",
    "qr_image_template",
    "hash",
)


class GatewayResponse(BaseModel):
    """Raw gateway answer, read-only for the rest of the request."""

    model_config = ConfigDict(frozen=True)

    status_code: int
    reason_phrase: str
    # Repeated headers (Set-Cookie) keep one entry per occurrence.
    headers: dict[str, list[str]]
    content: bytes
    text: str

    @property
    def content_type(self) -> str | None:
        for name, values in self.headers.items():
            if name.lower() == "content-type" and values:
                return values[0]
        return None

    @classmethod
    def from_httpx(cls, resp: httpx.Response) -> "GatewayResponse":
        headers: dict[str, list[str]] = {}
        for name, value in resp.headers.multi_items():
            headers.setdefault(name, []).append(value)
        return cls(
            status_code=resp.status_code,
            reason_phrase=resp.reason_phrase,
            headers=headers,
            content=resp.content,
            text=resp.text,
        )


def wire_body(payload: PaymentPayload) -> dict:
    body = payload.model_dump(include=set(WIRE_FIELDS))
    # Send the amount exactly as it was signed.
    body["amount"] = stringify(payload.amount)
    return body


class PayWayClient:
    """Posts signed payloads to the QR or card-link endpoint."""

    def __init__(
        self,
        config: CommonSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.transport = transport

    def endpoint_for(self, payment_option: str) -> str:
        if payment_option == CARD_PAYMENT_OPTION:
            return self.config.payway_card_link_url
        return self.config.payway_qr_generation_url

    async def send(self, payload: PaymentPayload) -> GatewayResponse:
        """POST once with a bounded timeout. Transport failures are not retried."""

        url = self.endpoint_for(payload.payment_option)
        endpoint = "card_link" if payload.payment_option == CARD_PAYMENT_OPTION else "qr_generation"
        if not self.config.gateway_verify_tls:
            logger.warning("gateway TLS verification disabled endpoint=%s", endpoint)

        start = perf_counter()
        with tracer.start_as_current_span("payway.post") as span:
            span.set_attribute("payway.endpoint", endpoint)
            span.set_attribute("payway.tran_id", payload.tran_id)
            try:
                async with httpx.AsyncClient(
                    timeout=self.config.gateway_timeout_seconds,
                    verify=self.config.gateway_verify_tls,
                    follow_redirects=True,
                    transport=self.transport,
                ) as client:
                    resp = await client.post(url, json=wire_body(payload))
            except httpx.TransportError as exc:
                gateway_requests_total.labels(
                    service=self.config.service_name,
                    endpoint=endpoint,
                    status_code="error",
                ).inc()
                logger.error("gateway unreachable endpoint=%s error=%r", endpoint, exc)
                raise NetworkError(f"{type(exc).__name__}: {exc}") from exc
            finally:
                gateway_latency_seconds.labels(
                    service=self.config.service_name,
                    endpoint=endpoint,
                ).observe(max(0.0, perf_counter() - start))
            span.set_attribute("http.status_code", resp.status_code)

        gateway_requests_total.labels(
            service=self.config.service_name,
            endpoint=endpoint,
            status_code=str(resp.status_code),
        ).inc()
        logger.info(
            "gateway responded endpoint=%s status=%s content_type=%s",
            endpoint,
            resp.status_code,
            resp.headers.get("content-type"),
        )
        return GatewayResponse.from_httpx(resp)
