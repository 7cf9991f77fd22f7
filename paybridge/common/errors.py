"""Error taxonomy for the payment pipeline.

Each error knows the HTTP status and envelope detail it maps to, so the
service layer can turn any of them into a failure envelope in one place.
Request validation errors are raised by FastAPI itself and handled in `main`.
"""

from typing import Any


class PaymentError(Exception):
    """Base class for failures surfaced to the caller as a failure envelope."""

    status_code = 500
    message = "Payment processing failed"

    def detail(self) -> dict[str, Any]:
        return {"error": str(self)}


class ConfigurationError(PaymentError):
    """Merchant id or signing key is missing from process configuration."""

    def detail(self) -> dict[str, Any]:
        # The specific missing setting is logged, never returned to callers.
        return {"error": "Payment gateway is not configured"}


class NetworkError(PaymentError):
    """The gateway could not be reached (timeout, DNS, refused connection)."""


class GatewayContractViolation(PaymentError):
    """The gateway answered 2xx but the body is not the JSON it promised."""

    status_code = 502
    message = "Payment gateway error"

    def __init__(self, reason: str, debug_info: dict[str, Any]) -> None:
        super().__init__(reason)
        self.debug_info = debug_info

    def detail(self) -> dict[str, Any]:
        return {"error": str(self), "debug_info": self.debug_info}
