"""Central environment-driven settings for the checkout service.

The service process loads this once at startup (see `.env.example`). Merchant
credentials have no defaults; their absence is reported on first use.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


PAYWAY_SANDBOX_QR_GENERATION_URL = (
    "https://checkout-sandbox.payway.com.kh/api/payment-gateway/v1/payments/generate-qr"
)
PAYWAY_SANDBOX_CARD_LINK_URL = (
    "https://checkout-sandbox.payway.com.kh/api/payment-credential/v3/cof/link-card"
)


class CommonSettings(BaseSettings):
    """Typed view of runtime configuration from environment variables."""

    service_name: str = "paybridge"
    log_level: str = "INFO"
    merchant_id: str | None = None
    api_key: str | None = None
    payway_qr_generation_url: str = PAYWAY_SANDBOX_QR_GENERATION_URL
    payway_card_link_url: str = PAYWAY_SANDBOX_CARD_LINK_URL
    gateway_timeout_seconds: float = 30.0
    # Sandbox-only escape hatch; certificates are verified unless explicitly disabled.
    gateway_verify_tls: bool = True
    otel_enabled: bool = False
    otel_exporter_otlp_endpoint: str = "http://otel-collector:4318/v1/traces"
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = CommonSettings()
