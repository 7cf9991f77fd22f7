"""Shared fixtures: test settings and a canned gateway transport."""

from datetime import datetime, timezone
from decimal import Decimal

import httpx
import pytest

from paybridge.common.config import CommonSettings
from paybridge.services.checkout.builder import PaymentRequestBuilder
from paybridge.services.checkout.schemas import PayRequest


QR_URL = "https://gateway.test/generate-qr"
CARD_URL = "https://gateway.test/link-card"
FIXED_NOW = datetime(2026, 3, 14, 9, 26, 53, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def no_proxy_env(monkeypatch):
    """Proxy mounts from the environment would bypass the mock transports."""

    for name in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def test_settings() -> CommonSettings:
    return CommonSettings(
        _env_file=None,
        merchant_id="ec000002",
        api_key="sandbox-secret",
        payway_qr_generation_url=QR_URL,
        payway_card_link_url=CARD_URL,
        gateway_verify_tls=True,
    )


@pytest.fixture
def fixed_builder(test_settings) -> PaymentRequestBuilder:
    return PaymentRequestBuilder(
        test_settings,
        clock=lambda: FIXED_NOW,
        id_factory=lambda now: "TX0314092653a1b2",
    )


@pytest.fixture
def qr_request() -> PayRequest:
    return PayRequest(amount=Decimal("10.50"), payment_option="abapay_khqr", description="coffee")


class RecordingTransport(httpx.MockTransport):
    """Mock transport that keeps every request it served."""

    def __init__(self, handler) -> None:
        self.requests: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)


@pytest.fixture
def recording_transport():
    return RecordingTransport
