"""End-to-end checks of `POST /api/pay` against a mocked gateway."""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from paybridge.common.config import CommonSettings
from paybridge.services.checkout import main
from paybridge.services.checkout.service import CheckoutService


@pytest.fixture
def gateway_calls():
    return []


@pytest.fixture
def use_gateway(monkeypatch, test_settings, recording_transport, gateway_calls):
    """Swap the module service for one backed by a canned gateway handler."""

    def install(handler, config: CommonSettings = test_settings):
        transport = recording_transport(handler)
        transport.requests = gateway_calls
        monkeypatch.setattr(main, "service", CheckoutService(config, transport=transport))

    return install


@pytest.fixture
def client():
    return TestClient(main.app)


def test_qr_payment_returns_direct_envelope(client, use_gateway, gateway_calls, test_settings):
    use_gateway(lambda request: httpx.Response(200, json={"qrString": "000201", "status": {"code": "0"}}))

    resp = client.post(
        "/api/pay",
        json={"amount": 10.5, "payment_option": "abapay_khqr", "description": "coffee"},
    )

    body = resp.json()
    assert resp.status_code == 200
    assert body["payment_type"] == "direct"
    assert body["data"]["qrString"] == "000201"
    assert body["transaction_id"].startswith("TX")
    [sent] = gateway_calls
    assert str(sent.url) == test_settings.payway_qr_generation_url
    wire = json.loads(sent.content)
    assert wire["tran_id"] == body["transaction_id"]
    assert wire["amount"] == "10.5"
    assert "description" not in wire


def test_cards_returns_redirect_envelope(client, use_gateway, gateway_calls, test_settings):
    use_gateway(lambda request: httpx.Response(200, html="<form>checkout</form>"))

    resp = client.post("/api/pay", json={"amount": "25.00", "payment_option": "cards"})

    body = resp.json()
    assert resp.status_code == 200
    assert body["payment_type"] == "redirect"
    assert body["checkout_html"] == "<form>checkout</form>"
    assert str(gateway_calls[0].url) == test_settings.payway_card_link_url


def test_gateway_error_status_is_mirrored(client, use_gateway):
    use_gateway(lambda request: httpx.Response(403, text="forbidden merchant"))

    resp = client.post("/api/pay", json={"amount": 1, "payment_option": "abapay_khqr"})

    assert resp.status_code == 403
    assert resp.json()["debug_info"]["raw_response"] == "forbidden merchant"


@pytest.mark.parametrize(
    "payload",
    [
        {"amount": 0, "payment_option": "abapay_khqr"},
        {"payment_option": "abapay_khqr"},
        {"amount": 5, "payment_option": ""},
        {"amount": 5, "payment_option": "cards", "description": "x" * 256},
        {"amount": "1e50000000", "payment_option": "abapay_khqr"},
        {"amount": "1e999999999", "payment_option": "abapay_khqr"},
        {"amount": "100000000", "payment_option": "abapay_khqr"},
        {"amount": "10.505", "payment_option": "abapay_khqr"},
        {"amount": 5, "payment_option": "   "},
    ],
)
def test_invalid_input_never_reaches_gateway(client, use_gateway, gateway_calls, payload):
    use_gateway(lambda request: httpx.Response(200, json={}))

    resp = client.post("/api/pay", json=payload)

    body = resp.json()
    assert resp.status_code == 422
    assert body["success"] is False
    assert body["message"] == "Validation failed"
    assert body["errors"]
    assert gateway_calls == []


def test_missing_credentials_give_generic_500(client, use_gateway, gateway_calls):
    use_gateway(
        lambda request: httpx.Response(200, json={}),
        CommonSettings(_env_file=None, merchant_id=None, api_key=None),
    )

    resp = client.post("/api/pay", json={"amount": 5, "payment_option": "abapay_khqr"})

    body = resp.json()
    assert resp.status_code == 500
    assert body == {
        "success": False,
        "message": "Payment processing failed",
        "error": "Payment gateway is not configured",
    }
    assert gateway_calls == []


def test_unreachable_gateway_is_500(client, use_gateway):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    use_gateway(refuse)

    resp = client.post("/api/pay", json={"amount": 5, "payment_option": "abapay_khqr"})

    assert resp.status_code == 500
    assert "ConnectError" in resp.json()["error"]


def test_non_json_success_body_is_502(client, use_gateway):
    use_gateway(lambda request: httpx.Response(200, text="maintenance", headers={"content-type": "text/plain"}))

    resp = client.post("/api/pay", json={"amount": 5, "payment_option": "abapay_khqr"})

    body = resp.json()
    assert resp.status_code == 502
    assert body["message"] == "Payment gateway error"
    assert body["debug_info"]["raw_response"] == "maintenance"


def test_health_and_metrics(client):
    assert client.get("/health").json() == {"ok": True}
    assert "payment_requests_total" in client.get("/metrics").text


def test_form_post_is_accepted(client, use_gateway, gateway_calls):
    use_gateway(lambda request: httpx.Response(200, json={"qrString": "000201"}))

    resp = client.post(
        "/api/pay",
        data={"amount": "5.00", "payment_option": "abapay_khqr", "description": "form"},
    )

    assert resp.status_code == 200
    assert resp.json()["payment_type"] == "direct"
    wire = json.loads(gateway_calls[0].content)
    assert wire["amount"] == "5.00"
    assert "description" not in wire


def test_invalid_form_post_is_422(client, use_gateway, gateway_calls):
    use_gateway(lambda request: httpx.Response(200, json={}))

    resp = client.post("/api/pay", data={"amount": "0", "payment_option": "abapay_khqr"})

    assert resp.status_code == 422
    assert "amount" in resp.json()["errors"]
    assert gateway_calls == []


def test_non_json_body_is_422(client, use_gateway, gateway_calls):
    use_gateway(lambda request: httpx.Response(200, json={}))

    resp = client.post("/api/pay", content=b"amount=5", headers={"content-type": "text/plain"})

    assert resp.status_code == 422
    assert gateway_calls == []


def test_inputs_are_trimmed_before_signing(client, use_gateway, gateway_calls, test_settings):
    use_gateway(lambda request: httpx.Response(200, html="<form>checkout</form>"))

    resp = client.post("/api/pay", json={"amount": "7.25", "payment_option": " cards "})

    assert resp.status_code == 200
    assert str(gateway_calls[0].url) == test_settings.payway_card_link_url
    assert json.loads(gateway_calls[0].content)["payment_option"] == "cards"
