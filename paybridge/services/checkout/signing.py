"""PayWay request signing.

The gateway recomputes the signature from the fields it receives, so the
canonical string must match its field order byte for byte. Fields this
service never sends still hold their slot as empty strings.
"""

import base64
import hashlib
import hmac
from decimal import Decimal
from typing import Any, Mapping

from paybridge.common.errors import ConfigurationError


HASH_FIELDS: tuple[str, ...] = (
    "req_time",
    "merchant_id",
    "tran_id",
    "amount",
    "items",
    "shipping",
    "firstname",
    "lastname",
    "email",
    "phone",
    "type",
    "payment_option",
    "return_url",
    "cancel_url",
    "continue_success_url",
    "return_deeplink",
    "currency",
    "custom_fields",
    "return_params",
    "payout",
    "lifetime",
    "additional_params",
    "google_pay_token",
    "skip_success_page",
    "qr_image_template",
)


def stringify(value: Any) -> str:
    """Render one field the way it appears in the signed string."""

    if value is None:
        return ""
    if isinstance(value, Decimal):
        # Positional notation only; str() would give "1E+1" for some inputs.
        return format(value, "f")
    return str(value)


def canonical_hash_string(fields: Mapping[str, Any]) -> str:
    return "".join(stringify(fields.get(name)) for name in HASH_FIELDS)


def sign_fields(fields: Mapping[str, Any], secret_key: str | None) -> str:
    """Base64 of the raw HMAC-SHA512 digest over the canonical string."""

    if not secret_key:
        raise ConfigurationError("API_KEY is not configured")
    digest = hmac.new(
        secret_key.encode("utf-8"),
        canonical_hash_string(fields).encode("utf-8"),
        hashlib.sha512,
    ).digest()
    return base64.b64encode(digest).decode("ascii")
