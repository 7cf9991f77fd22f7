"""Startup-time helpers for safe config logging."""

import os

from paybridge.common.logging import logger


REQUIRED_KEYS = ("MERCHANT_ID", "API_KEY")


def _safe_env(name: str) -> str:
    """Return env value with simple redaction for secret-like variable names."""

    value = os.getenv(name)
    if value is None:
        return "<unset>"
    if any(secret in name for secret in ["KEY", "SECRET", "PASSWORD", "TOKEN"]):
        return "<redacted>"
    return value


def log_startup_config(service_name: str, keys: list[str]) -> None:
    """Log selected startup config keys for quick troubleshooting."""

    config = {"service": service_name}
    for key in keys:
        config[key] = _safe_env(key)
    logger.info("startup_config=%s", config)
    missing = [key for key in REQUIRED_KEYS if not os.getenv(key)]
    if missing:
        logger.warning("gateway credentials missing from environment: %s", ", ".join(missing))
