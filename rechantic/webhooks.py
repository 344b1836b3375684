"""
Webhook signature validation.

Recharge signs every webhook with ``sha256(client_secret + raw_body)`` and sends
the hex digest in the X-Recharge-Hmac-Sha256 header. The client secret is not
the API access token.

Usage:
    if not is_valid_webhook(secret, request.body, request.headers):
        return 401
"""

import hashlib
import hmac
from collections.abc import Mapping, Sequence
from typing import Any

from ._logging import logger
from .exceptions import WebhookSignatureError

SIGNATURE_HEADER = "X-Recharge-Hmac-Sha256"


def _as_bytes(value: str | bytes) -> bytes:
    return value if isinstance(value, bytes) else value.encode("utf-8")


def compute_signature(client_secret: str | bytes, body: str | bytes) -> str:
    """Hex digest Recharge would send for ``body``. The secret comes first."""
    return hashlib.sha256(_as_bytes(client_secret) + _as_bytes(body)).hexdigest()


def is_valid_signature(client_secret: str | bytes, body: str | bytes, signature: str) -> bool:
    """
    Compares the expected signature with the received one in constant time.

    The body must be the raw request body: re-serialised JSON will not match.
    """
    return hmac.compare_digest(compute_signature(client_secret, body), signature)


def extract_signature(headers: Mapping[str, Any]) -> str:
    """
    Reads the signature header, ignoring case. Multi-valued headers use the first value.

    Raises:
        WebhookSignatureError: If the header is missing or empty
    """
    wanted = SIGNATURE_HEADER.lower()
    for key, value in headers.items():
        if str(key).lower() != wanted:
            continue
        if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
            value = value[0] if value else ""
        if isinstance(value, bytes):
            value = value.decode("utf-8", errors="replace")
        if value:
            return str(value)
        break

    raise WebhookSignatureError(f"Missing required webhook signature header: {SIGNATURE_HEADER}")


def is_valid_webhook(
    client_secret: str | bytes, body: str | bytes, headers: Mapping[str, Any]
) -> bool:
    """
    Validates a webhook request from its raw body and headers.

    Raises:
        WebhookSignatureError: If the signature header is missing
    """
    valid = is_valid_signature(client_secret, body, extract_signature(headers))
    if not valid:
        logger.warning("Webhook signature mismatch")
    return valid
