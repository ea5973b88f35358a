"""
Gateway signature checks.

Payment callback: HMAC-SHA256 over `"<gateway_order_id>|<gateway_payment_id>"`
keyed with the API key secret, hex encoded. Webhook: HMAC-SHA256 over the raw
request body keyed with the webhook secret. Both compare in constant time and
answer False for any malformed input instead of raising.
"""

from __future__ import annotations

import hashlib
import hmac


def _hex_hmac(secret: str, message: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def _is_text(*values) -> bool:
    return all(isinstance(value, str) and value for value in values)


def compute_payment_signature(gateway_order_id: str, gateway_payment_id: str, secret: str) -> str:
    message = f"{gateway_order_id}|{gateway_payment_id}".encode("utf-8")
    return _hex_hmac(secret, message)


def verify_payment_signature(
    *,
    gateway_order_id: str,
    gateway_payment_id: str,
    signature: str,
    secret: str,
) -> bool:
    if not _is_text(gateway_order_id, gateway_payment_id, signature, secret):
        return False
    try:
        expected = compute_payment_signature(gateway_order_id, gateway_payment_id, secret)
        return hmac.compare_digest(expected.encode("ascii"), signature.strip().lower().encode("ascii"))
    except (UnicodeError, TypeError, ValueError):
        return False


def compute_webhook_signature(body: bytes, secret: str) -> str:
    return _hex_hmac(secret, body)


def verify_webhook_signature(*, body: bytes, signature: str, secret: str) -> bool:
    if not isinstance(body, (bytes, bytearray)) or not body or not _is_text(signature, secret):
        return False
    try:
        expected = compute_webhook_signature(bytes(body), secret)
        return hmac.compare_digest(expected.encode("ascii"), signature.strip().lower().encode("ascii"))
    except (UnicodeError, TypeError, ValueError):
        return False
