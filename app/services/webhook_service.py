from __future__ import annotations

import base64
import hashlib
import hmac
import time

from app.core.config import settings

# accepted clock skew between the sender and us, seconds
TOLERANCE = 5 * 60


def _secret_bytes(secret: str) -> bytes:
    if secret.startswith("whsec_"):
        secret = secret[len("whsec_"):]
    return base64.b64decode(secret)


def sign(secret: str, msg_id: str, timestamp: str, body: bytes) -> str:
    """Base64 HMAC-SHA256 over "{id}.{timestamp}.{body}"."""
    signed = f"{msg_id}.{timestamp}.".encode("utf-8") + body
    digest = hmac.new(_secret_bytes(secret), signed, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_identity_webhook(headers, body: bytes, secret: str | None = None, now: float | None = None) -> bool:
    """Check the svix-id / svix-timestamp / svix-signature headers of an IdP webhook.

    The signature header holds space separated "v1,<base64>" entries; any match
    passes. Returns False for missing headers, stale timestamps or a bad secret.
    """
    secret = secret if secret is not None else settings.WEBHOOK_SIGNING_SECRET
    msg_id = headers.get("svix-id")
    timestamp = headers.get("svix-timestamp")
    signature_header = headers.get("svix-signature")
    if not secret or not msg_id or not timestamp or not signature_header:
        return False

    try:
        ts = int(timestamp)
    except ValueError:
        return False
    now = time.time() if now is None else now
    if abs(now - ts) > TOLERANCE:
        return False

    try:
        expected = sign(secret, msg_id, timestamp, body)
    except (ValueError, TypeError):
        return False

    for part in signature_header.split():
        version, _, sig = part.partition(",")
        if version == "v1" and hmac.compare_digest(sig, expected):
            return True
    return False
