"""Webhooks (Business API 2.0) and delivery signature checks.

Revolut signs each delivery with the webhook's signing secret::

    Revolut-Request-Timestamp: 1683650202360
    Revolut-Signature: v1=09a9989034a5...

where the signature is the hex HMAC-SHA256 of ``v1.{timestamp}.{raw body}``.
While a secret is being rotated the header carries several comma-separated
signatures; any of them matching is enough.
"""
from __future__ import annotations

import hashlib
import hmac
import time
from typing import Any, List, Optional, Union

from ..errors import SignatureVerificationError
from .base import Resource
from .entities import Webhook, WebhookEvent

__all__ = ["Webhooks", "signature_valid", "verify_signature", "SIGNATURE_TOLERANCE"]

SIGNATURE_VERSION = "v1"
SIGNATURE_TOLERANCE = 5 * 60  # seconds


def _expected_signature(payload: bytes, timestamp: str, signing_secret: str) -> bytes:
    # the raw body is signed as delivered, whatever its encoding
    message = f"{SIGNATURE_VERSION}.{timestamp}.".encode() + payload
    digest = hmac.new(signing_secret.encode(), message, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_VERSION}={digest}".encode()


def signature_valid(
    payload: Union[str, bytes],
    signature: str,
    timestamp: Union[str, int],
    signing_secret: str,
    *,
    tolerance: Optional[int] = SIGNATURE_TOLERANCE,
    now: Optional[float] = None,
) -> bool:
    """Return True when *signature* matches *payload* and *timestamp* is fresh.

    *timestamp* is the ``Revolut-Request-Timestamp`` header (epoch millis).
    Pass ``tolerance=None`` to skip the replay window check.
    """
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    try:
        sent_ms = int(timestamp)
    except (TypeError, ValueError):
        return False
    if tolerance is not None:
        now_ms = (now if now is not None else time.time()) * 1000
        if abs(now_ms - sent_ms) > tolerance * 1000:
            return False
    expected = _expected_signature(payload, str(timestamp), signing_secret)
    return any(
        hmac.compare_digest(expected, candidate.strip().encode("utf-8", "replace"))
        for candidate in (signature or "").split(",")
    )


def verify_signature(
    payload: Union[str, bytes],
    signature: str,
    timestamp: Union[str, int],
    signing_secret: str,
    **kwargs: Any,
) -> bool:
    if not signature_valid(payload, signature, timestamp, signing_secret, **kwargs):
        raise SignatureVerificationError("Revolut webhook signature verification failed")
    return True


class Webhooks(Resource):
    resource_name = "webhooks"
    entity = Webhook
    operations = frozenset({"list", "retrieve", "create", "update", "delete"})
    api_version = "2.0"

    def create(self, url: str, events: Optional[List[str]] = None, **attributes: Any) -> Webhook:  # type: ignore[override]
        attributes["url"] = url
        if events is not None:
            attributes["events"] = events
        return super().create(**attributes)

    def rotate_signing_secret(self, id: str, expiration_period: Optional[str] = None) -> Webhook:
        """Issue a new signing secret; the old one keeps working for *expiration_period* (ISO 8601, max P7D)."""
        data = {"expiration_period": expiration_period} if expiration_period else {}
        body = self.client.post(self.item_path(id, "rotate-signing-secret"), data=data).body
        return Webhook.from_payload(body)

    def failed_events(
        self,
        id: str,
        *,
        limit: Optional[int] = None,
        created_before: Optional[str] = None,
    ) -> List[WebhookEvent]:
        body = self.client.get(
            self.item_path(id, "failed-events"), limit=limit, created_before=created_before
        ).body
        return WebhookEvent.from_payload(body) or []

    signature_valid = staticmethod(signature_valid)
    verify_signature = staticmethod(verify_signature)
