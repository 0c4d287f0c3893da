"""Lemon Squeezy Webhook Service - premium provisioning from paid orders.

Key Principles:
1. Signature verification: the raw body is HMAC-SHA256 signed with the
   store's webhook secret and checked before the payload is parsed
2. Only paid `order_created` events grant anything
3. Idempotency: each order is granted once (`webhook_events` collection)
4. The grant is the `premium` claim on the user named in custom_data
"""
import hashlib
import hmac
import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from pymongo.errors import DuplicateKeyError

from database import database
from models import WebhookEvent, WebhookEventStatus
from services.auth_service import auth_service

logger = logging.getLogger(__name__)

ORDER_CREATED = "order_created"
PAID_STATUS = "paid"


def _get_webhook_secret() -> str:
    return (os.getenv("LEMONSQUEEZY_WEBHOOK_SECRET") or "").strip()


def verify_webhook_signature(raw_body: bytes, secret: str, signature_header: Optional[str]) -> bool:
    """Constant-time check of a hex HMAC-SHA256 signature over the raw body.

    Never raises; any malformed input is a mismatch.
    """
    try:
        digest = hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()
        return hmac.compare_digest(
            digest.encode("utf-8"),
            (signature_header or "").encode("utf-8"),
        )
    except (TypeError, ValueError, AttributeError):
        return False


def _event_key(payload: Dict[str, Any]) -> Optional[str]:
    data_id = (payload.get("data") or {}).get("id")
    event_name = (payload.get("meta") or {}).get("event_name")
    if not data_id or not event_name:
        return None
    return f"{event_name}:{data_id}"


class LemonSqueezyWebhookService:
    """Lemon Squeezy webhook handler with idempotency."""

    async def process_webhook(
        self,
        payload: bytes,
        signature: Optional[str],
    ) -> Tuple[int, str]:
        """
        Main webhook entry point.

        Returns:
            (http_status, message)
        """
        secret = _get_webhook_secret()
        if not secret or not verify_webhook_signature(payload, secret, signature):
            if not secret:
                logger.error("LEMONSQUEEZY_WEBHOOK_SECRET not set - rejecting webhook")
            else:
                logger.warning("Webhook signature verification failed")
            return 401, "Invalid signature."

        try:
            return await self._handle_payload(json.loads(payload))
        except Exception as e:
            logger.exception(f"Lemon Squeezy webhook error: {e}")
            return 500, f"Webhook handler failed: {e}"

    async def _handle_payload(self, event: Dict[str, Any]) -> Tuple[int, str]:
        meta = event.get("meta") or {}
        attributes = (event.get("data") or {}).get("attributes") or {}
        event_name = meta.get("event_name")
        event_key = _event_key(event)

        logger.info(
            "WEBHOOK_RECEIVED event_key=%s event_name=%s status=%s test_mode=%s",
            event_key, event_name, attributes.get("status"), meta.get("test_mode"),
        )

        if event_name != ORDER_CREATED:
            logger.info(f"Ignoring Lemon Squeezy event: {event_name}")
            return 200, "OK (event ignored)"

        if attributes.get("status") != PAID_STATUS:
            logger.info(f"Order {event_key} not paid (status={attributes.get('status')})")
            return 200, "OK (status not paid)"

        user_id = (meta.get("custom_data") or {}).get("user_id")
        if not user_id:
            logger.error(f"Order {event_key} has no user_id in custom_data")
            return 400, "Missing user_id in custom_data."

        db = database.get_db()
        if event_key:
            existing = await db.webhook_events.find_one({"event_id": event_key}, {"_id": 0})
            if existing and existing.get("status") == WebhookEventStatus.PROCESSED.value:
                logger.info(f"Event {event_key} already processed - skipping")
                return 200, "Already processed"
            if not existing:
                record = WebhookEvent(event_id=event_key, event_name=event_name, user_id=user_id)
                try:
                    await db.webhook_events.insert_one(record.model_dump())
                except DuplicateKeyError:
                    # Concurrent delivery of the same order already claimed it
                    logger.info(f"Event {event_key} is being processed by another delivery")
                    return 200, "Already processed"

        try:
            await auth_service.set_custom_claims(user_id, premium=True)
        except Exception as e:
            if event_key:
                await self._mark_event(event_key, WebhookEventStatus.FAILED, error=str(e))
            raise

        if event_key:
            await self._mark_event(event_key, WebhookEventStatus.PROCESSED)

        logger.info("WEBHOOK_PROCESSED_OK event_key=%s user_id=%s premium=granted", event_key, user_id)
        return 200, "Webhook processed successfully."

    async def _mark_event(
        self,
        event_key: str,
        status: WebhookEventStatus,
        error: Optional[str] = None,
    ) -> None:
        await database.get_db().webhook_events.update_one(
            {"event_id": event_key},
            {
                "$set": {
                    "status": status.value,
                    "processed_at": datetime.now(timezone.utc),
                    "error": error,
                }
            }
        )


# Global service instance
lemonsqueezy_webhook_service = LemonSqueezyWebhookService()
