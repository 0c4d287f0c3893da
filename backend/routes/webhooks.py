"""Webhook Routes - Lemon Squeezy order events.

POST /api/webhooks/lemonsqueezy - signed with X-Signature (HMAC-SHA256 of the raw body)

Responses are plain text; Lemon Squeezy retries anything that is not 2xx.
"""
from fastapi import APIRouter, Request, Header
from fastapi.responses import PlainTextResponse
from typing import Optional
import logging

from services.lemonsqueezy_webhook_service import lemonsqueezy_webhook_service

logger = logging.getLogger(__name__)
router = APIRouter(tags=["webhooks"])


@router.post("/api/webhooks/lemonsqueezy", response_class=PlainTextResponse)
async def lemonsqueezy_webhook(
    request: Request,
    x_signature: Optional[str] = Header(None, alias="X-Signature"),
):
    payload = await request.body()
    status_code, message = await lemonsqueezy_webhook_service.process_webhook(
        payload=payload,
        signature=x_signature,
    )
    if status_code >= 400:
        logger.warning(f"Lemon Squeezy webhook rejected ({status_code}): {message}")
    return PlainTextResponse(message, status_code=status_code)
