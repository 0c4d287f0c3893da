"""Billing Service - Lemon Squeezy checkout and customer portal links.

The checkout link carries the user id in `checkout_data[custom][user_id]`;
Lemon Squeezy echoes it back as `meta.custom_data.user_id` on the
`order_created` webhook, which is how the premium grant finds the user.
"""
from typing import Optional
from urllib.parse import urlencode, urlsplit, urlunsplit
import logging
import os

from models import BillingInfo, User

logger = logging.getLogger(__name__)


def _append_query(base_url: str, params: dict) -> str:
    parts = urlsplit(base_url)
    extra = urlencode(params, safe="[]")
    query = f"{parts.query}&{extra}" if parts.query else extra
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def build_checkout_url(user: User) -> Optional[str]:
    base_url = (os.getenv("LEMON_SQUEEZY_SUBSCRIPTION_URL") or "").strip()
    if not base_url:
        logger.warning("LEMON_SQUEEZY_SUBSCRIPTION_URL not set - checkout unavailable")
        return None
    return _append_query(base_url, {
        "checkout_data[custom][user_id]": user.user_id,
        "checkout_data[email]": user.email,
    })


def build_customer_portal_url(user: User) -> Optional[str]:
    base_url = (os.getenv("LEMON_SQUEEZY_CUSTOMER_PORTAL_URL") or "").strip()
    if not base_url:
        return None
    return _append_query(base_url, {"email": user.email})


def get_billing_info(user: User) -> BillingInfo:
    is_premium = user.is_premium or user.is_admin
    return BillingInfo(
        plan="premium" if is_premium else "free",
        is_premium=user.is_premium,
        is_admin=user.is_admin,
        checkout_url=None if is_premium else build_checkout_url(user),
        customer_portal_url=build_customer_portal_url(user) if user.is_premium else None,
    )
