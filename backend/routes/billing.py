"""Billing Routes - plan status and Lemon Squeezy links for the current user."""

from fastapi import APIRouter, Depends
import logging

from middleware import require_auth
from models import BillingInfo, User
from services.billing_service import get_billing_info

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/billing", tags=["billing"])


@router.get("", response_model=BillingInfo)
async def get_billing(user: User = Depends(require_auth)):
    return get_billing_info(user)
