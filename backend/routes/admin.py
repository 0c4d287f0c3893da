from fastapi import APIRouter, HTTPException, Depends
from typing import List
import logging

from middleware import require_admin
from models import AdminUser, ClaimsUpdateRequest, CustomClaims, DashboardStats, User
from services.admin_service import admin_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/users", response_model=List[AdminUser])
async def list_users():
    """All users (up to 1000), newest first."""
    try:
        return await admin_service.list_all_users()
    except Exception as e:
        logger.error(f"Error listing all users: {e}")
        raise HTTPException(status_code=500, detail="Could not retrieve user list.")


@router.get("/stats", response_model=DashboardStats)
async def get_stats():
    try:
        return await admin_service.get_dashboard_stats()
    except Exception as e:
        logger.error(f"Error fetching dashboard stats: {e}")
        raise HTTPException(status_code=500, detail="Could not retrieve dashboard statistics.")


@router.put("/users/{user_id}/claims", response_model=CustomClaims)
async def update_user_claims(
    user_id: str,
    data: ClaimsUpdateRequest,
    admin: User = Depends(require_admin),
):
    """Grant or revoke premium/admin for a user."""
    try:
        return await admin_service.set_user_claims(
            admin.user_id,
            user_id,
            premium=data.premium,
            admin=data.admin,
        )
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating claims for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Could not update user claims.")
