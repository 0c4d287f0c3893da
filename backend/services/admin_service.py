"""Admin Service - user listing, dashboard stats and manual claim grants."""

from datetime import datetime
from typing import List, Optional
import logging

from database import database
from models import AdminUser, CustomClaims, DashboardStats
from services.auth_service import auth_service
from services.document_store import document_store

logger = logging.getLogger(__name__)

MAX_LISTED_USERS = 1000


def _iso(value) -> Optional[str]:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def to_admin_user(record: dict) -> AdminUser:
    claims = record.get("claims") or {}
    return AdminUser(
        uid=record["user_id"],
        email=record.get("email"),
        display_name=record.get("display_name"),
        photo_url=record.get("photo_url"),
        disabled=bool(record.get("disabled", False)),
        email_verified=bool(record.get("email_verified", False)),
        creation_time=_iso(record.get("created_at")) or "",
        last_sign_in_time=_iso(record.get("last_sign_in_at")),
        is_premium=claims.get("premium") is True,
        is_admin=claims.get("admin") is True,
    )


class AdminService:

    def _get_db(self):
        return database.get_db()

    async def list_all_users(self) -> List[AdminUser]:
        """Up to 1000 users, newest first."""
        cursor = self._get_db().users.find(
            {},
            {"_id": 0, "password_hash": 0},
        ).sort("created_at", -1).limit(MAX_LISTED_USERS)
        records = await cursor.to_list(length=MAX_LISTED_USERS)
        return [to_admin_user(r) for r in records]

    async def get_dashboard_stats(self) -> DashboardStats:
        db = self._get_db()
        total_users = await db.users.count_documents({})
        premium_users = await db.users.count_documents({"claims.premium": True})
        total_documents = await document_store.count_documents()
        return DashboardStats(
            total_users=total_users,
            total_documents=total_documents,
            premium_users=premium_users,
        )

    async def set_user_claims(
        self,
        admin_user_id: str,
        user_id: str,
        premium: Optional[bool] = None,
        admin: Optional[bool] = None,
    ) -> CustomClaims:
        if premium is None and admin is None:
            raise ValueError("No claims to update")
        if admin is False and user_id == admin_user_id:
            raise ValueError("You cannot remove your own admin access")

        claims = await auth_service.set_custom_claims(user_id, premium=premium, admin=admin)
        logger.info(
            f"Admin {admin_user_id} set claims on {user_id}: premium={premium} admin={admin}"
        )
        return claims


admin_service = AdminService()
