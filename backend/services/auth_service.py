"""Auth Service - user accounts and custom claims.

Users live in the `users` collection. Claims (`premium`, `admin`) are
stored on the user record and copied into issued tokens; request guards
re-read them from the record so grants apply without a fresh login.
"""

from datetime import datetime, timezone
from typing import Optional
import logging
import os

from database import database
from auth import (
    hash_password,
    verify_password,
    create_access_token,
    decode_access_token,
    validate_password_strength,
)
from models import (
    CustomClaims,
    User,
    UserCreate,
    UserLogin,
    UserResponse,
    TokenResponse,
)

logger = logging.getLogger(__name__)


def _bootstrap_admin_emails() -> set:
    raw = (os.getenv("BOOTSTRAP_ADMIN_EMAILS") or "").strip()
    return {e.strip().lower() for e in raw.split(",") if e.strip()}


def to_user_response(user: User) -> UserResponse:
    return UserResponse(
        user_id=user.user_id,
        email=user.email,
        display_name=user.display_name,
        email_verified=user.email_verified,
        is_premium=user.is_premium,
        is_admin=user.is_admin,
        created_at=user.created_at,
        last_sign_in_at=user.last_sign_in_at,
    )


class AuthService:
    """Registration, login and claim management."""

    def _get_db(self):
        return database.get_db()

    def _issue_token(self, user: User) -> TokenResponse:
        token = create_access_token(
            user.user_id,
            email=user.email,
            premium=user.is_premium,
            admin=user.is_admin,
        )
        return TokenResponse(access_token=token, user=to_user_response(user))

    async def register(self, data: UserCreate) -> TokenResponse:
        """Register a new user and return a session token."""
        db = self._get_db()
        email = data.email.lower()

        existing = await db.users.find_one({"email": email})
        if existing:
            raise ValueError("Email already registered")

        is_valid, message = validate_password_strength(data.password)
        if not is_valid:
            raise ValueError(message)

        user = User(
            email=email,
            display_name=data.display_name,
            password_hash=hash_password(data.password),
            claims=CustomClaims(admin=email in _bootstrap_admin_emails()),
            last_sign_in_at=datetime.now(timezone.utc),
        )
        await db.users.insert_one(user.model_dump())

        logger.info(f"New user registered: {user.user_id}")
        return self._issue_token(user)

    async def login(self, data: UserLogin) -> TokenResponse:
        """Authenticate user and return token."""
        db = self._get_db()

        record = await db.users.find_one({"email": data.email.lower()}, {"_id": 0})
        if not record or not verify_password(data.password, record["password_hash"]):
            raise ValueError("Invalid email or password")

        if record.get("disabled"):
            raise ValueError("Account disabled")

        now = datetime.now(timezone.utc)
        await db.users.update_one(
            {"user_id": record["user_id"]},
            {"$set": {"last_sign_in_at": now}}
        )
        record["last_sign_in_at"] = now

        return self._issue_token(User(**record))

    async def get_current_user(self, token: str) -> Optional[User]:
        """Resolve a bearer token to a stored user, or None."""
        payload = decode_access_token(token)
        if not payload:
            return None
        return await self.get_user_by_id(payload.sub)

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        db = self._get_db()
        record = await db.users.find_one({"user_id": user_id}, {"_id": 0})
        if record:
            return User(**record)
        return None

    async def change_password(
        self,
        user_id: str,
        current_password: str,
        new_password: str,
    ) -> bool:
        db = self._get_db()

        record = await db.users.find_one({"user_id": user_id}, {"_id": 0})
        if not record:
            raise LookupError("User not found")

        if not verify_password(current_password, record["password_hash"]):
            raise ValueError("Current password is incorrect")

        is_valid, message = validate_password_strength(new_password)
        if not is_valid:
            raise ValueError(message)

        await db.users.update_one(
            {"user_id": user_id},
            {
                "$set": {
                    "password_hash": hash_password(new_password),
                    "updated_at": datetime.now(timezone.utc),
                }
            }
        )
        return True

    async def set_custom_claims(self, user_id: str, **claims: bool) -> CustomClaims:
        """Merge boolean claims into the user's stored claims."""
        db = self._get_db()

        record = await db.users.find_one({"user_id": user_id}, {"_id": 0, "claims": 1})
        if not record:
            raise LookupError(f"User not found: {user_id}")

        updates = {f"claims.{name}": bool(value) for name, value in claims.items() if value is not None}
        if updates:
            updates["updated_at"] = datetime.now(timezone.utc)
            await db.users.update_one({"user_id": user_id}, {"$set": updates})

        merged = dict(record.get("claims") or {})
        merged.update({name: bool(value) for name, value in claims.items() if value is not None})
        return CustomClaims(**merged)

    async def delete_account(self, user_id: str) -> dict:
        """Delete every generated document for the user, then the user record."""
        from services.document_store import document_store

        deleted = await document_store.delete_documents_for_user(user_id)
        logger.info(f"Deleted {deleted} documents for user {user_id}")

        db = self._get_db()
        result = await db.users.delete_one({"user_id": user_id})
        if result.deleted_count == 0:
            raise LookupError("User not found")
        logger.info(f"Deleted user account {user_id}")

        return {"success": True}


# Global service instance
auth_service = AuthService()
