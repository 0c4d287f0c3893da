from fastapi import Request, HTTPException, status
from typing import Callable, Optional
import logging
from models import User
from services.auth_service import auth_service

logger = logging.getLogger(__name__)

AUTH_REQUIRED_DETAIL = "Authentication required. Access denied."
NOT_AUTHORIZED_DETAIL = "You are not authorized to perform this action. Please sign in and try again."
DEFAULT_PREMIUM_DETAIL = "This is a premium feature. Please upgrade your plan."
ADMIN_REQUIRED_DETAIL = "You must be an administrator to perform this action."


def _bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    token = auth_header[7:].strip()
    return token or None


async def get_current_user(request: Request) -> Optional[User]:
    """Extract and validate current user from the bearer token."""
    token = _bearer_token(request)
    if not token:
        return None
    return await auth_service.get_current_user(token)


async def require_auth(request: Request) -> User:
    """Require a valid token that maps to an enabled user."""
    token = _bearer_token(request)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=AUTH_REQUIRED_DETAIL
        )

    user = await auth_service.get_current_user(token)
    if not user or user.disabled:
        # Token problems are logged, never echoed back
        logger.warning("Authentication token verification failed for %s", request.url.path)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=NOT_AUTHORIZED_DETAIL
        )

    request.state.user = user
    return user


def require_premium(detail: str = DEFAULT_PREMIUM_DETAIL) -> Callable:
    """Dependency factory for premium features. Admins bypass the check.

    Usage:
        @router.post("/generate")
        async def generate(user: User = Depends(require_premium("..."))):
            ...
    """
    async def dependency(request: Request) -> User:
        user = await require_auth(request)
        if not user.is_premium and not user.is_admin:
            logger.info("Premium gate denied user_id=%s path=%s", user.user_id, request.url.path)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=detail
            )
        return user

    return dependency


async def require_admin(request: Request) -> User:
    """Require the admin claim."""
    user = await require_auth(request)
    if not user.is_admin:
        logger.warning("Admin gate denied user_id=%s path=%s", user.user_id, request.url.path)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=ADMIN_REQUIRED_DETAIL
        )
    return user
