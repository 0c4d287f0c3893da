"""Authentication Routes

Endpoints:
- POST /api/auth/register - Register new user
- POST /api/auth/login - User login
- GET /api/auth/me - Get current user
- POST /api/auth/change-password - Change password
- DELETE /api/auth/account - Delete account and all generated documents
"""

from fastapi import APIRouter, HTTPException, Depends
import logging

from middleware import require_auth
from models import (
    ChangePasswordRequest,
    DeleteResult,
    TokenResponse,
    User,
    UserCreate,
    UserLogin,
    UserResponse,
)
from services.auth_service import auth_service, to_user_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=TokenResponse)
async def register(data: UserCreate):
    """Register a new user. New accounts start on the free plan."""
    try:
        return await auth_service.register(data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Registration failed: {e}")
        raise HTTPException(status_code=500, detail="Registration failed")


@router.post("/login", response_model=TokenResponse)
async def login(data: UserLogin):
    try:
        return await auth_service.login(data)
    except ValueError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except Exception as e:
        logger.error(f"Login failed: {e}")
        raise HTTPException(status_code=500, detail="Login failed")


@router.get("/me", response_model=UserResponse)
async def get_me(user: User = Depends(require_auth)):
    """Get current user info, including live premium/admin claims."""
    return to_user_response(user)


@router.post("/change-password")
async def change_password(
    data: ChangePasswordRequest,
    user: User = Depends(require_auth),
):
    try:
        await auth_service.change_password(
            user.user_id,
            data.current_password,
            data.new_password,
        )
        return {"message": "Password changed successfully"}
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Password change failed: {e}")
        raise HTTPException(status_code=500, detail="Password change failed")


@router.delete("/account", response_model=DeleteResult)
async def delete_account(user: User = Depends(require_auth)):
    """Permanently delete the account and its document history."""
    try:
        return await auth_service.delete_account(user.user_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Account deletion failed for {user.user_id}: {e}")
        raise HTTPException(status_code=500, detail="Could not delete user account and data.")
