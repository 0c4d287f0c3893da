"""Password hashing and session tokens.

Tokens are HS256 JWTs whose subject is the user_id. The premium/admin
claims are copied into the token for clients to read, but request guards
always re-check them against the stored user.
"""
from passlib.context import CryptContext
from jose import JWTError, jwt
from pydantic import BaseModel, ValidationError
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple
import os

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

JWT_SECRET = os.getenv("JWT_SECRET", "your-secret-key-change-in-production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRATION_HOURS = int(os.getenv("JWT_EXPIRATION_HOURS", "24"))

MIN_PASSWORD_LENGTH = 8

PASSWORD_RULES = (
    (lambda p: any(c.isupper() for c in p), "Password must contain at least one uppercase letter"),
    (lambda p: any(c.islower() for c in p), "Password must contain at least one lowercase letter"),
    (lambda p: any(c.isdigit() for c in p), "Password must contain at least one number"),
)


class TokenPayload(BaseModel):
    sub: str
    email: Optional[str] = None
    premium: bool = False
    admin: bool = False
    exp: int


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Stored value is not a recognised hash
        return False


def create_access_token(
    user_id: str,
    email: Optional[str] = None,
    premium: bool = False,
    admin: bool = False,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Issue a session token for a user."""
    issued_at = datetime.now(timezone.utc)
    expire = issued_at + (expires_delta or timedelta(hours=JWT_EXPIRATION_HOURS))
    claims = {
        "sub": user_id,
        "email": email,
        "premium": premium,
        "admin": admin,
        "iat": issued_at,
        "exp": expire,
    }
    return jwt.encode(claims, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[TokenPayload]:
    """Return the token payload, or None when it is malformed, forged or expired."""
    try:
        return TokenPayload(**jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM]))
    except (JWTError, ValidationError):
        return None


def validate_password_strength(password: str) -> Tuple[bool, str]:
    if len(password) < MIN_PASSWORD_LENGTH:
        return False, f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    for rule, message in PASSWORD_RULES:
        if not rule(password):
            return False, message
    return True, "Password is valid"
