import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from jose import jwt

from app.config import get_settings


def hash_secret(value: str) -> str:
    """Hash a password or reset token with bcrypt."""
    return bcrypt.hashpw(value.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_secret(value: str, hashed: str) -> bool:
    """Check a plain value against a bcrypt hash."""
    try:
        return bcrypt.checkpw(value.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def generate_reset_token() -> str:
    return secrets.token_urlsafe(32)


def create_access_token(subject: Any) -> str:
    """
    Issue a signed access token for an admin.

    Args:
        subject: Admin ID stored in the `sub` claim

    Returns:
        Encoded token; the `jti` and `exp` claims drive logout revocation
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    expires_at = now + timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    jti = uuid.uuid4().hex
    claims = {
        "sub": str(subject),
        "jti": jti,
        "iat": int(now.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Verify and decode an access token.

    Raises:
        jose.JWTError: If the signature is invalid or the token expired
    """
    settings = get_settings()
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
