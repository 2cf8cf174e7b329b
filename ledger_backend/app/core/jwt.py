"""
JWT access tokens.

Claims: ``sub`` (email), ``user_id``, ``role`` and ``exp``. Signed with
settings.secret_key using settings.algorithm (HS256 by default).
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from ledger_backend.app.core.config import settings
from ledger_backend.app.models.user import User


def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    """
    Issue a signed token for a user.

    Args:
        user: Authenticated user
        expires_delta: Lifetime override (defaults to access_token_expire_minutes)

    Returns:
        Encoded JWT
    """
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims = {
        "sub": user.email,
        "user_id": user.id,
        "role": user.role.value,
        "exp": datetime.now(timezone.utc) + lifetime,
    }
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Verified claims, or None for a malformed, tampered or expired token."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
