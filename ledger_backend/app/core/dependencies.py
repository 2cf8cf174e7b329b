"""
Request dependencies: the authenticated user and the ledger engine.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from ledger_backend.app.core.jwt import decode_access_token
from ledger_backend.app.core.token_revocation import is_token_revoked
from ledger_backend.app.db.session import get_db
from ledger_backend.app.domain.ledger.locks import sell_locks
from ledger_backend.app.domain.ledger.transition_engine import LedgerTransitionEngine
from ledger_backend.app.models.user import User

bearer_scheme = HTTPBearer()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db)
) -> dict:
    """
    Resolve the bearer token to its claims.

    The token must verify, not be revoked, and belong to a user that still
    exists and is active. The raw token is returned under ``token`` so
    logout can revoke it.

    Raises:
        HTTPException: 401 for any token problem, 403 for an inactive account
    """
    token = credentials.credentials

    claims = decode_access_token(token)
    if claims is None:
        raise _unauthorized("Could not validate credentials")
    if not claims.get("user_id"):
        raise _unauthorized("Invalid token payload")
    if await is_token_revoked(token):
        raise _unauthorized("Token has been revoked")

    user = await db.get(User, claims["user_id"])
    if user is None:
        raise _unauthorized("User not found")
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive",
        )

    # Role comes from the database so a demoted user loses access immediately
    return {**claims, "role": user.role.value, "token": token}


async def get_ledger_engine(db: AsyncSession = Depends(get_db)) -> LedgerTransitionEngine:
    """Transition engine bound to the request's session and the process-wide sell locks."""
    return LedgerTransitionEngine(db, locks=sell_locks)
