"""
Logout support: revoked tokens are kept in Redis until they would have
expired anyway.

Lookups fail open. If Redis is down a logged-out token keeps working until
its ``exp``, rather than every user being locked out.
"""

import logging
import ledger_backend.app.core.redis_client as redis_store
from ledger_backend.app.core.config import settings

logger = logging.getLogger("shop_ledger.auth")

REVOKED_KEY_PREFIX = "shop_ledger:revoked:"


def _revoked_key(token: str) -> str:
    return f"{REVOKED_KEY_PREFIX}{token}"


async def revoke_token(token: str, user_id: int) -> bool:
    """
    Put a token on the revocation list.

    Returns:
        False if Redis could not be reached (the token stays valid)
    """
    try:
        await redis_store.redis_client.set(
            _revoked_key(token),
            str(user_id),
            ex=settings.access_token_expire_minutes * 60
        )
    except Exception as exc:
        logger.warning("Could not revoke token of user %s: %s", user_id, exc)
        return False
    logger.info("Token revoked for user %s", user_id)
    return True


async def is_token_revoked(token: str) -> bool:
    try:
        return await redis_store.redis_client.exists(_revoked_key(token)) > 0
    except Exception as exc:
        logger.warning("Revocation check skipped: %s", exc)
        return False
