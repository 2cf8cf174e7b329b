"""
Role guards for route dependencies.
"""

from fastapi import Depends, HTTPException, status
from ledger_backend.app.models.enums import UserRole
from ledger_backend.app.core.dependencies import get_current_user


def require_role(*allowed_roles: UserRole):
    """
    Dependency factory: pass the current user through if their role is allowed.

    Usage:
        @router.get("/entries")
        async def list_entries(current_user: dict = Depends(require_role(UserRole.ADMIN))):
            ...

    Raises:
        HTTPException 403 if the role is missing, unknown or not allowed
    """
    allowed = set(allowed_roles)

    async def role_checker(current_user: dict = Depends(get_current_user)) -> dict:
        try:
            role = UserRole(current_user.get("role"))
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Invalid role in token"
            )

        if role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required role: {', '.join(sorted(r.value for r in allowed))}"
            )
        return current_user

    return role_checker


# The ledger is the shop owner's tool
require_admin = require_role(UserRole.ADMIN)
