"""
Database seeding script for the first ADMIN user.

Creates the shop owner's account so the ledger can be used before anyone
registers. Run this script after database is set up but before first use.
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_backend.app.db.session import AsyncSessionLocal, engine, Base
from ledger_backend.app.models.user import User
# Registered with Base for create_all
from ledger_backend.app.models.audit_log import AuditLog  # noqa: F401
from ledger_backend.app.models.entry import Entry  # noqa: F401
from ledger_backend.app.models.balance import Balance  # noqa: F401
from ledger_backend.app.models.enums import UserRole
from ledger_backend.app.core.security import get_password_hash

ADMIN_EMAIL = "admin@shopledger.com"
ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin123"


async def seed_admin(db: AsyncSession) -> bool:
    """
    Create the default ADMIN user unless one with the same email exists.

    Returns:
        True if the user was created
    """
    result = await db.execute(
        select(User).where(User.email == ADMIN_EMAIL)
    )
    if result.scalar_one_or_none():
        return False

    db.add(User(
        email=ADMIN_EMAIL,
        username=ADMIN_USERNAME,
        hashed_password=get_password_hash(ADMIN_PASSWORD),
        role=UserRole.ADMIN,
        is_active=True
    ))
    await db.commit()
    return True


async def main():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        print("🌱 Starting user seeding...")
        if await seed_admin(db):
            print(f"✅ Created ADMIN user (email: {ADMIN_EMAIL}, password: {ADMIN_PASSWORD})")
            print("\nNote: other users register via POST /v1/auth/register")
        else:
            print("ℹ️  ADMIN user already exists, skipping seeding")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
