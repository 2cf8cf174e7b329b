"""
API v1 Router.
"""

from fastapi import APIRouter
from ledger_backend.app.api.v1.endpoints import admin, auth, entries, ledger

router = APIRouter()

router.include_router(auth.router)
# Ledger entries: create / edit / delete / review
router.include_router(entries.router)
# Balance and dashboard statistics
router.include_router(ledger.router)
# User listing and audit trail
router.include_router(admin.router)
