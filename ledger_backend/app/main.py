"""
Shop Ledger Backend application.

Run with ``uvicorn ledger_backend.app.main:app``.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from ledger_backend.app.core.config import settings
from ledger_backend.app.api.v1.router import router as api_v1_router
from ledger_backend.app.core.observability import ObservabilityMiddleware, configure_logging
from ledger_backend.app.core.redis_client import ping_redis, close_redis
from ledger_backend.app.core.exceptions import register_exception_handlers
from ledger_backend.app.db.session import engine, Base

# Models must be imported before create_all
from ledger_backend.app.models.user import User  # noqa: F401
from ledger_backend.app.models.audit_log import AuditLog  # noqa: F401
from ledger_backend.app.models.entry import Entry  # noqa: F401
from ledger_backend.app.models.balance import Balance  # noqa: F401

logger = logging.getLogger("shop_ledger")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables on startup; release the pools on shutdown."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("%s %s started", settings.app_name, settings.api_version)
    yield
    await close_redis()
    await engine.dispose()


def create_app() -> FastAPI:
    configure_logging()

    application = FastAPI(
        title=settings.app_name,
        version=settings.api_version,
        debug=settings.debug,
        description="Small-business bookkeeping ledger: sales, purchases, expenses, partial payments and a running balance",
        lifespan=lifespan,
    )
    application.add_middleware(ObservabilityMiddleware)
    register_exception_handlers(application)
    application.include_router(api_v1_router, prefix=f"/{settings.api_version}")

    @application.get("/health", tags=["Health"])
    async def health_check():
        """Liveness plus Redis reachability (token revocation degrades without it)."""
        return {
            "status": "healthy",
            "app_name": settings.app_name,
            "version": settings.api_version,
            "redis": await ping_redis(),
        }

    @application.get("/", tags=["Root"])
    async def root():
        return {
            "message": f"Welcome to {settings.app_name} API",
            "docs": "/docs",
            "health": "/health",
        }

    return application


app = create_app()
