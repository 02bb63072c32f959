"""
FastAPI Application Entry Point

RestoPOS - multi-tenant restaurant point of sale with a public digital menu.

Endpoints:
    - /api/auth: POS and super-admin login
    - /api/admin: account console, licenses and global settings
    - /api/settings, /api/menu, /api/orders, /api/reports: the POS
    - /api/digital-menu: public menu setup, themes, QR codes
    - GET /menu/{slug}: public themed menu page
    - GET /health: System health check

Run with:
    uvicorn restopos.main:app --reload --port 8001
"""

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

import redis
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

# Windows-specific event loop policy
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from restopos.core.config import get_settings, setup_logging
from restopos.database import async_session_maker, engine, get_db, init_db
from restopos.middleware import RequestLoggingMiddleware, register_exception_handlers
from restopos.routes import ROUTERS
from restopos.schemas import HealthResponse
from restopos.services import accounts, security

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    # Startup
    logger.info("=" * 60)
    logger.info(f"🚀 Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    # Initialize database
    await init_db()
    logger.info("✅ Database initialized")

    # Bootstrap the super-admin
    if settings.admin_username and settings.admin_password:
        async with async_session_maker() as db:
            if await accounts.ensure_admin_user(db, settings.admin_username, settings.admin_password):
                logger.info(f"✅ Admin user '{settings.admin_username}' created")

    async with async_session_maker() as db:
        purged = await security.purge_expired_sessions(db)
    if purged:
        logger.info(f"✅ Removed {purged} expired login sessions")

    logger.info(f"✅ Order export: {'enabled' if settings.order_export_enabled else 'disabled'}")

    missing = settings.validate_production_config()
    if missing:
        logger.warning(f"⚠️ Missing production config: {missing}")

    logger.info("=" * 60)
    logger.info("✅ Application ready!")
    logger.info("=" * 60)

    yield  # Application runs

    # Shutdown
    logger.info("Shutting down...")
    await engine.dispose()
    logger.info("✅ Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description=(
        "Multi-tenant restaurant POS: billing, order history, sales reports, "
        "license management and a themed public digital menu."
    ),
    version=settings.app_version,
    lifespan=lifespan,
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

for router in ROUTERS:
    app.include_router(router)


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", tags=["Root"])
async def root() -> dict[str, Any]:
    """API root with navigation links."""
    return {
        "success": True,
        "data": {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.app_version,
            "environment": settings.env_mode.value,
            "documentation": "/docs",
            "health": "/health",
        },
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    """Verify the database and the Redis broker are reachable."""

    # Check database
    db_status = "healthy"
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        db_status = f"unhealthy: {str(e)}"
        logger.error(f"Database health check failed: {e}")

    # Check Redis (only needed for order exports)
    redis_status = "disabled"
    if settings.order_export_enabled:
        redis_status = "healthy"
        try:
            r = redis.Redis.from_url(settings.redis_url, socket_timeout=2)
            r.ping()
            r.close()
        except redis.RedisError as e:
            redis_status = f"unhealthy: {str(e)}"
            logger.error(f"Redis health check failed: {e}")

    overall = "operational" if db_status == "healthy" and redis_status in ("healthy", "disabled") else "degraded"

    return HealthResponse(
        status=overall,
        database=db_status,
        redis=redis_status,
        timestamp=datetime.now(),
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("restopos.main:app", host=settings.api_host, port=settings.api_port, reload=settings.debug)
