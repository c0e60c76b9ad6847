"""
Shadi Recommendations - FastAPI Application Entry Point

This is the main entry point for the FastAPI application.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.database import async_session_maker, close_db, init_db
from app.middleware.security import setup_security_middleware
from app.routers import admin, auth, reviews
from app.services.audit_service import SQLAlchemyAuditStore
from app.services.security_service import SecurityService
from app.utils.error_handling import ErrorTrackingMiddleware, setup_exception_handlers

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.debug else logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def seed_admin():
    """Seed the initial admin profile when credentials are configured."""
    from app.services.auth_service import AuthService

    if not (settings.admin_email and settings.admin_password):
        return

    async with async_session_maker() as session:
        try:
            admin_profile = await AuthService(session).ensure_admin_profile(
                settings.admin_email, settings.admin_password
            )
            logger.info(f"Admin ready: {admin_profile.email}")
        except Exception as e:
            logger.warning(f"Could not seed admin: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info(f"Starting {settings.app_name}...")
    logger.info(f"Environment: {settings.app_env}")

    if settings.is_development:
        await init_db()
        logger.info("Database tables ensured")

    app.state.security_service = SecurityService(SQLAlchemyAuditStore(async_session_maker))
    await seed_admin()

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.app_name}...")
    await app.state.security_service.shutdown()
    logger.info("Audit buffer flushed")
    await close_db()
    logger.info("Database connections closed")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="Restaurant recommendations for the UAE",
    version="0.1.0",
    docs_url="/api/docs" if settings.is_development else None,
    redoc_url="/api/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_security_middleware(
    app=app,
    development_mode=settings.is_development,
    rate_limiting_enabled=True,
    origin_check_enabled=True,
)

setup_exception_handlers(app)
app.add_middleware(ErrorTrackingMiddleware)


# ===========================================
# API ROUTES
# ===========================================

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "0.1.0"}


app.include_router(auth.router, prefix="/api/v1/auth", tags=["Authentication"])
app.include_router(reviews.router, prefix="/api/v1/reviews", tags=["Reviews"])
app.include_router(admin.router, prefix="/api/v1/admin", tags=["Admin"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
