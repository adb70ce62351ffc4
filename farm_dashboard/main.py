"""
Farm Dashboard
FastAPI Application Entry Point
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from farm_dashboard.admin.router import router as admin_router
from farm_dashboard.auth.rate_limit import limiter
from farm_dashboard.auth.router import router as auth_router
from farm_dashboard.config import settings
from farm_dashboard.core.errors import global_exception_handler
from farm_dashboard.insights.router import router as insights_router
from farm_dashboard.records.router import router as records_router
from farm_dashboard.reports.router import router as reports_router
from farm_dashboard.store.exceptions import StoreError

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)

# Request lines from the Supabase client are too chatty at INFO
logging.getLogger("httpx").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan handler.
    Logs startup and shutdown of the service.
    """
    # Startup
    logger.info("Starting %s v%s", settings.app_name, settings.app_version)
    logger.info("Environment: %s", settings.environment)
    logger.info("Debug mode: %s", settings.debug)
    if not settings.supabase_url:
        logger.warning("SUPABASE_URL is not set; requests that reach the store will fail")

    yield

    # Shutdown
    logger.info("%s shutdown complete", settings.app_name)


def create_application() -> FastAPI:
    """
    Application factory.
    Creates and configures the FastAPI application.
    """
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Farm management dashboard: flock health, finances, debts and reports",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    # Configure rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Sanitized responses for anything a route did not handle
    app.add_exception_handler(StoreError, global_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routers
    register_routers(app)

    return app


def register_routers(app: FastAPI) -> None:
    """
    Register all API routers.
    """
    # Health check endpoint (always available)
    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint for monitoring."""
        return {
            "status": "healthy",
            "app": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment
        }

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "message": f"Welcome to {settings.app_name} API",
            "version": settings.app_version,
            "docs": "/docs" if settings.debug else "Disabled in production",
        }

    # Authentication and navigation
    app.include_router(auth_router)

    # Dashboard views
    app.include_router(insights_router)

    # Records
    app.include_router(records_router)

    # Reports
    app.include_router(reports_router)

    # User management
    app.include_router(admin_router)


# Create the application instance
app = create_application()


if __name__ == "__main__":
    uvicorn.run(
        "farm_dashboard.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
