"""
Main application entry point untuk SocialAuth.
Mengkonfigurasi FastAPI application dengan middleware, routers, dan handlers.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from socialauth.core.config import settings
from socialauth.db.session import init_db, close_db
from socialauth.api.v1 import auth
from socialauth.middleware.logging import LoggingMiddleware
from socialauth.middleware.error_handler import ErrorHandlerMiddleware, register_exception_handlers
from socialauth.services.auth import shutdown_hashing_executor
from socialauth.services.notification import get_dispatcher

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format=settings.LOG_FORMAT
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    try:
        await init_db()
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application")

    # Tunggu email yang masih dikirim sebelum menutup koneksi
    await get_dispatcher().drain()
    shutdown_hashing_executor()
    await close_db()

    logger.info("Application shutdown complete")


def create_application() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title=settings.APP_NAME,
        description="Authentication and session management for the social platform",
        version=settings.APP_VERSION,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=lifespan
    )

    # Middleware (yang ditambahkan terakhir berjalan paling luar)
    app.add_middleware(ErrorHandlerMiddleware, debug=settings.DEBUG)
    app.add_middleware(LoggingMiddleware, log_request_body=settings.DEBUG)

    register_exception_handlers(app)

    app.include_router(auth.router, prefix=settings.API_V1_STR)

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "status": "operational"
        }

    return app


# Create application instance
app = create_application()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "socialauth.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
