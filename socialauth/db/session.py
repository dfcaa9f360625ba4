"""
Database session management untuk SocialAuth.
Menggunakan SQLAlchemy dengan async support.
"""

from typing import AsyncGenerator
import logging
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    AsyncEngine,
    create_async_engine,
    async_sessionmaker
)
from sqlalchemy.pool import NullPool
from sqlalchemy import event, text

from socialauth.core.config import settings

logger = logging.getLogger(__name__)


def create_engine(database_url: str = None) -> AsyncEngine:
    """
    Create async SQLAlchemy engine dengan konfigurasi dari settings.

    Args:
        database_url: Override untuk settings.DATABASE_URL

    Returns:
        Configured AsyncEngine
    """
    url = database_url or settings.DATABASE_URL

    engine_args = {
        "echo": settings.DEBUG,
        "pool_pre_ping": settings.DB_POOL_PRE_PING,
    }

    if settings.ENVIRONMENT == "test" or url.startswith("sqlite"):
        # SQLite dan test tidak butuh connection pool
        engine_args["poolclass"] = NullPool
    else:
        engine_args["pool_size"] = settings.DB_POOL_SIZE
        engine_args["max_overflow"] = settings.DB_MAX_OVERFLOW
        engine_args["pool_timeout"] = 30
        engine_args["pool_recycle"] = 3600

        if url.startswith("postgresql+asyncpg"):
            engine_args["connect_args"] = {
                "server_settings": {
                    "application_name": settings.APP_NAME,
                },
                "command_timeout": 60,
            }

    engine = create_async_engine(url, **engine_args)

    if settings.DEBUG:
        @event.listens_for(engine.sync_engine, "connect")
        def receive_connect(dbapi_connection, connection_record):
            """Log new connections."""
            logger.debug(f"New database connection established: {connection_record}")

    return engine


# Create global engine instance
engine = create_engine()

# Create session factory
SessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


@asynccontextmanager
async def get_db_context() -> AsyncGenerator[AsyncSession, None]:
    """
    Context manager untuk database session.
    Dipakai oleh scripts dan kode di luar FastAPI.

    Example:
        async with get_db_context() as db:
            ...
    """
    async with SessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def create_tables(bind: AsyncEngine = None) -> None:
    """Create semua tabel dari metadata (tanpa migrasi)."""
    from socialauth.db.base import Base
    import socialauth.models  # noqa: F401  register semua models

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")


async def seed_default_role() -> None:
    """Pastikan role default ada di katalog."""
    from socialauth.repositories.roles import SQLAlchemyRoleRepository

    async with get_db_context() as db:
        roles = SQLAlchemyRoleRepository(db)
        if await roles.get_by_name(settings.DEFAULT_ROLE_NAME) is None:
            await roles.create(settings.DEFAULT_ROLE_NAME, "Default role for new accounts")
            logger.info(f"Seeded default role '{settings.DEFAULT_ROLE_NAME}'")


async def init_db() -> None:
    """
    Initialize database.
    - Test connection
    - Create tables jika DB_CREATE_TABLES aktif
    - Seed role default
    """
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            logger.info("Database connection successful")

        if settings.DB_CREATE_TABLES:
            await create_tables()
            await seed_default_role()

        logger.info("Database initialized successfully")

    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise


async def close_db() -> None:
    """
    Close database connections.
    Should be called on application shutdown.
    """
    await engine.dispose()
    logger.info("Database connections closed")
