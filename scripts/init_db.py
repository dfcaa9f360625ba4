#!/usr/bin/env python
"""
Script untuk inisialisasi database SocialAuth.
Membuat semua tabel dari models dan seed role default.
Usage: python scripts/init_db.py
"""

import asyncio
import sys
from pathlib import Path
import logging

# Add parent directory to path
sys.path.append(str(Path(__file__).parent.parent))

from sqlalchemy import inspect

from socialauth.core.config import settings
from socialauth.db.base import Base
from socialauth.db.session import engine, create_tables, seed_default_role

# Configure logging
logging.basicConfig(level=logging.INFO, format=settings.LOG_FORMAT)
logger = logging.getLogger(__name__)


async def verify_tables() -> bool:
    """Verify that all tables dari metadata sudah ada."""
    required_tables = set(Base.metadata.tables.keys())

    async with engine.connect() as conn:
        existing_tables = set(
            await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
        )

    missing_tables = required_tables - existing_tables
    if missing_tables:
        logger.warning(f"Missing tables: {sorted(missing_tables)}")
        return False

    logger.info(f"All required tables exist: {sorted(required_tables)}")
    return True


async def main():
    """Main initialization function."""
    logger.info(f"=== {settings.APP_NAME} Database Initialization ===")

    try:
        logger.info("Step 1: Creating database tables...")
        await create_tables()

        logger.info("Step 2: Verifying tables...")
        if not await verify_tables():
            raise RuntimeError("Table verification failed")

        logger.info("Step 3: Seeding default role...")
        await seed_default_role()

        logger.info("Database initialization completed successfully")
        logger.info("Start the API with 'uvicorn socialauth.main:app --reload'")

    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        sys.exit(1)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
