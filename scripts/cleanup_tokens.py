#!/usr/bin/env python
"""
Script untuk menghapus refresh token yang sudah lama expired.
Token disimpan selama REFRESH_TOKEN_RETENTION_DAYS setelah expired untuk audit.
Usage: python scripts/cleanup_tokens.py [--dry-run]
"""

import argparse
import asyncio
import sys
from datetime import datetime, timezone
from pathlib import Path
import logging

# Add parent directory to path
sys.path.append(str(Path(__file__).parent.parent))

from sqlalchemy import select, func

from socialauth.core.config import settings
from socialauth.db.session import engine, get_db_context
from socialauth.models.refresh_token import RefreshToken
from socialauth.repositories.refresh_tokens import SQLAlchemyRefreshTokenRepository

# Configure logging
logging.basicConfig(level=logging.INFO, format=settings.LOG_FORMAT)
logger = logging.getLogger(__name__)


async def cleanup(dry_run: bool = False) -> int:
    """
    Hapus token yang expired sebelum cutoff retention.

    Args:
        dry_run: Hanya hitung, tidak menghapus

    Returns:
        Jumlah token yang (akan) dihapus
    """
    cutoff = datetime.now(timezone.utc) - settings.refresh_token_retention_timedelta
    logger.info(f"Removing refresh tokens expired before {cutoff.isoformat()}")

    async with get_db_context() as db:
        if dry_run:
            result = await db.execute(
                select(func.count(RefreshToken.id)).where(RefreshToken.expires_at < cutoff)
            )
            count = result.scalar() or 0
            logger.info(f"[dry-run] {count} refresh tokens would be removed")
            return count

        return await SQLAlchemyRefreshTokenRepository(db).remove_expired(cutoff)


async def main(dry_run: bool) -> None:
    try:
        await cleanup(dry_run=dry_run)
    except Exception as e:
        logger.error(f"Token cleanup failed: {e}")
        sys.exit(1)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Remove long-expired refresh tokens")
    parser.add_argument("--dry-run", action="store_true", help="Only count matching tokens")
    args = parser.parse_args()

    asyncio.run(main(args.dry_run))
