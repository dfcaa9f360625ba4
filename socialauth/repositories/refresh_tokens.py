"""
SQLAlchemy implementation untuk RefreshTokenRepository.
Semua revoke berupa conditional UPDATE sehingga rotasi bersamaan hanya bisa dimenangkan satu request.
"""

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from socialauth.models.refresh_token import RefreshToken

logger = logging.getLogger(__name__)


class SQLAlchemyRefreshTokenRepository:
    """Refresh token storage di atas AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_token(self, token: str) -> Optional[RefreshToken]:
        result = await self.db.execute(
            select(RefreshToken)
            .where(RefreshToken.token == token)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_active_for_account(self, account_id: UUID, now: datetime) -> List[RefreshToken]:
        result = await self.db.execute(
            select(RefreshToken)
            .where(
                RefreshToken.user_id == account_id,
                RefreshToken.revoked_at.is_(None),
                RefreshToken.expires_at > now
            )
            .order_by(RefreshToken.created_at.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def create(self, refresh_token: RefreshToken) -> RefreshToken:
        self.db.add(refresh_token)
        return refresh_token

    async def revoke(
        self,
        token: str,
        reason: str,
        now: datetime,
        replaced_by: Optional[str] = None
    ) -> bool:
        result = await self.db.execute(
            update(RefreshToken)
            .where(
                RefreshToken.token == token,
                RefreshToken.revoked_at.is_(None),
                RefreshToken.expires_at > now
            )
            .values(
                revoked_at=now,
                revoked_reason=reason,
                replaced_by_token=replaced_by
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def revoke_all_for_account(self, account_id: UUID, reason: str, now: datetime) -> int:
        result = await self.db.execute(
            update(RefreshToken)
            .where(
                RefreshToken.user_id == account_id,
                RefreshToken.revoked_at.is_(None),
                RefreshToken.expires_at > now
            )
            .values(revoked_at=now, revoked_reason=reason)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    async def remove_expired(self, cutoff: datetime) -> int:
        result = await self.db.execute(
            delete(RefreshToken)
            .where(RefreshToken.expires_at < cutoff)
            .execution_options(synchronize_session=False)
        )
        removed = result.rowcount or 0
        logger.info(f"Removed {removed} refresh tokens expired before {cutoff.isoformat()}")
        return removed
