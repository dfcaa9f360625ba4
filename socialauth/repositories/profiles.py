"""
SQLAlchemy implementation untuk ProfileRepository.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from socialauth.models.profile import AccountSettings, AccountStats


class SQLAlchemyProfileRepository:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_default_settings(self, account_id: UUID) -> AccountSettings:
        """Settings default: akun publik, semua interaksi dan notifikasi aktif."""
        account_settings = AccountSettings(user_id=account_id)
        self.db.add(account_settings)
        return account_settings

    async def create_default_stats(self, account_id: UUID, now: datetime) -> AccountStats:
        stats = AccountStats(user_id=account_id, last_calculated_at=now)
        self.db.add(stats)
        return stats
