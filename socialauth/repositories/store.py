"""
SQLAlchemy CredentialStore: satu AsyncSession sebagai unit of work untuk semua repositories.
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from socialauth.repositories.base import StoreConflictError
from socialauth.repositories.accounts import SQLAlchemyAccountRepository
from socialauth.repositories.refresh_tokens import SQLAlchemyRefreshTokenRepository
from socialauth.repositories.roles import SQLAlchemyRoleRepository
from socialauth.repositories.profiles import SQLAlchemyProfileRepository

logger = logging.getLogger(__name__)


class SQLAlchemyCredentialStore:
    """
    CredentialStore untuk satu request.

    Args:
        db: AsyncSession milik request ini
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.accounts = SQLAlchemyAccountRepository(db)
        self.refresh_tokens = SQLAlchemyRefreshTokenRepository(db)
        self.roles = SQLAlchemyRoleRepository(db)
        self.profiles = SQLAlchemyProfileRepository(db)

    async def commit(self) -> None:
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"Commit rejected by unique constraint: {e.orig}")
            raise StoreConflictError(str(e.orig)) from e

    async def rollback(self) -> None:
        await self.db.rollback()
