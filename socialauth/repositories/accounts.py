"""
SQLAlchemy implementation untuk AccountRepository.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, update, exists
from sqlalchemy.ext.asyncio import AsyncSession

from socialauth.models.user import Account
from socialauth.models.role import Role, AccountRole


class SQLAlchemyAccountRepository:
    """Account storage di atas AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _active(self):
        return select(Account).where(Account.deleted_at.is_(None))

    async def _first(self, query) -> Optional[Account]:
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_id(self, account_id: UUID) -> Optional[Account]:
        return await self._first(self._active().where(Account.id == account_id))

    async def get_by_email(self, email: str) -> Optional[Account]:
        return await self._first(self._active().where(Account.email == email))

    async def get_by_username(self, username: str) -> Optional[Account]:
        return await self._first(self._active().where(Account.username == username))

    async def get_by_verification_token(self, token: str) -> Optional[Account]:
        return await self._first(
            self._active().where(Account.email_verification_token == token)
        )

    async def get_by_reset_token(self, token: str) -> Optional[Account]:
        return await self._first(
            self._active().where(Account.password_reset_token == token)
        )

    async def exists_by_email(self, email: str) -> bool:
        result = await self.db.execute(
            select(exists().where(Account.email == email, Account.deleted_at.is_(None)))
        )
        return bool(result.scalar())

    async def exists_by_username(self, username: str) -> bool:
        result = await self.db.execute(
            select(exists().where(Account.username == username, Account.deleted_at.is_(None)))
        )
        return bool(result.scalar())

    async def create(self, account: Account) -> Account:
        self.db.add(account)
        return account

    async def update(self, account: Account, now: datetime) -> Account:
        account.updated_at = now
        self.db.add(account)
        return account

    async def record_failed_login(
        self,
        account_id: UUID,
        max_attempts: int,
        lockout_end: datetime
    ) -> Optional[Account]:
        """
        Increment di database, bukan di Python, supaya login bersamaan
        tidak saling menimpa counter.
        """
        await self.db.execute(
            update(Account)
            .where(Account.id == account_id)
            .values(failed_login_attempts=Account.failed_login_attempts + 1)
            .execution_options(synchronize_session=False)
        )

        # Row sudah terkunci oleh UPDATE pertama dalam transaksi yang sama
        await self.db.execute(
            update(Account)
            .where(
                Account.id == account_id,
                Account.failed_login_attempts >= max_attempts
            )
            .values(is_locked=True, lockout_end=lockout_end)
            .execution_options(synchronize_session=False)
        )

        return await self._first(
            select(Account)
            .where(Account.id == account_id)
            .execution_options(populate_existing=True)
        )

    async def set_password_reset_token(
        self,
        email: str,
        token: str,
        expires: datetime,
        now: datetime
    ) -> bool:
        # Default synchronize_session: objek Account yang sudah di-load ikut ter-update
        result = await self.db.execute(
            update(Account)
            .where(Account.email == email, Account.deleted_at.is_(None))
            .values(
                password_reset_token=token,
                password_reset_expires=expires,
                updated_at=now
            )
        )
        return result.rowcount == 1

    async def get_role_names(self, account_id: UUID) -> List[str]:
        result = await self.db.execute(
            select(Role.name)
            .join(AccountRole, AccountRole.role_id == Role.id)
            .where(AccountRole.user_id == account_id)
            .order_by(Role.name)
        )
        return list(result.scalars().all())
