"""
SQLAlchemy implementation untuk RoleRepository.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from socialauth.models.role import Role, AccountRole


class SQLAlchemyRoleRepository:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_name(self, name: str) -> Optional[Role]:
        result = await self.db.execute(select(Role).where(Role.name == name))
        return result.scalar_one_or_none()

    async def create(self, name: str, description: Optional[str] = None) -> Role:
        role = Role(name=name, description=description)
        self.db.add(role)
        # Flush supaya role.id tersedia untuk assignment
        await self.db.flush()
        return role

    async def assign(self, account_id: UUID, role_id: UUID) -> AccountRole:
        account_role = AccountRole(user_id=account_id, role_id=role_id)
        self.db.add(account_role)
        return account_role
