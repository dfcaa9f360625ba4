"""
Database dependencies untuk FastAPI.
Menyediakan database session dan CredentialStore per request.
"""

from typing import AsyncGenerator, Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from socialauth.db.session import SessionLocal
from socialauth.repositories.store import SQLAlchemyCredentialStore


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency untuk mendapatkan database session.
    Menggunakan async context manager untuk proper cleanup.

    Yields:
        AsyncSession: Database session
    """
    async with SessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def get_store(
    db: Annotated[AsyncSession, Depends(get_db)]
) -> SQLAlchemyCredentialStore:
    """CredentialStore yang terikat ke session request ini."""
    return SQLAlchemyCredentialStore(db)
