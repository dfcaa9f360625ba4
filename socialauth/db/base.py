"""
Base model untuk SQLAlchemy.
Semua model harus inherit dari BaseModel untuk mendapatkan common fields dan behavior.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional
import uuid

from sqlalchemy import Column, DateTime, Uuid, inspect
from sqlalchemy.orm import as_declarative
from sqlalchemy.types import TypeDecorator


def utcnow() -> datetime:
    """Waktu sekarang dalam UTC (timezone-aware)."""
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    DateTime yang selalu timezone-aware UTC.

    PostgreSQL menyimpan timezone dengan benar, tapi SQLite mengembalikan
    naive datetime; nilai naive dari database dianggap UTC.
    """
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


@as_declarative()
class Base:
    """
    Base class untuk semua SQLAlchemy models.
    Setiap model mendefinisikan __tablename__ sendiri.
    """

    def dict(self, exclude: Optional[set] = None) -> Dict[str, Any]:
        """
        Convert model instance to dictionary.

        Args:
            exclude: Set of fields to exclude

        Returns:
            Dictionary representation of model
        """
        exclude = exclude or set()

        result = {}
        for column in inspect(self.__class__).columns:
            if column.name in exclude:
                continue

            value = getattr(self, column.key)
            if isinstance(value, datetime):
                value = value.isoformat()
            elif isinstance(value, uuid.UUID):
                value = str(value)

            result[column.name] = value

        return result

    def __repr__(self) -> str:
        class_name = self.__class__.__name__

        primary_keys = []
        for column in inspect(self.__class__).primary_key:
            primary_keys.append(f"{column.name}={getattr(self, column.key)}")

        if primary_keys:
            return f"<{class_name}({', '.join(primary_keys)})>"
        return f"<{class_name}>"


class BaseModel(Base):
    """
    Abstract base model dengan UUID primary key dan created_at.
    """
    __abstract__ = True

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False
    )

    created_at = Column(
        UTCDateTime(),
        default=utcnow,
        nullable=False
    )


class TimestampMixin:
    """
    Mixin untuk updated_at.
    Repository yang men-set nilai ini secara eksplisit memakai injected clock.
    """

    updated_at = Column(
        UTCDateTime(),
        default=None,
        onupdate=utcnow,
        nullable=True
    )


class SoftDeleteMixin:
    """
    Mixin untuk soft delete functionality.
    """

    deleted_at = Column(
        UTCDateTime(),
        default=None,
        nullable=True,
        index=True
    )

    @property
    def is_deleted(self) -> bool:
        """Check if record is soft deleted."""
        return self.deleted_at is not None

    def soft_delete(self, now: Optional[datetime] = None) -> None:
        """Mark record as deleted."""
        self.deleted_at = now or utcnow()
