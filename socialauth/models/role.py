"""
Role model untuk SocialAuth.
Katalog role dikelola di luar service; di sini hanya lookup dan assignment.
"""

from sqlalchemy import Column, String, ForeignKey, UniqueConstraint, Uuid

from socialauth.db.base import BaseModel


class Role(BaseModel):
    """Role yang bisa di-assign ke akun."""

    __tablename__ = "roles"

    name = Column(String(50), unique=True, nullable=False, index=True)
    description = Column(String(255), nullable=True)


class AccountRole(BaseModel):
    """Relasi many-to-many antara akun dan role."""

    __tablename__ = "user_roles"

    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    role_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False
    )

    __table_args__ = (
        UniqueConstraint("user_id", "role_id", name="uq_user_roles_user_role"),
    )
