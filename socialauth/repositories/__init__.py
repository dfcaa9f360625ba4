"""
Repositories module untuk SocialAuth.
Berisi kontrak storage dan implementasi SQLAlchemy-nya.
"""

from socialauth.repositories.base import (
    AccountRepository,
    RefreshTokenRepository,
    RoleRepository,
    ProfileRepository,
    CredentialStore,
    StoreConflictError
)
from socialauth.repositories.store import SQLAlchemyCredentialStore

__all__ = [
    "AccountRepository",
    "RefreshTokenRepository",
    "RoleRepository",
    "ProfileRepository",
    "CredentialStore",
    "StoreConflictError",
    "SQLAlchemyCredentialStore"
]
