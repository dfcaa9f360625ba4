"""
Models module untuk SocialAuth.
Berisi semua SQLAlchemy models untuk database.
"""

from socialauth.models.user import Account
from socialauth.models.refresh_token import RefreshToken
from socialauth.models.profile import AccountSettings, AccountStats
from socialauth.models.role import Role, AccountRole

__all__ = [
    "Account",
    "RefreshToken",
    "AccountSettings",
    "AccountStats",
    "Role",
    "AccountRole"
]
