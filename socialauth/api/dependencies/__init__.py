"""
API dependencies module.
Berisi reusable dependencies untuk FastAPI endpoints.
"""

from socialauth.api.dependencies.auth import (
    get_auth_service,
    get_current_account_id,
    get_notifier,
    get_password_hasher,
    get_token_service
)
from socialauth.api.dependencies.database import get_db, get_store

__all__ = [
    "get_auth_service",
    "get_current_account_id",
    "get_notifier",
    "get_password_hasher",
    "get_token_service",
    "get_db",
    "get_store"
]
