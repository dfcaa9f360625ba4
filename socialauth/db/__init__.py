"""
Database module untuk SocialAuth.
Berisi base model, session management, dan konfigurasi database.
"""

from socialauth.db.base import Base, BaseModel, UTCDateTime
from socialauth.db.session import (
    engine,
    SessionLocal,
    init_db,
    close_db
)

__all__ = [
    "Base",
    "BaseModel",
    "UTCDateTime",
    "engine",
    "SessionLocal",
    "init_db",
    "close_db"
]
