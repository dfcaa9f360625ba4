"""
Core module untuk SocialAuth.
Berisi komponen inti aplikasi seperti konfigurasi, password hashing, token generator, dan exceptions.
"""

from socialauth.core.config import settings
from socialauth.core.exceptions import AuthError, ErrorKind
from socialauth.core.security import HashingParameters, PasswordHasher
from socialauth.core.tokens import TokenGenerator, token_generator

__all__ = [
    "settings",
    "AuthError",
    "ErrorKind",
    "HashingParameters",
    "PasswordHasher",
    "TokenGenerator",
    "token_generator"
]
