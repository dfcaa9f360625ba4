"""
Error type untuk SocialAuth.
Semua kegagalan bisnis direpresentasikan oleh satu exception dengan `kind` tertutup;
boundary layer (HTTP) yang memetakan kind ke status code.
"""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorKind(str, Enum):
    """Jenis-jenis kegagalan yang bisa dikembalikan oleh core."""
    CONFLICT = "CONFLICT"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    BAD_REQUEST = "BAD_REQUEST"


class AuthError(Exception):
    """
    Typed failure untuk semua operasi auth.

    Attributes:
        message: Pesan yang aman untuk ditampilkan ke client
        kind: ErrorKind
        details: Data tambahan (misal: locked_until)
    """

    def __init__(
        self,
        message: str,
        kind: ErrorKind,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.kind = kind
        self.details = details or {}
        super().__init__(self.message)

    @classmethod
    def conflict(cls, message: str = "Resource conflict") -> "AuthError":
        return cls(message, ErrorKind.CONFLICT)

    @classmethod
    def unauthorized(cls, message: str = "Authentication failed") -> "AuthError":
        return cls(message, ErrorKind.UNAUTHORIZED)

    @classmethod
    def forbidden(
        cls,
        message: str = "Permission denied",
        details: Optional[Dict[str, Any]] = None
    ) -> "AuthError":
        return cls(message, ErrorKind.FORBIDDEN, details)

    @classmethod
    def not_found(cls, message: str = "Resource not found") -> "AuthError":
        return cls(message, ErrorKind.NOT_FOUND)

    @classmethod
    def bad_request(cls, message: str = "Bad request") -> "AuthError":
        return cls(message, ErrorKind.BAD_REQUEST)

    def __repr__(self) -> str:
        return f"<AuthError(kind={self.kind.value}, message={self.message!r})>"
