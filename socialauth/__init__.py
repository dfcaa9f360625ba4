"""
SocialAuth - authentication and session management for a social platform.

This package provides:
- Account registration with email verification
- Password login with account lockout
- Stateless JWT access tokens
- Rotating refresh tokens with reuse detection
- Password reset and password change

Built with FastAPI, SQLAlchemy, and PostgreSQL.
"""

__version__ = "1.0.0"

__all__ = [
    "__version__",
]
