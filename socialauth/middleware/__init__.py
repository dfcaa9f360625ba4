"""
Middleware package untuk SocialAuth.
Berisi middleware untuk logging dan error handling.
"""

from socialauth.middleware.logging import LoggingMiddleware
from socialauth.middleware.error_handler import ErrorHandlerMiddleware, register_exception_handlers

__all__ = [
    "LoggingMiddleware",
    "ErrorHandlerMiddleware",
    "register_exception_handlers"
]
