"""
Services module untuk SocialAuth.
Berisi business logic layer yang terpisah dari presentation dan data layers.
"""

from socialauth.services.auth import AuthService
from socialauth.services.email import EmailService
from socialauth.services.notification import Notifier, NotificationDispatcher, get_dispatcher
from socialauth.services.token import TokenPayload, TokenService

__all__ = [
    "AuthService",
    "EmailService",
    "Notifier",
    "NotificationDispatcher",
    "get_dispatcher",
    "TokenPayload",
    "TokenService"
]
