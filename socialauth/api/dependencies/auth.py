"""
Authentication dependencies untuk FastAPI.
Menyediakan AuthService dan identitas akun dari bearer token.
"""

from functools import lru_cache
from typing import Optional, Annotated
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from socialauth.api.dependencies.database import get_store
from socialauth.core.config import settings
from socialauth.core.constants import ResponseMessage
from socialauth.core.exceptions import AuthError
from socialauth.core.security import HashingParameters, PasswordHasher
from socialauth.repositories.base import CredentialStore
from socialauth.services.auth import AuthService
from socialauth.services.email import EmailService
from socialauth.services.notification import Notifier, get_dispatcher
from socialauth.services.token import TokenService

# OAuth2 scheme untuk Bearer token
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_STR}/auth/login",
    auto_error=False
)


@lru_cache()
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(HashingParameters.from_settings())


@lru_cache()
def get_token_service() -> TokenService:
    return TokenService()


@lru_cache()
def get_notifier() -> Notifier:
    return EmailService()


def get_auth_service(
    store: Annotated[CredentialStore, Depends(get_store)],
    notifier: Annotated[Notifier, Depends(get_notifier)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    token_service: Annotated[TokenService, Depends(get_token_service)]
) -> AuthService:
    """
    Build AuthService untuk satu request.

    Args:
        store: CredentialStore request ini
        notifier: Email notifier
        hasher: Password hasher
        token_service: JWT service

    Returns:
        AuthService
    """
    return AuthService(
        store=store,
        notifier=notifier,
        hasher=hasher,
        token_service=token_service,
        dispatcher=get_dispatcher()
    )


async def get_current_account_id(
    request: Request,
    token: Annotated[Optional[str], Depends(oauth2_scheme)],
    token_service: Annotated[TokenService, Depends(get_token_service)]
) -> UUID:
    """
    Ambil account ID dari access token.
    Validasi hanya signature dan claims, tanpa lookup ke database.

    Raises:
        AuthError: UNAUTHORIZED jika token tidak ada atau tidak valid
    """
    if not token:
        raise AuthError.unauthorized("Not authenticated")

    claims = token_service.validate(token)
    if claims is None or not claims.get("sub"):
        raise AuthError.unauthorized(ResponseMessage.INVALID_ACCESS_TOKEN)

    try:
        account_id = UUID(claims["sub"])
    except ValueError:
        raise AuthError.unauthorized(ResponseMessage.INVALID_ACCESS_TOKEN)

    request.state.account_id = account_id
    return account_id
