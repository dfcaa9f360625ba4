"""
Schemas module untuk SocialAuth.
Berisi semua Pydantic schemas untuk request/response validation.
"""

from socialauth.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    RefreshTokenRequest,
    LogoutRequest,
    VerifyEmailRequest,
    ResendVerificationRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    ChangePasswordRequest,
    AccountResponse,
    LoginResponse,
    SessionResponse
)
from socialauth.schemas.response import (
    MessageResponse,
    ErrorResponse
)

__all__ = [
    # Auth requests
    "RegisterRequest",
    "LoginRequest",
    "RefreshTokenRequest",
    "LogoutRequest",
    "VerifyEmailRequest",
    "ResendVerificationRequest",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "ChangePasswordRequest",

    # Auth responses
    "AccountResponse",
    "LoginResponse",
    "SessionResponse",

    # Generic responses
    "MessageResponse",
    "ErrorResponse"
]
