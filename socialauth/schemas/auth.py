"""
Authentication schemas untuk SocialAuth.
Request dan response untuk register, login, refresh token, verifikasi email, dan password.
"""

from datetime import date, datetime
from typing import Optional, List
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from socialauth.core.constants import Gender, ResponseMessage


class RegisterRequest(BaseModel):
    """
    Registration request schema.
    Password policy tidak divalidasi di sini.
    """
    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., min_length=1, description="Password")
    confirm_password: str = Field(..., min_length=1, description="Konfirmasi password")
    username: Optional[str] = Field(None, min_length=3, max_length=50, description="Username unik")
    full_name: Optional[str] = Field(None, max_length=100, description="Nama lengkap")
    date_of_birth: Optional[date] = Field(None, description="Tanggal lahir")
    gender: Optional[Gender] = Field(None, description="Gender")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "alice@example.com",
                "password": "alice123",
                "confirm_password": "alice123",
                "username": "alice",
                "full_name": "Alice Liddell"
            }
        }
    )

    @model_validator(mode="after")
    def passwords_match(self) -> "RegisterRequest":
        if self.password != self.confirm_password:
            raise ValueError(ResponseMessage.PASSWORD_MISMATCH)
        return self


class LoginRequest(BaseModel):
    """Login request schema."""
    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., min_length=1, description="Password")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "alice@example.com",
                "password": "alice123"
            }
        }
    )


class RefreshTokenRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1, description="Refresh token")


class LogoutRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1, description="Refresh token yang akan di-revoke")


class VerifyEmailRequest(BaseModel):
    token: str = Field(..., min_length=1, description="Email verification token")


class ResendVerificationRequest(BaseModel):
    email: EmailStr = Field(..., description="Email address")


class ForgotPasswordRequest(BaseModel):
    email: EmailStr = Field(..., description="Email address")


class ResetPasswordRequest(BaseModel):
    """Reset password dengan token dari email."""
    token: str = Field(..., min_length=1, description="Password reset token")
    new_password: str = Field(..., min_length=1, description="Password baru")
    confirm_password: str = Field(..., min_length=1, description="Konfirmasi password baru")

    @model_validator(mode="after")
    def passwords_match(self) -> "ResetPasswordRequest":
        if self.new_password != self.confirm_password:
            raise ValueError(ResponseMessage.PASSWORD_MISMATCH)
        return self


class ChangePasswordRequest(BaseModel):
    """Ganti password untuk akun yang sedang login."""
    current_password: str = Field(..., min_length=1, description="Password saat ini")
    new_password: str = Field(..., min_length=1, description="Password baru")
    confirm_password: str = Field(..., min_length=1, description="Konfirmasi password baru")

    @model_validator(mode="after")
    def passwords_match(self) -> "ChangePasswordRequest":
        if self.new_password != self.confirm_password:
            raise ValueError(ResponseMessage.PASSWORD_MISMATCH)
        return self


class AccountResponse(BaseModel):
    """
    Account view yang dikembalikan ke client.
    Tidak pernah berisi password hash atau token.
    """
    id: UUID
    email: str
    username: Optional[str] = None
    full_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    email_verified: bool
    is_active: bool
    created_at: datetime
    last_login_at: Optional[datetime] = None
    roles: List[str] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    """Response untuk login dan refresh token."""
    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="Opaque refresh token")
    token_type: str = Field("Bearer", description="Token type")
    expires_at: datetime = Field(..., description="Waktu expired access token")
    user: AccountResponse


class SessionResponse(BaseModel):
    """Satu sesi aktif (refresh token yang belum revoked/expired)."""
    id: UUID
    created_at: datetime
    expires_at: datetime

    model_config = ConfigDict(from_attributes=True)
