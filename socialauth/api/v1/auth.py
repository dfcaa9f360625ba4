"""
Authentication endpoints untuk API v1.
Menangani registrasi, login, refresh token, logout, verifikasi email, dan password.
"""

from typing import List, Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from socialauth.api.dependencies.auth import get_auth_service, get_current_account_id
from socialauth.core.constants import ResponseMessage
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
from socialauth.schemas.response import MessageResponse, ErrorResponse
from socialauth.services.auth import AuthService

router = APIRouter(
    prefix="/auth",
    tags=["authentication"],
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse},
        status.HTTP_422_UNPROCESSABLE_ENTITY: {"model": ErrorResponse}
    }
)

AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
CurrentAccountId = Annotated[UUID, Depends(get_current_account_id)]


@router.post("/register", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, auth_service: AuthServiceDep) -> AccountResponse:
    """
    Registrasi akun baru.

    Email verifikasi dikirim di background; kegagalan kirim tidak
    membatalkan registrasi.
    """
    return await auth_service.register(payload)


@router.post("/login", response_model=LoginResponse)
async def login(payload: LoginRequest, auth_service: AuthServiceDep) -> LoginResponse:
    """
    Login dengan email dan password.

    Returns:
        Access token, refresh token, dan account view
    """
    return await auth_service.login(payload)


@router.post("/refresh", response_model=LoginResponse)
async def refresh_token(payload: RefreshTokenRequest, auth_service: AuthServiceDep) -> LoginResponse:
    """Tukar refresh token dengan pasangan token baru (rotasi)."""
    return await auth_service.refresh_token(payload)


@router.post("/logout", response_model=MessageResponse)
async def logout(payload: LogoutRequest, auth_service: AuthServiceDep) -> MessageResponse:
    revoked = await auth_service.logout(payload)
    return MessageResponse(
        message=ResponseMessage.LOGOUT_SUCCESS,
        details={"revoked": revoked}
    )


@router.post("/logout-all", response_model=MessageResponse)
async def logout_all_devices(
    account_id: CurrentAccountId,
    auth_service: AuthServiceDep
) -> MessageResponse:
    """Revoke semua sesi aktif milik akun yang sedang login."""
    count = await auth_service.logout_all_devices(account_id)
    return MessageResponse(
        message=ResponseMessage.LOGOUT_ALL_SUCCESS,
        details={"revoked_sessions": count}
    )


@router.post("/verify-email", response_model=MessageResponse)
async def verify_email(payload: VerifyEmailRequest, auth_service: AuthServiceDep) -> MessageResponse:
    await auth_service.verify_email(payload)
    return MessageResponse(message=ResponseMessage.EMAIL_VERIFIED)


@router.post("/resend-verification", response_model=MessageResponse)
async def resend_verification(
    payload: ResendVerificationRequest,
    auth_service: AuthServiceDep
) -> MessageResponse:
    await auth_service.resend_email_verification(payload)
    return MessageResponse(message=ResponseMessage.VERIFICATION_SENT)


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    payload: ForgotPasswordRequest,
    auth_service: AuthServiceDep
) -> MessageResponse:
    """
    Minta link reset password.

    Response selalu sama, terdaftar atau tidak.
    """
    await auth_service.forgot_password(payload)
    return MessageResponse(message=ResponseMessage.PASSWORD_RESET_REQUESTED)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    payload: ResetPasswordRequest,
    auth_service: AuthServiceDep
) -> MessageResponse:
    await auth_service.reset_password(payload)
    return MessageResponse(message=ResponseMessage.PASSWORD_RESET_SUCCESS)


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    payload: ChangePasswordRequest,
    account_id: CurrentAccountId,
    auth_service: AuthServiceDep
) -> MessageResponse:
    await auth_service.change_password(account_id, payload)
    return MessageResponse(message=ResponseMessage.PASSWORD_CHANGED)


@router.get("/sessions", response_model=List[SessionResponse])
async def get_active_sessions(
    account_id: CurrentAccountId,
    auth_service: AuthServiceDep
) -> List[SessionResponse]:
    """Daftar sesi aktif (refresh token), terbaru lebih dulu."""
    return await auth_service.get_active_sessions(account_id)
