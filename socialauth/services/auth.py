"""
Authentication service untuk SocialAuth.
Menangani business logic untuk registrasi, login, rotasi refresh token, verifikasi email, dan password.

Semua policy (threshold lockout, masa berlaku token) ada di sini; repositories
hanya menyimpan state dan notifier hanya mengirim email.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from functools import lru_cache, wraps
from typing import Callable, List, Optional
from uuid import UUID

from socialauth.core.config import settings
from socialauth.core.constants import NotificationType, ResponseMessage, RevocationReason
from socialauth.core.exceptions import AuthError
from socialauth.core.security import HashingParameters, PasswordHasher
from socialauth.core.tokens import TokenGenerator, token_generator
from socialauth.models.user import Account
from socialauth.models.refresh_token import RefreshToken
from socialauth.repositories.base import CredentialStore, StoreConflictError
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
from socialauth.services.notification import Notifier, NotificationDispatcher, get_dispatcher
from socialauth.services.token import TokenPayload, TokenService

logger = logging.getLogger(__name__)


@lru_cache()
def get_hashing_executor() -> ThreadPoolExecutor:
    """Worker pool khusus password hashing, terpisah dari default executor."""
    return ThreadPoolExecutor(
        max_workers=settings.PASSWORD_HASHING_WORKERS,
        thread_name_prefix="password-hasher"
    )


def shutdown_hashing_executor() -> None:
    get_hashing_executor().shutdown(wait=True)
    get_hashing_executor.cache_clear()


def bounded(func):
    """
    Jalankan operasi di bawah asyncio.wait_for.

    Setiap operasi menerima keyword `timeout` (detik); default dari
    OPERATION_TIMEOUT_SECONDS. Cancellation dari caller ikut diteruskan.
    """
    @wraps(func)
    async def wrapper(self, *args, timeout: Optional[float] = None, **kwargs):
        return await asyncio.wait_for(
            func(self, *args, **kwargs),
            timeout=timeout or self.operation_timeout
        )
    return wrapper


def normalize_identifier(value: str) -> str:
    """Lowercase dan trim untuk email dan username."""
    return value.strip().lower()


class AuthService:
    """
    Service class untuk authentication operations.

    Args:
        store: CredentialStore untuk request ini
        notifier: Pengirim email
        hasher: Password hasher
        token_service: JWT access token service
        generator: Random token generator
        dispatcher: Penjadwal notifikasi background
        executor: Thread pool untuk hashing
        clock: Sumber waktu (UTC)
        operation_timeout: Default timeout per operasi
    """

    def __init__(
        self,
        store: CredentialStore,
        notifier: Notifier,
        hasher: Optional[PasswordHasher] = None,
        token_service: Optional[TokenService] = None,
        generator: Optional[TokenGenerator] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
        executor: Optional[ThreadPoolExecutor] = None,
        clock: Optional[Callable[[], datetime]] = None,
        operation_timeout: Optional[float] = None
    ):
        self.store = store
        self.notifier = notifier
        self.hasher = hasher or PasswordHasher(HashingParameters.from_settings())
        self.token_service = token_service or TokenService()
        self.generator = generator or token_generator
        self.dispatcher = dispatcher or get_dispatcher()
        self.executor = executor or get_hashing_executor()
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.operation_timeout = operation_timeout or settings.OPERATION_TIMEOUT_SECONDS

    # Registration

    @bounded
    async def register(self, request: RegisterRequest) -> AccountResponse:
        """
        Registrasi akun baru.

        Proses:
        1. Normalisasi dan cek keunikan email/username
        2. Hash password, buat verification token (24 jam)
        3. Buat settings, stats, dan assign role default (jika sudah di-seed)
           dalam transaksi yang sama
        4. Commit lalu kirim email verifikasi di background

        Args:
            request: Data registrasi

        Returns:
            Account view

        Raises:
            AuthError: CONFLICT jika email atau username sudah dipakai
        """
        email = normalize_identifier(request.email)
        username = normalize_identifier(request.username) if request.username else None

        if await self.store.accounts.exists_by_email(email):
            raise AuthError.conflict(ResponseMessage.EMAIL_TAKEN)

        if username and await self.store.accounts.exists_by_username(username):
            raise AuthError.conflict(ResponseMessage.USERNAME_TAKEN)

        password_hash = await self._hash_password(request.password)
        now = self.clock()

        account = Account(
            id=self.generator.new_id(),
            email=email,
            username=username,
            full_name=request.full_name,
            date_of_birth=request.date_of_birth,
            gender=request.gender,
            password_hash=password_hash,
            email_verified=False,
            is_active=True,
            failed_login_attempts=0,
            is_locked=False,
            created_at=now
        )
        account.set_verification_token(
            self.generator.verification_token(),
            now + settings.email_verification_expire_timedelta
        )

        await self.store.accounts.create(account)
        await self.store.profiles.create_default_settings(account.id)
        await self.store.profiles.create_default_stats(account.id, now)
        role = await self.store.roles.get_by_name(settings.DEFAULT_ROLE_NAME)
        if role is not None:
            await self.store.roles.assign(account.id, role.id)
        else:
            logger.warning(
                f"Default role '{settings.DEFAULT_ROLE_NAME}' not found; account {account.id} registered without role"
            )

        try:
            await self.store.commit()
        except StoreConflictError:
            # Registrasi bersamaan dengan email/username yang sama
            raise AuthError.conflict(ResponseMessage.EMAIL_OR_USERNAME_TAKEN)

        logger.info(f"Account registered: {account.id}")

        self._notify(
            self.notifier.send_verification(
                account.email, account.display_name, account.email_verification_token
            ),
            NotificationType.EMAIL_VERIFICATION,
            account.id
        )

        return self._account_view(account, [role.name] if role is not None else [])

    # Login and sessions

    @bounded
    async def login(self, request: LoginRequest) -> LoginResponse:
        """
        Login dengan email dan password.

        Lockout diperiksa setelah password terverifikasi, sehingga password
        salah selama lockout tetap menambah counter.

        Raises:
            AuthError: UNAUTHORIZED untuk kredensial salah,
                FORBIDDEN untuk akun terkunci atau nonaktif
        """
        email = normalize_identifier(request.email)
        account = await self.store.accounts.get_by_email(email)

        if account is None:
            raise AuthError.unauthorized(ResponseMessage.INVALID_CREDENTIALS)

        if not await self._verify_password(request.password, account.password_hash):
            now = self.clock()
            updated = await self.store.accounts.record_failed_login(
                account.id,
                settings.MAX_LOGIN_ATTEMPTS,
                now + settings.account_lockout_timedelta
            )
            await self.store.commit()

            if updated is not None and updated.is_locked_at(now):
                logger.warning(
                    f"Account {account.id} locked until {updated.lockout_end.isoformat()} "
                    f"after {updated.failed_login_attempts} failed login attempts"
                )
            raise AuthError.unauthorized(ResponseMessage.INVALID_CREDENTIALS)

        now = self.clock()

        if account.is_locked_at(now):
            raise AuthError.forbidden(
                ResponseMessage.ACCOUNT_LOCKED,
                details={"locked_until": account.lockout_end.isoformat()}
            )

        if not account.is_active:
            raise AuthError.forbidden(ResponseMessage.ACCOUNT_DEACTIVATED)

        account.record_successful_login(now)
        await self.store.accounts.update(account, now)

        roles = await self.store.accounts.get_role_names(account.id)
        refresh_token = await self._create_refresh_token(account.id, now)
        response = self._login_response(account, roles, refresh_token.token, now)

        await self.store.commit()
        logger.info(f"Login successful: {account.id}")
        return response

    @bounded
    async def refresh_token(self, request: RefreshTokenRequest) -> LoginResponse:
        """
        Rotasi refresh token.

        Token yang sudah revoked atau expired dianggap reuse: semua sesi
        aktif akun tersebut di-revoke.

        Raises:
            AuthError: UNAUTHORIZED untuk token tidak dikenal, reuse, atau kalah race;
                NOT_FOUND jika pemilik token hilang; FORBIDDEN jika akun nonaktif
        """
        now = self.clock()
        existing = await self.store.refresh_tokens.get_by_token(request.refresh_token)

        if existing is None:
            raise AuthError.unauthorized(ResponseMessage.INVALID_REFRESH_TOKEN)

        if not existing.is_active_at(now):
            await self._revoke_all_on_reuse(existing.user_id, now)
            message = (
                ResponseMessage.REFRESH_TOKEN_REUSED if existing.is_revoked
                else ResponseMessage.REFRESH_TOKEN_EXPIRED
            )
            raise AuthError.unauthorized(message)

        account = await self.store.accounts.get_by_id(existing.user_id)
        if account is None:
            raise AuthError.not_found(ResponseMessage.ACCOUNT_NOT_FOUND)

        if not account.is_active:
            raise AuthError.forbidden(ResponseMessage.ACCOUNT_DEACTIVATED)

        new_value = self.generator.refresh_token()
        rotated = await self.store.refresh_tokens.revoke(
            existing.token,
            RevocationReason.REPLACED.value,
            now,
            replaced_by=new_value
        )
        if not rotated:
            # Request lain sudah merotasi token ini lebih dulu
            await self._revoke_all_on_reuse(account.id, now)
            raise AuthError.unauthorized(ResponseMessage.REFRESH_TOKEN_REUSED)

        roles = await self.store.accounts.get_role_names(account.id)
        new_token = await self._create_refresh_token(account.id, now, value=new_value)
        response = self._login_response(account, roles, new_token.token, now)

        await self.store.commit()
        return response

    @bounded
    async def logout(self, request: LogoutRequest) -> bool:
        """
        Revoke satu refresh token.

        Returns:
            True jika token berubah state; token yang tidak ada atau sudah
            revoked tetap dianggap sukses (False)
        """
        now = self.clock()
        revoked = await self.store.refresh_tokens.revoke(
            request.refresh_token,
            RevocationReason.LOGGED_OUT.value,
            now
        )
        if revoked:
            await self.store.commit()
        return revoked

    @bounded
    async def logout_all_devices(self, account_id: UUID) -> int:
        """
        Revoke semua refresh token aktif milik akun.

        Returns:
            Jumlah token yang di-revoke
        """
        now = self.clock()
        count = await self.store.refresh_tokens.revoke_all_for_account(
            account_id,
            RevocationReason.LOGGED_OUT_ALL.value,
            now
        )
        await self.store.commit()
        logger.info(f"Account {account_id} logged out from {count} sessions")
        return count

    @bounded
    async def get_active_sessions(self, account_id: UUID) -> List[SessionResponse]:
        tokens = await self.store.refresh_tokens.get_active_for_account(account_id, self.clock())
        return [SessionResponse.model_validate(token) for token in tokens]

    # Email verification

    @bounded
    async def verify_email(self, request: VerifyEmailRequest) -> None:
        """
        Verifikasi email dengan token.

        Token expired dibiarkan apa adanya supaya user bisa minta kirim ulang.

        Raises:
            AuthError: NOT_FOUND untuk token tidak dikenal, BAD_REQUEST jika expired
        """
        account = await self.store.accounts.get_by_verification_token(request.token)
        if account is None:
            raise AuthError.not_found(ResponseMessage.INVALID_VERIFICATION_TOKEN)

        now = self.clock()
        expires = account.email_verification_expires
        if expires is None or now >= expires:
            raise AuthError.bad_request(ResponseMessage.VERIFICATION_TOKEN_EXPIRED)

        account.mark_email_verified()
        await self.store.accounts.update(account, now)
        await self.store.commit()

        logger.info(f"Email verified: {account.id}")

        self._notify(
            self.notifier.send_welcome(account.email, account.display_name),
            NotificationType.WELCOME,
            account.id
        )

    @bounded
    async def resend_email_verification(self, request: ResendVerificationRequest) -> None:
        account = await self.store.accounts.get_by_email(normalize_identifier(request.email))
        if account is None:
            raise AuthError.not_found(ResponseMessage.ACCOUNT_NOT_FOUND)

        if account.email_verified:
            raise AuthError.bad_request(ResponseMessage.EMAIL_ALREADY_VERIFIED)

        now = self.clock()
        account.set_verification_token(
            self.generator.verification_token(),
            now + settings.email_verification_expire_timedelta
        )
        await self.store.accounts.update(account, now)
        await self.store.commit()

        self._notify(
            self.notifier.send_verification(
                account.email, account.display_name, account.email_verification_token
            ),
            NotificationType.EMAIL_VERIFICATION,
            account.id
        )

    # Password recovery

    @bounded
    async def forgot_password(self, request: ForgotPasswordRequest) -> None:
        """
        Minta reset password.

        Email yang tidak terdaftar tetap sukses tanpa side effect. Kedua jalur
        menjalankan lookup, generate token, UPDATE, dan commit yang sama;
        yang berbeda hanya pengiriman email di background.
        """
        email = normalize_identifier(request.email)
        account = await self.store.accounts.get_by_email(email)
        token = self.generator.reset_password_token()
        now = self.clock()

        await self.store.accounts.set_password_reset_token(
            email, token, now + settings.password_reset_expire_timedelta, now
        )
        await self.store.commit()

        if account is None:
            logger.info("Password reset requested for unknown email")
            return

        self._notify(
            self.notifier.send_password_reset(account.email, account.display_name, token),
            NotificationType.PASSWORD_RESET,
            account.id
        )

    @bounded
    async def reset_password(self, request: ResetPasswordRequest) -> None:
        """
        Set password baru dengan reset token. Akun yang terkunci ikut di-unlock.

        Raises:
            AuthError: NOT_FOUND untuk token tidak dikenal, BAD_REQUEST jika expired
        """
        account = await self.store.accounts.get_by_reset_token(request.token)
        if account is None:
            raise AuthError.not_found(ResponseMessage.INVALID_RESET_TOKEN)

        now = self.clock()
        expires = account.password_reset_expires
        if expires is None or now >= expires:
            raise AuthError.bad_request(ResponseMessage.RESET_TOKEN_EXPIRED)

        account.password_hash = await self._hash_password(request.new_password)
        account.clear_password_reset_token()

        if account.is_locked:
            account.unlock_account()
            logger.info(f"Account {account.id} unlocked by password reset")

        await self.store.accounts.update(account, now)
        await self.store.commit()

    @bounded
    async def change_password(self, account_id: UUID, request: ChangePasswordRequest) -> None:
        """
        Ganti password akun yang sedang login.

        Raises:
            AuthError: NOT_FOUND, UNAUTHORIZED jika password lama salah,
                BAD_REQUEST jika password baru sama dengan yang lama
        """
        account = await self.store.accounts.get_by_id(account_id)
        if account is None:
            raise AuthError.not_found(ResponseMessage.ACCOUNT_NOT_FOUND)

        if not await self._verify_password(request.current_password, account.password_hash):
            raise AuthError.unauthorized(ResponseMessage.INCORRECT_CURRENT_PASSWORD)

        if await self._verify_password(request.new_password, account.password_hash):
            raise AuthError.bad_request(ResponseMessage.PASSWORD_REUSED)

        account.password_hash = await self._hash_password(request.new_password)
        await self.store.accounts.update(account, self.clock())
        await self.store.commit()

        logger.info(f"Password changed: {account.id}")

    # Helpers

    async def _hash_password(self, password: str) -> str:
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(self.executor, self.hasher.hash, password)
        except ValueError:
            raise AuthError.bad_request(ResponseMessage.EMPTY_PASSWORD)

    async def _verify_password(self, password: str, encoded: str) -> bool:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, self.hasher.verify, password, encoded)

    async def _create_refresh_token(
        self,
        account_id: UUID,
        now: datetime,
        value: Optional[str] = None
    ) -> RefreshToken:
        refresh_token = RefreshToken(
            id=self.generator.new_id(),
            token=value or self.generator.refresh_token(),
            user_id=account_id,
            created_at=now,
            expires_at=now + settings.refresh_token_expire_timedelta
        )
        return await self.store.refresh_tokens.create(refresh_token)

    async def _revoke_all_on_reuse(self, account_id: UUID, now: datetime) -> None:
        count = await self.store.refresh_tokens.revoke_all_for_account(
            account_id,
            RevocationReason.REUSE_DETECTED.value,
            now
        )
        await self.store.commit()
        logger.warning(
            f"Refresh token reuse detected for account {account_id}; revoked {count} active sessions"
        )

    def _login_response(
        self,
        account: Account,
        roles: List[str],
        refresh_token: str,
        now: datetime
    ) -> LoginResponse:
        access_token = self.token_service.issue(
            TokenPayload(
                account_id=str(account.id),
                email=account.email,
                username=account.username or account.email,
                roles=roles
            )
        )
        return LoginResponse(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=now + self.token_service.expires_delta,
            user=self._account_view(account, roles)
        )

    @staticmethod
    def _account_view(account: Account, roles: List[str]) -> AccountResponse:
        return AccountResponse.model_validate(account).model_copy(update={"roles": roles})

    def _notify(self, coro, notification_type: NotificationType, account_id: UUID) -> None:
        self.dispatcher.dispatch(coro, f"{notification_type.value} for account {account_id}")
