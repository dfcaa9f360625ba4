"""
Tests for AuthService business logic.
"""

import asyncio
from datetime import timedelta

import pytest
from sqlalchemy import delete, select

from socialauth.core.config import settings
from socialauth.core.constants import ResponseMessage, RevocationReason
from socialauth.core.exceptions import AuthError, ErrorKind
from socialauth.core.tokens import TokenGenerator
from socialauth.models.profile import AccountSettings, AccountStats
from socialauth.models.role import Role
from socialauth.repositories.base import StoreConflictError
from socialauth.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    RefreshTokenRequest,
    LogoutRequest,
    VerifyEmailRequest,
    ResendVerificationRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    ChangePasswordRequest
)
from socialauth.services.auth import AuthService, normalize_identifier


def login_request(email: str = "alice@example.com", password: str = "alice123") -> LoginRequest:
    return LoginRequest(email=email, password=password)


async def fail_login(auth_service: AuthService, times: int, email: str = "alice@example.com") -> None:
    for _ in range(times):
        with pytest.raises(AuthError) as exc_info:
            await auth_service.login(login_request(email=email, password="wrong-password"))
        assert exc_info.value.kind == ErrorKind.UNAUTHORIZED


@pytest.mark.asyncio
@pytest.mark.unit
class TestRegistration:
    """Test registrasi akun."""

    async def test_register_creates_account(
        self, auth_service, store, notifier, dispatcher, alice_registration, clock
    ):
        account = await auth_service.register(alice_registration)

        assert account.email == "alice@example.com"
        assert account.username == "alice"
        assert account.full_name == "Alice Liddell"
        assert account.email_verified is False
        assert account.is_active is True
        assert account.roles == ["User"]
        assert account.created_at == clock.now

        stored = await store.accounts.get_by_id(account.id)
        assert stored.password_hash != "alice123"
        assert stored.failed_login_attempts == 0
        assert stored.email_verification_expires == clock.now + timedelta(hours=24)
        assert await store.accounts.get_role_names(account.id) == ["User"]

        await dispatcher.drain()
        sent = notifier.of_type("verification")
        assert len(sent) == 1
        assert sent[0]["email"] == "alice@example.com"
        assert sent[0]["name"] == "Alice Liddell"
        assert sent[0]["token"] == stored.email_verification_token

    async def test_register_creates_profile_rows(self, auth_service, db_session, alice_registration):
        account = await auth_service.register(alice_registration)

        account_settings = (await db_session.execute(
            select(AccountSettings).where(AccountSettings.user_id == account.id)
        )).scalar_one()
        stats = (await db_session.execute(
            select(AccountStats).where(AccountStats.user_id == account.id)
        )).scalar_one()

        assert account_settings.is_private_account is False
        assert account_settings.email_notifications_enabled is True
        assert stats.followers_count == 0
        assert stats.total_views == 0

    async def test_register_normalizes_identifiers(self, auth_service):
        account = await auth_service.register(RegisterRequest(
            email="Carol@Example.COM",
            password="carolpass",
            confirm_password="carolpass",
            username="CarolK"
        ))

        assert account.email == "carol@example.com"
        assert account.username == "carolk"

    async def test_register_without_username(self, auth_service, notifier, dispatcher):
        await auth_service.register(RegisterRequest(
            email="nousername@example.com",
            password="secret",
            confirm_password="secret"
        ))

        await dispatcher.drain()
        assert notifier.of_type("verification")[0]["name"] == "User"

    async def test_register_duplicate_email(self, auth_service, alice_registration):
        await auth_service.register(alice_registration)

        duplicate = alice_registration.model_copy(update={"username": "alice2"})
        with pytest.raises(AuthError) as exc_info:
            await auth_service.register(duplicate)

        assert exc_info.value.kind == ErrorKind.CONFLICT
        assert exc_info.value.message == ResponseMessage.EMAIL_TAKEN

    async def test_register_duplicate_email_case_insensitive(self, auth_service, alice_registration):
        await auth_service.register(alice_registration)

        duplicate = alice_registration.model_copy(
            update={"email": "ALICE@example.com", "username": "alice2"}
        )
        with pytest.raises(AuthError) as exc_info:
            await auth_service.register(duplicate)

        assert exc_info.value.kind == ErrorKind.CONFLICT

    async def test_register_duplicate_username(self, auth_service, alice_registration):
        await auth_service.register(alice_registration)

        duplicate = alice_registration.model_copy(update={"email": "other@example.com"})
        with pytest.raises(AuthError) as exc_info:
            await auth_service.register(duplicate)

        assert exc_info.value.kind == ErrorKind.CONFLICT
        assert exc_info.value.message == ResponseMessage.USERNAME_TAKEN

    async def test_register_without_seeded_role(self, auth_service, store, db_session, alice_registration):
        await db_session.execute(delete(Role))
        await db_session.commit()

        account = await auth_service.register(alice_registration)

        assert account.roles == []
        assert await store.accounts.get_role_names(account.id) == []
        assert await store.roles.get_by_name(settings.DEFAULT_ROLE_NAME) is None

    async def test_concurrent_duplicate_reported_as_conflict(
        self, auth_service, store, alice_registration, monkeypatch
    ):
        async def conflicting_commit():
            raise StoreConflictError("UNIQUE constraint failed: users.username")

        monkeypatch.setattr(store, "commit", conflicting_commit)

        with pytest.raises(AuthError) as exc_info:
            await auth_service.register(alice_registration)

        assert exc_info.value.kind == ErrorKind.CONFLICT
        assert exc_info.value.message == ResponseMessage.EMAIL_OR_USERNAME_TAKEN

    async def test_register_blank_password(self, auth_service):
        with pytest.raises(AuthError) as exc_info:
            await auth_service.register(RegisterRequest(
                email="blank@example.com",
                password="   ",
                confirm_password="   "
            ))

        assert exc_info.value.kind == ErrorKind.BAD_REQUEST
        assert exc_info.value.message == ResponseMessage.EMPTY_PASSWORD

    async def test_notification_failure_does_not_fail_registration(
        self, store, hasher, token_service, dispatcher, executor, clock, alice_registration
    ):
        class BrokenNotifier:
            async def send_verification(self, email, name, token):
                raise ConnectionError("smtp down")

            async def send_password_reset(self, email, name, token):
                raise ConnectionError("smtp down")

            async def send_welcome(self, email, name):
                raise ConnectionError("smtp down")

        service = AuthService(
            store=store,
            notifier=BrokenNotifier(),
            hasher=hasher,
            token_service=token_service,
            dispatcher=dispatcher,
            executor=executor,
            clock=clock
        )

        account = await service.register(alice_registration)
        await dispatcher.drain()

        assert await store.accounts.get_by_id(account.id) is not None
        assert dispatcher.pending == 0

    def test_normalize_identifier(self):
        assert normalize_identifier("  Alice@Example.com ") == "alice@example.com"


@pytest.mark.asyncio
@pytest.mark.unit
class TestLogin:
    """Test login dan lockout."""

    async def test_login_success(self, auth_service, token_service, store, alice_registration, clock):
        await auth_service.register(alice_registration)

        response = await auth_service.login(login_request())

        assert response.token_type == "Bearer"
        assert response.user.email == "alice@example.com"
        assert response.user.roles == ["User"]
        assert response.user.last_login_at == clock.now
        assert response.expires_at == clock.now + token_service.expires_delta

        claims = token_service.validate(response.access_token)
        assert claims["sub"] == str(response.user.id)
        assert claims["username"] == "alice"
        assert claims["roles"] == ["User"]

        stored = await store.refresh_tokens.get_by_token(response.refresh_token)
        assert stored.user_id == response.user.id
        assert stored.expires_at == clock.now + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)

    async def test_login_email_case_insensitive(self, auth_service, alice_registration):
        await auth_service.register(alice_registration)

        response = await auth_service.login(login_request(email="ALICE@Example.com"))

        assert response.user.username == "alice"

    async def test_access_token_falls_back_to_email(self, auth_service, token_service):
        await auth_service.register(RegisterRequest(
            email="plain@example.com",
            password="plainpass",
            confirm_password="plainpass"
        ))

        response = await auth_service.login(login_request("plain@example.com", "plainpass"))

        assert token_service.validate(response.access_token)["username"] == "plain@example.com"

    async def test_login_unknown_email(self, auth_service):
        with pytest.raises(AuthError) as exc_info:
            await auth_service.login(login_request(email="ghost@example.com"))

        assert exc_info.value.kind == ErrorKind.UNAUTHORIZED
        assert exc_info.value.message == ResponseMessage.INVALID_CREDENTIALS

    async def test_login_wrong_password_counts(self, auth_service, store, alice_registration):
        account = await auth_service.register(alice_registration)

        await fail_login(auth_service, 4)

        stored = await store.accounts.get_by_id(account.id)
        assert stored.failed_login_attempts == 4
        assert stored.is_locked is False

    async def test_lockout_on_fifth_failure(self, auth_service, store, alice_registration, clock):
        account = await auth_service.register(alice_registration)

        await fail_login(auth_service, 5)

        stored = await store.accounts.get_by_id(account.id)
        assert stored.failed_login_attempts == 5
        assert stored.is_locked is True
        assert stored.lockout_end == clock.now + timedelta(minutes=15)

    async def test_locked_account_rejects_correct_password(
        self, auth_service, alice_registration, clock
    ):
        await auth_service.register(alice_registration)
        await fail_login(auth_service, 5)
        lockout_end = clock.now + timedelta(minutes=15)

        clock.advance(minutes=5)
        with pytest.raises(AuthError) as exc_info:
            await auth_service.login(login_request())

        assert exc_info.value.kind == ErrorKind.FORBIDDEN
        assert exc_info.value.message == ResponseMessage.ACCOUNT_LOCKED
        assert exc_info.value.details["locked_until"] == lockout_end.isoformat()

    async def test_wrong_password_during_lockout_extends_lock(
        self, auth_service, store, alice_registration, clock
    ):
        account = await auth_service.register(alice_registration)
        await fail_login(auth_service, 5)

        clock.advance(minutes=10)
        await fail_login(auth_service, 1)

        stored = await store.accounts.get_by_id(account.id)
        assert stored.failed_login_attempts == 6
        assert stored.lockout_end == clock.now + timedelta(minutes=15)

    async def test_lockout_expires(self, auth_service, store, alice_registration, clock):
        account = await auth_service.register(alice_registration)
        await fail_login(auth_service, 5)

        clock.advance(minutes=15, seconds=1)
        response = await auth_service.login(login_request())

        assert response.user.id == account.id
        stored = await store.accounts.get_by_id(account.id)
        assert stored.failed_login_attempts == 0
        assert stored.is_locked is False
        assert stored.lockout_end is None

    async def test_success_resets_counter(self, auth_service, store, alice_registration):
        account = await auth_service.register(alice_registration)
        await fail_login(auth_service, 2)

        await auth_service.login(login_request())
        await fail_login(auth_service, 4)

        stored = await store.accounts.get_by_id(account.id)
        assert stored.failed_login_attempts == 4
        assert stored.is_locked is False

    async def test_deactivated_account(self, auth_service, store, alice_registration, clock):
        account = await auth_service.register(alice_registration)
        stored = await store.accounts.get_by_id(account.id)
        stored.is_active = False
        await store.accounts.update(stored, clock.now)
        await store.commit()

        with pytest.raises(AuthError) as exc_info:
            await auth_service.login(login_request())

        assert exc_info.value.kind == ErrorKind.FORBIDDEN
        assert exc_info.value.message == ResponseMessage.ACCOUNT_DEACTIVATED

    async def test_operation_timeout(self, auth_service, store, monkeypatch):
        async def slow_lookup(email):
            await asyncio.sleep(5)

        monkeypatch.setattr(store.accounts, "get_by_email", slow_lookup)

        with pytest.raises(asyncio.TimeoutError):
            await auth_service.login(login_request(), timeout=0.05)


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.security
class TestRefreshRotation:
    """Test rotasi refresh token dan deteksi reuse."""

    async def test_refresh_rotates_token(self, auth_service, store, alice_registration):
        await auth_service.register(alice_registration)
        login = await auth_service.login(login_request())

        refreshed = await auth_service.refresh_token(
            RefreshTokenRequest(refresh_token=login.refresh_token)
        )

        assert refreshed.refresh_token != login.refresh_token
        assert refreshed.user.id == login.user.id
        assert refreshed.user.roles == ["User"]

        old = await store.refresh_tokens.get_by_token(login.refresh_token)
        assert old.is_revoked is True
        assert old.revoked_reason == RevocationReason.REPLACED.value
        assert old.replaced_by_token == refreshed.refresh_token

        new = await store.refresh_tokens.get_by_token(refreshed.refresh_token)
        assert new.is_revoked is False

    async def test_reuse_revokes_all_sessions(self, auth_service, store, alice_registration, clock):
        await auth_service.register(alice_registration)
        first = await auth_service.login(login_request())
        other_device = await auth_service.login(login_request())
        rotated = await auth_service.refresh_token(
            RefreshTokenRequest(refresh_token=first.refresh_token)
        )

        with pytest.raises(AuthError) as exc_info:
            await auth_service.refresh_token(RefreshTokenRequest(refresh_token=first.refresh_token))

        assert exc_info.value.kind == ErrorKind.UNAUTHORIZED
        assert exc_info.value.message == ResponseMessage.REFRESH_TOKEN_REUSED

        for value in (rotated.refresh_token, other_device.refresh_token):
            token = await store.refresh_tokens.get_by_token(value)
            assert token.revoked_reason == RevocationReason.REUSE_DETECTED.value

        assert await auth_service.get_active_sessions(first.user.id) == []

    async def test_rotated_token_unusable_after_reuse(self, auth_service, alice_registration):
        await auth_service.register(alice_registration)
        login = await auth_service.login(login_request())
        rotated = await auth_service.refresh_token(
            RefreshTokenRequest(refresh_token=login.refresh_token)
        )

        with pytest.raises(AuthError):
            await auth_service.refresh_token(RefreshTokenRequest(refresh_token=login.refresh_token))

        with pytest.raises(AuthError) as exc_info:
            await auth_service.refresh_token(RefreshTokenRequest(refresh_token=rotated.refresh_token))

        assert exc_info.value.kind == ErrorKind.UNAUTHORIZED

    async def test_expired_refresh_token(self, auth_service, alice_registration, clock):
        await auth_service.register(alice_registration)
        login = await auth_service.login(login_request())

        clock.advance(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
        with pytest.raises(AuthError) as exc_info:
            await auth_service.refresh_token(RefreshTokenRequest(refresh_token=login.refresh_token))

        assert exc_info.value.kind == ErrorKind.UNAUTHORIZED
        assert exc_info.value.message == ResponseMessage.REFRESH_TOKEN_EXPIRED

    async def test_unknown_refresh_token(self, auth_service):
        with pytest.raises(AuthError) as exc_info:
            await auth_service.refresh_token(RefreshTokenRequest(refresh_token="not-a-token"))

        assert exc_info.value.kind == ErrorKind.UNAUTHORIZED
        assert exc_info.value.message == ResponseMessage.INVALID_REFRESH_TOKEN

    async def test_lost_rotation_race_is_reuse(
        self, auth_service, store, alice_registration, monkeypatch
    ):
        await auth_service.register(alice_registration)
        login = await auth_service.login(login_request())
        other_device = await auth_service.login(login_request())

        async def lost_race(token, reason, now, replaced_by=None):
            return False

        monkeypatch.setattr(store.refresh_tokens, "revoke", lost_race)

        with pytest.raises(AuthError) as exc_info:
            await auth_service.refresh_token(RefreshTokenRequest(refresh_token=login.refresh_token))

        assert exc_info.value.kind == ErrorKind.UNAUTHORIZED
        token = await store.refresh_tokens.get_by_token(other_device.refresh_token)
        assert token.revoked_reason == RevocationReason.REUSE_DETECTED.value

    async def test_refresh_for_deactivated_account(self, auth_service, store, alice_registration, clock):
        await auth_service.register(alice_registration)
        login = await auth_service.login(login_request())

        account = await store.accounts.get_by_id(login.user.id)
        account.is_active = False
        await store.accounts.update(account, clock.now)
        await store.commit()

        with pytest.raises(AuthError) as exc_info:
            await auth_service.refresh_token(RefreshTokenRequest(refresh_token=login.refresh_token))

        assert exc_info.value.kind == ErrorKind.FORBIDDEN


@pytest.mark.asyncio
@pytest.mark.unit
class TestLogout:

    async def test_logout_is_idempotent(self, auth_service, store, alice_registration):
        await auth_service.register(alice_registration)
        login = await auth_service.login(login_request())

        assert await auth_service.logout(LogoutRequest(refresh_token=login.refresh_token)) is True
        assert await auth_service.logout(LogoutRequest(refresh_token=login.refresh_token)) is False
        assert await auth_service.logout(LogoutRequest(refresh_token="unknown")) is False

        token = await store.refresh_tokens.get_by_token(login.refresh_token)
        assert token.revoked_reason == RevocationReason.LOGGED_OUT.value

    async def test_logout_all_devices(self, auth_service, alice_registration):
        await auth_service.register(alice_registration)
        first = await auth_service.login(login_request())
        await auth_service.login(login_request())
        await auth_service.login(login_request())

        sessions = await auth_service.get_active_sessions(first.user.id)
        assert len(sessions) == 3

        assert await auth_service.logout_all_devices(first.user.id) == 3
        assert await auth_service.get_active_sessions(first.user.id) == []
        assert await auth_service.logout_all_devices(first.user.id) == 0


@pytest.mark.asyncio
@pytest.mark.unit
class TestEmailVerification:

    async def _register(self, auth_service, dispatcher, notifier, alice_registration) -> str:
        await auth_service.register(alice_registration)
        await dispatcher.drain()
        return notifier.of_type("verification")[-1]["token"]

    async def test_verify_email(self, auth_service, store, dispatcher, notifier, alice_registration):
        token = await self._register(auth_service, dispatcher, notifier, alice_registration)

        await auth_service.verify_email(VerifyEmailRequest(token=token))
        await dispatcher.drain()

        account = await store.accounts.get_by_email("alice@example.com")
        assert account.email_verified is True
        assert account.email_verification_token is None
        assert notifier.of_type("welcome")[0]["email"] == "alice@example.com"

    async def test_verify_email_just_before_expiry(
        self, auth_service, store, dispatcher, notifier, alice_registration, clock
    ):
        token = await self._register(auth_service, dispatcher, notifier, alice_registration)

        clock.advance(hours=24, seconds=-1)
        await auth_service.verify_email(VerifyEmailRequest(token=token))

        account = await store.accounts.get_by_email("alice@example.com")
        assert account.email_verified is True

    async def test_verify_email_rejected_at_expiry_instant(
        self, auth_service, store, dispatcher, notifier, alice_registration, clock
    ):
        token = await self._register(auth_service, dispatcher, notifier, alice_registration)

        clock.advance(hours=24)
        with pytest.raises(AuthError) as exc_info:
            await auth_service.verify_email(VerifyEmailRequest(token=token))

        assert exc_info.value.kind == ErrorKind.BAD_REQUEST
        assert exc_info.value.message == ResponseMessage.VERIFICATION_TOKEN_EXPIRED
        account = await store.accounts.get_by_email("alice@example.com")
        assert account.email_verified is False

    async def test_verify_email_expired(
        self, auth_service, store, dispatcher, notifier, alice_registration, clock
    ):
        token = await self._register(auth_service, dispatcher, notifier, alice_registration)

        clock.advance(hours=24, seconds=1)
        with pytest.raises(AuthError) as exc_info:
            await auth_service.verify_email(VerifyEmailRequest(token=token))

        assert exc_info.value.kind == ErrorKind.BAD_REQUEST
        assert exc_info.value.message == ResponseMessage.VERIFICATION_TOKEN_EXPIRED
        account = await store.accounts.get_by_email("alice@example.com")
        assert account.email_verification_token == token

    async def test_verify_email_unknown_token(self, auth_service):
        with pytest.raises(AuthError) as exc_info:
            await auth_service.verify_email(VerifyEmailRequest(token="nope"))

        assert exc_info.value.kind == ErrorKind.NOT_FOUND

    async def test_resend_replaces_token(
        self, auth_service, dispatcher, notifier, alice_registration
    ):
        old_token = await self._register(auth_service, dispatcher, notifier, alice_registration)

        await auth_service.resend_email_verification(
            ResendVerificationRequest(email="alice@example.com")
        )
        await dispatcher.drain()
        new_token = notifier.of_type("verification")[-1]["token"]

        assert new_token != old_token
        with pytest.raises(AuthError):
            await auth_service.verify_email(VerifyEmailRequest(token=old_token))
        await auth_service.verify_email(VerifyEmailRequest(token=new_token))

    async def test_resend_when_already_verified(
        self, auth_service, dispatcher, notifier, alice_registration
    ):
        token = await self._register(auth_service, dispatcher, notifier, alice_registration)
        await auth_service.verify_email(VerifyEmailRequest(token=token))

        with pytest.raises(AuthError) as exc_info:
            await auth_service.resend_email_verification(
                ResendVerificationRequest(email="alice@example.com")
            )

        assert exc_info.value.kind == ErrorKind.BAD_REQUEST
        assert exc_info.value.message == ResponseMessage.EMAIL_ALREADY_VERIFIED

    async def test_resend_unknown_email(self, auth_service):
        with pytest.raises(AuthError) as exc_info:
            await auth_service.resend_email_verification(
                ResendVerificationRequest(email="ghost@example.com")
            )

        assert exc_info.value.kind == ErrorKind.NOT_FOUND


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.security
class TestPasswordRecovery:

    async def _request_reset(self, auth_service, dispatcher, notifier) -> str:
        await auth_service.forgot_password(ForgotPasswordRequest(email="alice@example.com"))
        await dispatcher.drain()
        return notifier.of_type("password_reset")[-1]["token"]

    async def test_forgot_password_unknown_email(self, auth_service, dispatcher, notifier, monkeypatch):
        generated = []
        original = TokenGenerator.reset_password_token

        def tracking(self):
            token = original(self)
            generated.append(token)
            return token

        monkeypatch.setattr(TokenGenerator, "reset_password_token", tracking)

        result = await auth_service.forgot_password(ForgotPasswordRequest(email="ghost@example.com"))
        await dispatcher.drain()

        assert result is None
        assert notifier.of_type("password_reset") == []
        assert len(generated) == 1

    async def test_reset_password(
        self, auth_service, store, dispatcher, notifier, alice_registration
    ):
        await auth_service.register(alice_registration)
        token = await self._request_reset(auth_service, dispatcher, notifier)

        await auth_service.reset_password(ResetPasswordRequest(
            token=token, new_password="wonderland", confirm_password="wonderland"
        ))

        account = await store.accounts.get_by_email("alice@example.com")
        assert account.password_reset_token is None
        assert account.password_reset_expires is None

        with pytest.raises(AuthError):
            await auth_service.login(login_request())
        response = await auth_service.login(login_request(password="wonderland"))
        assert response.user.email == "alice@example.com"

    async def test_reset_token_is_single_use(self, auth_service, dispatcher, notifier, alice_registration):
        await auth_service.register(alice_registration)
        token = await self._request_reset(auth_service, dispatcher, notifier)
        request = ResetPasswordRequest(token=token, new_password="first1", confirm_password="first1")

        await auth_service.reset_password(request)
        with pytest.raises(AuthError) as exc_info:
            await auth_service.reset_password(request)

        assert exc_info.value.kind == ErrorKind.NOT_FOUND

    async def test_reset_unlocks_account(
        self, auth_service, store, dispatcher, notifier, alice_registration
    ):
        await auth_service.register(alice_registration)
        await fail_login(auth_service, 5)
        token = await self._request_reset(auth_service, dispatcher, notifier)

        await auth_service.reset_password(ResetPasswordRequest(
            token=token, new_password="unlocked", confirm_password="unlocked"
        ))

        account = await store.accounts.get_by_email("alice@example.com")
        assert account.is_locked is False
        assert account.failed_login_attempts == 0
        await auth_service.login(login_request(password="unlocked"))

    async def test_reset_token_expired(self, auth_service, dispatcher, notifier, alice_registration, clock):
        await auth_service.register(alice_registration)
        token = await self._request_reset(auth_service, dispatcher, notifier)

        clock.advance(hours=settings.PASSWORD_RESET_TOKEN_EXPIRE_HOURS, seconds=1)
        with pytest.raises(AuthError) as exc_info:
            await auth_service.reset_password(ResetPasswordRequest(
                token=token, new_password="toolate", confirm_password="toolate"
            ))

        assert exc_info.value.kind == ErrorKind.BAD_REQUEST
        assert exc_info.value.message == ResponseMessage.RESET_TOKEN_EXPIRED

    async def test_reset_token_just_before_expiry(
        self, auth_service, dispatcher, notifier, alice_registration, clock
    ):
        await auth_service.register(alice_registration)
        token = await self._request_reset(auth_service, dispatcher, notifier)

        clock.advance(hours=settings.PASSWORD_RESET_TOKEN_EXPIRE_HOURS, seconds=-1)
        await auth_service.reset_password(ResetPasswordRequest(
            token=token, new_password="in-time", confirm_password="in-time"
        ))

        await auth_service.login(login_request(password="in-time"))

    async def test_reset_token_rejected_at_expiry_instant(
        self, auth_service, dispatcher, notifier, alice_registration, clock
    ):
        await auth_service.register(alice_registration)
        token = await self._request_reset(auth_service, dispatcher, notifier)

        clock.advance(hours=settings.PASSWORD_RESET_TOKEN_EXPIRE_HOURS)
        with pytest.raises(AuthError) as exc_info:
            await auth_service.reset_password(ResetPasswordRequest(
                token=token, new_password="too-late", confirm_password="too-late"
            ))

        assert exc_info.value.kind == ErrorKind.BAD_REQUEST
        assert exc_info.value.message == ResponseMessage.RESET_TOKEN_EXPIRED

    async def test_forgot_password_same_store_calls_for_unknown_email(
        self, auth_service, store, alice_registration, monkeypatch
    ):
        await auth_service.register(alice_registration)
        calls = []
        original_update = store.accounts.set_password_reset_token
        original_commit = store.commit

        async def tracking_update(*args):
            calls.append("update")
            return await original_update(*args)

        async def tracking_commit():
            calls.append("commit")
            await original_commit()

        monkeypatch.setattr(store.accounts, "set_password_reset_token", tracking_update)
        monkeypatch.setattr(store, "commit", tracking_commit)

        await auth_service.forgot_password(ForgotPasswordRequest(email="alice@example.com"))
        known_calls = list(calls)
        calls.clear()
        await auth_service.forgot_password(ForgotPasswordRequest(email="ghost@example.com"))

        assert known_calls == ["update", "commit"]
        assert calls == known_calls

    async def test_reset_unknown_token(self, auth_service):
        with pytest.raises(AuthError) as exc_info:
            await auth_service.reset_password(ResetPasswordRequest(
                token="nope", new_password="whatever", confirm_password="whatever"
            ))

        assert exc_info.value.kind == ErrorKind.NOT_FOUND
        assert exc_info.value.message == ResponseMessage.INVALID_RESET_TOKEN


@pytest.mark.asyncio
@pytest.mark.unit
class TestChangePassword:

    async def test_change_password(self, auth_service, alice_registration):
        account = await auth_service.register(alice_registration)

        await auth_service.change_password(account.id, ChangePasswordRequest(
            current_password="alice123", new_password="looking-glass", confirm_password="looking-glass"
        ))

        with pytest.raises(AuthError):
            await auth_service.login(login_request())
        await auth_service.login(login_request(password="looking-glass"))

    async def test_wrong_current_password(self, auth_service, alice_registration):
        account = await auth_service.register(alice_registration)

        with pytest.raises(AuthError) as exc_info:
            await auth_service.change_password(account.id, ChangePasswordRequest(
                current_password="not-it", new_password="newpass", confirm_password="newpass"
            ))

        assert exc_info.value.kind == ErrorKind.UNAUTHORIZED
        assert exc_info.value.message == ResponseMessage.INCORRECT_CURRENT_PASSWORD

    async def test_same_password_rejected(self, auth_service, alice_registration):
        account = await auth_service.register(alice_registration)

        with pytest.raises(AuthError) as exc_info:
            await auth_service.change_password(account.id, ChangePasswordRequest(
                current_password="alice123", new_password="alice123", confirm_password="alice123"
            ))

        assert exc_info.value.kind == ErrorKind.BAD_REQUEST
        assert exc_info.value.message == ResponseMessage.PASSWORD_REUSED

    async def test_unknown_account(self, auth_service):
        with pytest.raises(AuthError) as exc_info:
            await auth_service.change_password(TokenGenerator.new_id(), ChangePasswordRequest(
                current_password="a", new_password="b", confirm_password="b"
            ))

        assert exc_info.value.kind == ErrorKind.NOT_FOUND


@pytest.mark.asyncio
@pytest.mark.integration
class TestAliceJourney:
    """Alur lengkap: register, verify, login, refresh, reuse, logout."""

    async def test_full_journey(self, auth_service, store, dispatcher, notifier, alice_registration, clock):
        account = await auth_service.register(alice_registration)
        await dispatcher.drain()

        token = notifier.of_type("verification")[0]["token"]
        clock.advance(minutes=10)
        await auth_service.verify_email(VerifyEmailRequest(token=token))

        login = await auth_service.login(login_request())
        assert login.user.email_verified is True

        clock.advance(minutes=30)
        refreshed = await auth_service.refresh_token(
            RefreshTokenRequest(refresh_token=login.refresh_token)
        )

        with pytest.raises(AuthError):
            await auth_service.refresh_token(RefreshTokenRequest(refresh_token=login.refresh_token))

        # Reuse mematikan semua sesi, user harus login ulang
        with pytest.raises(AuthError):
            await auth_service.refresh_token(
                RefreshTokenRequest(refresh_token=refreshed.refresh_token)
            )

        relogin = await auth_service.login(login_request())
        assert await auth_service.logout(LogoutRequest(refresh_token=relogin.refresh_token)) is True
        assert await auth_service.get_active_sessions(account.id) == []
