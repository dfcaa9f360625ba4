"""
Repository interface definitions untuk SocialAuth.

Kontrak yang harus diimplementasikan oleh storage layer. AuthService hanya
bergantung pada Protocol di sini, tidak pada SQLAlchemy secara langsung.
"""

from abc import abstractmethod
from datetime import datetime
from typing import List, Optional, Protocol
from uuid import UUID

from socialauth.models.user import Account
from socialauth.models.refresh_token import RefreshToken
from socialauth.models.profile import AccountSettings, AccountStats
from socialauth.models.role import Role, AccountRole


class StoreConflictError(Exception):
    """Unique constraint dilanggar saat commit (misal: registrasi bersamaan)."""


class AccountRepository(Protocol):
    """
    Account repository interface.

    Semua lookup mengabaikan akun yang sudah di-soft-delete.
    """

    @abstractmethod
    async def get_by_id(self, account_id: UUID) -> Optional[Account]:
        ...

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[Account]:
        """
        Ambil akun berdasarkan email yang sudah dinormalisasi.

        Args:
            email: Email lowercase tanpa whitespace

        Returns:
            Account jika ditemukan, None jika tidak
        """
        ...

    @abstractmethod
    async def get_by_username(self, username: str) -> Optional[Account]:
        ...

    @abstractmethod
    async def get_by_verification_token(self, token: str) -> Optional[Account]:
        ...

    @abstractmethod
    async def get_by_reset_token(self, token: str) -> Optional[Account]:
        ...

    @abstractmethod
    async def exists_by_email(self, email: str) -> bool:
        ...

    @abstractmethod
    async def exists_by_username(self, username: str) -> bool:
        ...

    @abstractmethod
    async def create(self, account: Account) -> Account:
        """Tambahkan akun baru ke unit of work (belum di-commit)."""
        ...

    @abstractmethod
    async def update(self, account: Account, now: datetime) -> Account:
        """Tandai akun sebagai berubah dan set updated_at."""
        ...

    @abstractmethod
    async def record_failed_login(
        self,
        account_id: UUID,
        max_attempts: int,
        lockout_end: datetime
    ) -> Optional[Account]:
        """
        Increment counter gagal login secara atomic.

        Jika nilai baru >= max_attempts, akun dikunci sampai lockout_end.
        Harus aman terhadap login bersamaan (tidak ada increment yang hilang).

        Args:
            account_id: ID akun
            max_attempts: Threshold lockout
            lockout_end: Waktu akhir lockout jika threshold tercapai

        Returns:
            State akun setelah update
        """
        ...

    @abstractmethod
    async def set_password_reset_token(
        self,
        email: str,
        token: str,
        expires: datetime,
        now: datetime
    ) -> bool:
        """
        Simpan reset token lewat satu UPDATE berdasarkan email.

        Statement yang sama dijalankan untuk email terdaftar maupun tidak.

        Returns:
            True jika ada akun yang ter-update
        """
        ...

    @abstractmethod
    async def get_role_names(self, account_id: UUID) -> List[str]:
        ...


class RefreshTokenRepository(Protocol):
    """Refresh token repository interface."""

    @abstractmethod
    async def get_by_token(self, token: str) -> Optional[RefreshToken]:
        ...

    @abstractmethod
    async def get_active_for_account(self, account_id: UUID, now: datetime) -> List[RefreshToken]:
        """Token aktif milik akun, terbaru lebih dulu."""
        ...

    @abstractmethod
    async def create(self, refresh_token: RefreshToken) -> RefreshToken:
        ...

    @abstractmethod
    async def revoke(
        self,
        token: str,
        reason: str,
        now: datetime,
        replaced_by: Optional[str] = None
    ) -> bool:
        """
        Revoke token jika masih aktif, sebagai satu conditional update.

        Args:
            token: Nilai refresh token
            reason: Alasan revoke
            now: Waktu revoke
            replaced_by: Token pengganti (untuk rotasi)

        Returns:
            True jika token ini yang berubah state, False jika sudah
            revoked, expired, atau tidak ada
        """
        ...

    @abstractmethod
    async def revoke_all_for_account(self, account_id: UUID, reason: str, now: datetime) -> int:
        """Revoke semua token aktif milik akun. Return jumlah yang di-revoke."""
        ...

    @abstractmethod
    async def remove_expired(self, cutoff: datetime) -> int:
        """Hapus token yang expired sebelum cutoff. Return jumlah yang dihapus."""
        ...


class RoleRepository(Protocol):
    """Role repository interface."""

    @abstractmethod
    async def get_by_name(self, name: str) -> Optional[Role]:
        ...

    @abstractmethod
    async def create(self, name: str, description: Optional[str] = None) -> Role:
        ...

    @abstractmethod
    async def assign(self, account_id: UUID, role_id: UUID) -> AccountRole:
        ...


class ProfileRepository(Protocol):
    """Repository untuk record pendamping akun (settings dan stats)."""

    @abstractmethod
    async def create_default_settings(self, account_id: UUID) -> AccountSettings:
        ...

    @abstractmethod
    async def create_default_stats(self, account_id: UUID, now: datetime) -> AccountStats:
        ...


class CredentialStore(Protocol):
    """
    Unit of work untuk semua operasi auth.

    Semua perubahan dari repositories dalam satu operasi di-commit bersama.
    """

    accounts: AccountRepository
    refresh_tokens: RefreshTokenRepository
    roles: RoleRepository
    profiles: ProfileRepository

    @abstractmethod
    async def commit(self) -> None:
        """
        Commit transaksi saat ini.

        Raises:
            StoreConflictError: Jika unique constraint dilanggar
        """
        ...

    @abstractmethod
    async def rollback(self) -> None:
        ...
