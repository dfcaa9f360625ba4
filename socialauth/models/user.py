"""
Account model untuk SocialAuth.
Model utama yang merepresentasikan akun user dalam sistem.
"""

from datetime import datetime

from sqlalchemy import (
    Column, String, Boolean, Date, Integer, Enum as SQLEnum,
    Index, CheckConstraint
)

from socialauth.db.base import BaseModel, TimestampMixin, SoftDeleteMixin, UTCDateTime
from socialauth.core.constants import Gender, DefaultValue


class Account(BaseModel, TimestampMixin, SoftDeleteMixin):
    """
    Account model untuk authentication dan profil dasar.

    Attributes:
        id: Account ID (UUID)
        email: Email (unique, lowercase)
        username: Username (unique, lowercase, optional)
        full_name: Nama lengkap
        date_of_birth: Tanggal lahir
        gender: Gender
        password_hash: base64(salt || digest)
        email_verified: Apakah email sudah diverifikasi
        email_verification_token: Token verifikasi email aktif
        email_verification_expires: Expiry token verifikasi
        password_reset_token: Token reset password aktif
        password_reset_expires: Expiry token reset
        failed_login_attempts: Jumlah gagal login berturut-turut
        is_locked: Apakah akun terkunci
        lockout_end: Akun terkunci sampai waktu ini
        is_active: Apakah akun aktif
        last_login_at: Waktu login sukses terakhir
    """

    __tablename__ = "users"

    # Identity
    email = Column(String(255), unique=True, nullable=False, index=True)
    username = Column(String(50), unique=True, nullable=True, index=True)

    # Profile
    full_name = Column(String(100), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    gender = Column(SQLEnum(Gender, name="gender"), nullable=True)

    # Credential
    password_hash = Column(String(255), nullable=False)

    # Email verification
    email_verified = Column(Boolean, default=False, nullable=False)
    email_verification_token = Column(String(255), nullable=True, index=True)
    email_verification_expires = Column(UTCDateTime(), nullable=True)

    # Password reset
    password_reset_token = Column(String(255), nullable=True, index=True)
    password_reset_expires = Column(UTCDateTime(), nullable=True)

    # Lockout
    failed_login_attempts = Column(Integer, default=0, nullable=False)
    is_locked = Column(Boolean, default=False, nullable=False)
    lockout_end = Column(UTCDateTime(), nullable=True)

    # Activity
    is_active = Column(Boolean, default=True, nullable=False)
    last_login_at = Column(UTCDateTime(), nullable=True)

    __table_args__ = (
        CheckConstraint("failed_login_attempts >= 0", name="ck_users_failed_login_attempts"),
        Index("idx_users_is_active", "is_active"),
    )

    @property
    def display_name(self) -> str:
        """Nama untuk email: full name, username, atau 'User'."""
        return self.full_name or self.username or DefaultValue.EMAIL_DISPLAY_NAME

    def is_locked_at(self, now: datetime) -> bool:
        """
        Check apakah akun sedang terkunci pada waktu `now`.

        Lock yang sudah lewat lockout_end tidak dihitung.
        """
        if not self.is_locked:
            return False
        return self.lockout_end is not None and self.lockout_end > now

    def record_successful_login(self, now: datetime) -> None:
        """Reset counter gagal login dan lockout, set last_login_at."""
        self.failed_login_attempts = 0
        self.is_locked = False
        self.lockout_end = None
        self.last_login_at = now

    def unlock_account(self) -> None:
        """Unlock akun secara eksplisit."""
        self.is_locked = False
        self.lockout_end = None
        self.failed_login_attempts = 0

    def set_verification_token(self, token: str, expires: datetime) -> None:
        self.email_verification_token = token
        self.email_verification_expires = expires

    def mark_email_verified(self) -> None:
        """Tandai email terverifikasi dan hapus token."""
        self.email_verified = True
        self.email_verification_token = None
        self.email_verification_expires = None

    def set_password_reset_token(self, token: str, expires: datetime) -> None:
        self.password_reset_token = token
        self.password_reset_expires = expires

    def clear_password_reset_token(self) -> None:
        self.password_reset_token = None
        self.password_reset_expires = None

    def __repr__(self) -> str:
        return f"<Account(id={self.id}, email={self.email}, username={self.username})>"
