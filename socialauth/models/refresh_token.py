"""
Refresh token model untuk SocialAuth.
Refresh token bersifat opaque, disimpan apa adanya dan dirotasi setiap kali dipakai.
"""

from datetime import datetime

from sqlalchemy import Column, String, ForeignKey, Index, Uuid

from socialauth.db.base import BaseModel, UTCDateTime


class RefreshToken(BaseModel):
    """
    Refresh token yang terikat ke satu akun.

    Token aktif jika revoked_at kosong dan expires_at > now.
    Revoked dan expired adalah state terminal.

    Attributes:
        id: Token ID (UUID)
        token: Nilai token (unique)
        user_id: Pemilik token
        created_at: Waktu pembuatan
        expires_at: Waktu expired
        revoked_at: Waktu revoke
        revoked_reason: Alasan revoke
        replaced_by_token: Token pengganti hasil rotasi (audit chain)
    """

    __tablename__ = "refresh_tokens"

    token = Column(String(255), unique=True, nullable=False, index=True)
    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    expires_at = Column(UTCDateTime(), nullable=False)
    revoked_at = Column(UTCDateTime(), nullable=True)
    revoked_reason = Column(String(255), nullable=True)
    replaced_by_token = Column(String(255), nullable=True)

    __table_args__ = (
        Index("idx_refresh_tokens_user_active", "user_id", "revoked_at"),
    )

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    def is_expired_at(self, now: datetime) -> bool:
        return self.expires_at <= now

    def is_active_at(self, now: datetime) -> bool:
        """Check apakah token masih bisa dipakai pada waktu `now`."""
        return not self.is_revoked and not self.is_expired_at(now)

    def __repr__(self) -> str:
        return f"<RefreshToken(id={self.id}, user_id={self.user_id}, revoked={self.is_revoked})>"
