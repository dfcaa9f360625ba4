"""
Settings dan statistik akun.
Dibuat sekali saat registrasi dengan nilai default.
"""

from sqlalchemy import Column, String, Boolean, Integer, BigInteger, ForeignKey, Uuid

from socialauth.db.base import BaseModel, TimestampMixin, UTCDateTime, utcnow
from socialauth.core.constants import DefaultValue


class AccountSettings(BaseModel, TimestampMixin):
    """Privacy, notification, dan preference settings per akun."""

    __tablename__ = "user_settings"

    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False
    )

    # Privacy
    is_private_account = Column(Boolean, default=False, nullable=False)
    allow_comments = Column(Boolean, default=True, nullable=False)
    allow_duet = Column(Boolean, default=True, nullable=False)
    allow_stitch = Column(Boolean, default=True, nullable=False)
    allow_download = Column(Boolean, default=True, nullable=False)

    # Notifications
    push_notifications_enabled = Column(Boolean, default=True, nullable=False)
    email_notifications_enabled = Column(Boolean, default=True, nullable=False)
    notify_on_like = Column(Boolean, default=True, nullable=False)
    notify_on_comment = Column(Boolean, default=True, nullable=False)
    notify_on_follow = Column(Boolean, default=True, nullable=False)
    notify_on_mention = Column(Boolean, default=True, nullable=False)

    # Preferences
    preferred_language = Column(
        String(10),
        default=DefaultValue.PREFERRED_LANGUAGE,
        nullable=False
    )
    preferred_content_region = Column(
        String(10),
        default=DefaultValue.PREFERRED_CONTENT_REGION,
        nullable=False
    )


class AccountStats(BaseModel):
    """Counter engagement per akun. Dihitung ulang di luar service ini."""

    __tablename__ = "user_stats"

    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False
    )

    followers_count = Column(Integer, default=0, nullable=False)
    following_count = Column(Integer, default=0, nullable=False)
    videos_count = Column(Integer, default=0, nullable=False)
    total_likes_received = Column(BigInteger, default=0, nullable=False)
    total_views = Column(BigInteger, default=0, nullable=False)
    last_calculated_at = Column(UTCDateTime(), default=utcnow, nullable=False)
