"""
contest/orm/contest_setting.py
Process-wide key/value settings
"""
from sqlalchemy import Column, String, Text

from contest.orm.base import TimestampedModel


class SettingKey:
    """Known setting keys"""
    IS_CLOSED = "CONTEST_IS_CLOSED"
    CLOSED_AT = "CONTEST_CLOSED_AT"
    SHOW_PUBLIC_SCORES = "SHOW_PUBLIC_SCORES"
    LAST_INSTAGRAM_SYNC = "last_instagram_sync"


class ContestSetting(TimestampedModel):
    """Values are stored as strings ("true"/"false", ISO timestamps)."""
    __tablename__ = "contest_settings"

    key = Column(String(100), nullable=False, unique=True, index=True)
    value = Column(Text, nullable=True)

    def __repr__(self):
        return f"<ContestSetting({self.key}={self.value})>"
