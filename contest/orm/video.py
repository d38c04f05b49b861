"""
contest/orm/video.py
Contest submissions (videos) with validation and engagement state
"""
from enum import Enum as PyEnum

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Float, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship

from contest.orm.base import TimestampedModel


class VideoStatus(str, PyEnum):
    """Submission lifecycle status"""
    PENDING_UPLOAD = "PENDING_UPLOAD"           # Registered, file not confirmed yet
    PENDING_VALIDATION = "PENDING_VALIDATION"   # File uploaded, waiting for Instagram evidence
    VALIDATED = "VALIDATED"                     # Matched post observed or admin approved
    REJECTED = "REJECTED"                       # Admin rejected


class Video(TimestampedModel):
    """
    A participant's contest entry.

    `instagram_likes` is refreshed by every sync. `closing_likes` is the
    frozen count taken by the admin snapshot and is written once.
    """
    __tablename__ = "videos"

    participant_id = Column(
        Integer,
        ForeignKey("participants.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True
    )

    status = Column(
        SQLEnum(VideoStatus),
        default=VideoStatus.PENDING_UPLOAD,
        nullable=False,
        index=True
    )
    validated_at = Column(DateTime, nullable=True)

    # Engagement
    instagram_likes = Column(Integer, default=0, nullable=False)
    instagram_url = Column(String(500), nullable=True)
    last_instagram_sync = Column(DateTime, nullable=True)

    # Closing snapshot (write-once)
    closing_likes = Column(Integer, nullable=True)
    closing_likes_at = Column(DateTime, nullable=True)

    # Jury curation
    is_judge_selected = Column(Boolean, default=False, nullable=False)

    # Media reference, resolved by the storage collaborator
    url = Column(String(1000), nullable=True)
    storage_key = Column(String(500), nullable=True)

    # Technical metadata (informational only)
    resolution = Column(String(20), nullable=True)
    fps = Column(Float, nullable=True)
    duration = Column(Float, nullable=True)

    participant = relationship("Participant", back_populates="video", lazy="selectin")
    evaluations = relationship(
        "Evaluation",
        back_populates="video",
        lazy="selectin",
        cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Video(id={self.id}, status={self.status}, likes={self.instagram_likes})>"

