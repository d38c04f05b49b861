"""
contest/orm/participant.py
Registered contest participants
"""
from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from contest.orm.base import TimestampedModel


class Participant(TimestampedModel):
    """
    A registered contestant.

    `instagram` is the handle as typed at registration time; it is
    normalized on every comparison rather than on write.
    """
    __tablename__ = "participants"

    instagram = Column(String(100), nullable=False, default="", index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    alias = Column(String(100), nullable=True)

    # One participant owns at most one video (unique FK on videos.participant_id)
    video = relationship(
        "Video",
        back_populates="participant",
        uselist=False,
        lazy="selectin"
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self):
        return f"<Participant(id={self.id}, instagram={self.instagram})>"
