"""
contest/orm/evaluation.py
Judges and their scores for contest videos
"""
from sqlalchemy import Column, Integer, String, Float, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from contest.orm.base import TimestampedModel


class Judge(TimestampedModel):
    """Jury member. Credentials live with the auth collaborator."""
    __tablename__ = "judges"

    name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=False, unique=True)

    def __repr__(self):
        return f"<Judge(id={self.id}, email={self.email})>"


class Evaluation(TimestampedModel):
    """
    One judge's score for one video.

    `total_score` (0-100) is the weighted sum of criterion scores, computed
    when the judge submits the evaluation form.
    """
    __tablename__ = "evaluations"
    __table_args__ = (
        UniqueConstraint("judge_id", "video_id", name="uq_evaluation_judge_video"),
    )

    judge_id = Column(
        Integer,
        ForeignKey("judges.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    video_id = Column(
        Integer,
        ForeignKey("videos.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    total_score = Column(Float, nullable=False, default=0.0)

    judge = relationship("Judge", lazy="selectin")
    video = relationship("Video", back_populates="evaluations")

    def __repr__(self):
        return f"<Evaluation(judge={self.judge_id}, video={self.video_id}, total={self.total_score})>"
