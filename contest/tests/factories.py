"""
Test data builders and a fake Instagram client
"""
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from contest.orm.evaluation import Evaluation, Judge
from contest.orm.participant import Participant
from contest.orm.video import Video, VideoStatus
from contest.schemas.instagram import ExternalPost
from contest.services.instagram_client import InstagramAPIError

BASE_TIME = datetime(2026, 3, 1, 12, 0, 0)


async def create_participant(
    db: AsyncSession,
    instagram: str,
    alias: Optional[str] = None,
    first_name: str = "Test",
    last_name: str = "Participant"
) -> Participant:
    participant = Participant(
        instagram=instagram,
        first_name=first_name,
        last_name=last_name,
        alias=alias or instagram.lstrip("@"),
    )
    db.add(participant)
    await db.commit()
    await db.refresh(participant)
    return participant


async def create_video(
    db: AsyncSession,
    participant: Participant,
    status: VideoStatus = VideoStatus.PENDING_VALIDATION,
    likes: int = 0,
    last_sync: Optional[datetime] = None,
    closing_likes: Optional[int] = None,
    created_offset_minutes: int = 0,
    url: Optional[str] = None,
    storage_key: Optional[str] = None
) -> Video:
    video = Video(
        participant_id=participant.id,
        status=status,
        instagram_likes=likes,
        last_instagram_sync=last_sync,
        closing_likes=closing_likes,
        url=url,
        storage_key=storage_key or f"videos/{participant.id}.mp4",
        created_at=BASE_TIME + timedelta(minutes=created_offset_minutes),
    )
    db.add(video)
    await db.commit()
    await db.refresh(video)
    return video


async def create_entry(
    db: AsyncSession,
    handle: str,
    status: VideoStatus = VideoStatus.VALIDATED,
    likes: int = 0,
    synced: bool = True,
    closing_likes: Optional[int] = None,
    created_offset_minutes: int = 0
) -> Video:
    """Participant plus video in one call"""
    participant = await create_participant(db, handle)
    return await create_video(
        db,
        participant,
        status=status,
        likes=likes,
        last_sync=BASE_TIME if synced else None,
        closing_likes=closing_likes,
        created_offset_minutes=created_offset_minutes,
    )


async def add_evaluations(db: AsyncSession, video: Video, scores: List[float]) -> None:
    for index, score in enumerate(scores):
        judge = Judge(name=f"Judge {video.id}-{index}", email=f"judge{video.id}-{index}@contest.test")
        db.add(judge)
        await db.flush()
        db.add(Evaluation(judge_id=judge.id, video_id=video.id, total_score=score))
    await db.commit()


def post(
    username: Optional[str],
    like_count: Optional[int] = 10,
    post_id: Optional[str] = None,
    permalink: Optional[str] = None,
    timestamp: str = "2026-03-01T12:00:00+0000"
) -> ExternalPost:
    post_id = post_id or f"ig_{(username or 'anon').strip('@').lower()}"
    return ExternalPost(
        id=post_id,
        username=username,
        like_count=like_count,
        permalink=permalink or f"https://www.instagram.com/p/{post_id}/",
        timestamp=timestamp,
        media_type="VIDEO",
        media_url=f"https://cdn.instagram.test/{post_id}.mp4",
    )


class FakeInstagramClient:
    """Stands in for InstagramClient; records how often it was called"""

    def __init__(self, posts: Optional[List[ExternalPost]] = None, error: Optional[str] = None):
        self.posts = posts or []
        self.error = error
        self.calls = 0

    async def get_tagged_media(self) -> List[ExternalPost]:
        self.calls += 1
        if self.error:
            raise InstagramAPIError(self.error)
        return list(self.posts)
