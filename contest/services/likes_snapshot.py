"""
Likes Snapshot Service

Admin-triggered freeze of the current Instagram likes of every validated
video into `closing_likes`. There is no undo.

Write-once: each row is updated with a `closing_likes IS NULL` guard, so
repeated or concurrent snapshots never overwrite a frozen value.
Rows are committed one at a time; an interrupted run leaves a partial
snapshot that the next run completes.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from contest.orm.base import utcnow
from contest.orm.video import Video, VideoStatus

logger = logging.getLogger(__name__)


@dataclass
class SnapshotResult:
    snapshotted: List[int] = field(default_factory=list)
    failed: List[int] = field(default_factory=list)
    taken_at: Optional[datetime] = None

    @property
    def count(self) -> int:
        return len(self.snapshotted)


async def snapshot_closing_likes(db: AsyncSession, now: Optional[datetime] = None) -> SnapshotResult:
    """
    Freeze likes for validated videos that have no closing value yet.

    Returns:
        SnapshotResult; `count` is the number of newly frozen videos
    """
    now = now or utcnow()
    result = SnapshotResult(taken_at=now)

    pending = await db.execute(
        select(Video.id)
        .where(Video.status == VideoStatus.VALIDATED, Video.closing_likes.is_(None))
        .order_by(Video.id)
    )
    video_ids = list(pending.scalars().all())

    for video_id in video_ids:
        try:
            updated = await db.execute(
                update(Video)
                .where(
                    Video.id == video_id,
                    Video.status == VideoStatus.VALIDATED,
                    Video.closing_likes.is_(None)
                )
                .values(closing_likes=Video.instagram_likes, closing_likes_at=now)
                .execution_options(synchronize_session=False)
            )
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error(f"Closing snapshot failed for video {video_id}: {str(e)}")
            result.failed.append(video_id)
            continue

        if updated.rowcount == 1:
            result.snapshotted.append(video_id)

    logger.info(f"Closing likes snapshot: {result.count} videos frozen, {len(result.failed)} failed")
    return result
