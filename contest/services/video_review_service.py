"""
Video Review Service

Explicit admin actions on videos: approve/reject overrides and the
"send to jury" selection flag.
"""
import logging
from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from contest.errors import ErrorCode, InvalidStateError, NotFoundError
from contest.orm.base import utcnow
from contest.orm.video import Video, VideoStatus
from contest.services.status_reconciler import AdminDecision, apply_admin_decision

logger = logging.getLogger(__name__)


async def review_videos(
    db: AsyncSession,
    video_ids: Sequence[int],
    decision: AdminDecision,
    now: Optional[datetime] = None
) -> List[int]:
    """
    Approve or reject a batch of videos.

    Raises:
        NotFoundError: if any id does not exist (nothing is written)

    Returns:
        Ids whose status actually changed
    """
    now = now or utcnow()
    result = await db.execute(select(Video).where(Video.id.in_(list(video_ids))))
    videos = {video.id: video for video in result.scalars().all()}

    missing = [vid for vid in video_ids if vid not in videos]
    if missing:
        raise NotFoundError("Video", missing[0], code=ErrorCode.VIDEO_NOT_FOUND)

    changed = [vid for vid, video in videos.items() if apply_admin_decision(video, decision, now)]
    if decision is AdminDecision.REJECT:
        # Rejected videos cannot stay in the jury pool
        for video in videos.values():
            video.is_judge_selected = False

    await db.commit()
    return sorted(changed)


async def set_judge_selection(db: AsyncSession, video_id: int, selected: bool) -> Video:
    """
    Toggle whether a video is sent to the jury.
    Only VALIDATED videos can be selected; deselection is always allowed.
    """
    result = await db.execute(select(Video).where(Video.id == video_id))
    video = result.scalar_one_or_none()
    if video is None:
        raise NotFoundError("Video", video_id, code=ErrorCode.VIDEO_NOT_FOUND)

    if selected and video.status != VideoStatus.VALIDATED:
        raise InvalidStateError(
            "Only validated videos can be sent to the jury",
            code=ErrorCode.VIDEO_NOT_VALIDATED,
            details={"video_id": video_id, "status": VideoStatus(video.status).value}
        )

    video.is_judge_selected = selected
    await db.commit()
    logger.info(f"Video {video_id} jury selection set to {selected}")
    return video
