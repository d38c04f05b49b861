"""
Ranking Engine

Public leaderboard with two mutually exclusive algorithms:

LIVE (contest open):
- Candidates: VALIDATED videos that have been synced at least once
- Order: instagram_likes DESC
- Score: raw likes, always visible

CLOSED (contest closed):
- Candidates: all VALIDATED videos
- Score: jury average (mean of evaluation totals, 0 without evaluations),
  rounded half-up to one decimal
- Engagement: closing_likes, falling back on instagram_likes when the
  video was never snapshotted. Used for display and tie-break only.
- Score hidden unless SHOW_PUBLIC_SCORES is on

TIE-BREAK (both modes, applied after the primary key):
1. engagement DESC (closed mode only)
2. earliest submission (created_at ASC)
3. video id ASC
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Sequence, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from contest.orm.video import Video, VideoStatus
from contest.services.storage_service import resolve_stream_url

logger = logging.getLogger(__name__)

DEFAULT_TOP_N = 5
QUANTIZER_1DP = Decimal("0.1")


@dataclass(frozen=True)
class RankingEntry:
    video_id: int
    position: int
    alias: Optional[str]
    handle: Optional[str]
    score: Union[int, float]
    engagement_count: int
    stream_url: str
    is_likes: bool
    hidden_score: bool


def jury_average(video: Video) -> float:
    """Mean of all evaluation totals; 0 when no judge has scored yet"""
    totals = [e.total_score for e in video.evaluations if e.total_score is not None]
    if not totals:
        return 0.0
    return sum(totals) / len(totals)


def engagement_for_ranking(video: Video) -> int:
    if video.closing_likes is not None:
        return video.closing_likes
    return video.instagram_likes or 0


def round_score(value: float) -> float:
    return float(Decimal(str(value)).quantize(QUANTIZER_1DP, rounding=ROUND_HALF_UP))


def _submitted_at(video: Video) -> datetime:
    return video.created_at or datetime.max


def _entry(video: Video, position: int, score, engagement: int, is_likes: bool, hidden: bool) -> RankingEntry:
    participant = video.participant
    return RankingEntry(
        video_id=video.id,
        position=position,
        alias=participant.alias if participant else None,
        handle=participant.instagram if participant else None,
        score=score,
        engagement_count=engagement,
        stream_url=resolve_stream_url(video),
        is_likes=is_likes,
        hidden_score=hidden,
    )


def rank_live(videos: Sequence[Video], top_n: int = DEFAULT_TOP_N) -> List[RankingEntry]:
    candidates = [
        v for v in videos
        if v.status == VideoStatus.VALIDATED and v.last_instagram_sync is not None
    ]
    candidates.sort(key=lambda v: (-(v.instagram_likes or 0), _submitted_at(v), v.id))

    return [
        _entry(video, index + 1, video.instagram_likes or 0, video.instagram_likes or 0, is_likes=True, hidden=False)
        for index, video in enumerate(candidates[:top_n])
    ]


def rank_closed(videos: Sequence[Video], show_public_scores: bool, top_n: int = DEFAULT_TOP_N) -> List[RankingEntry]:
    scored = [
        (video, jury_average(video), engagement_for_ranking(video))
        for video in videos
        if video.status == VideoStatus.VALIDATED
    ]
    scored.sort(key=lambda item: (-item[1], -item[2], _submitted_at(item[0]), item[0].id))

    return [
        _entry(video, index + 1, round_score(average), engagement, is_likes=False, hidden=not show_public_scores)
        for index, (video, average, engagement) in enumerate(scored[:top_n])
    ]


def rank(
    videos: Sequence[Video],
    contest_closed: bool,
    show_public_scores: bool,
    top_n: int = DEFAULT_TOP_N
) -> List[RankingEntry]:
    """
    Ordered leaderboard for the current contest phase.

    Args:
        videos: Videos with participant and evaluations loaded
        contest_closed: Selects the jury algorithm instead of live likes
        show_public_scores: Only affects the closed mode

    Returns:
        Entries with contiguous 1-based positions
    """
    if contest_closed:
        return rank_closed(videos, show_public_scores, top_n)
    return rank_live(videos, top_n)


async def load_ranking_videos(db: AsyncSession) -> List[Video]:
    """All validated videos, freshly read, with participant and evaluations"""
    result = await db.execute(
        select(Video)
        .where(Video.status == VideoStatus.VALIDATED)
        .options(selectinload(Video.participant), selectinload(Video.evaluations))
        .order_by(Video.id)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())
