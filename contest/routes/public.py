"""
contest/routes/public.py
Public, unauthenticated endpoints: live ranking and contest status
"""
import logging

from fastapi import APIRouter, Depends, Request, Response
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from contest.config.settings import settings
from contest.database import get_db
from contest.errors import internal_error_for
from contest.schemas.ranking import ContestStatusOut, RankingEntryOut, RankingResponse
from contest.services import contest_settings
from contest.services.engagement_sync import run_throttled_sync
from contest.services.instagram_client import InstagramClient, get_instagram_client
from contest.services.ranking_engine import RankingEntry, load_ranking_videos, rank

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/public", tags=["Public"])

limiter = Limiter(key_func=get_remote_address)


def _entry_out(entry: RankingEntry) -> RankingEntryOut:
    return RankingEntryOut(
        id=entry.video_id,
        position=entry.position,
        alias=entry.alias,
        handle=entry.handle,
        score=None if entry.hidden_score else entry.score,
        engagement_count=entry.engagement_count,
        stream_url=entry.stream_url,
        is_likes=entry.is_likes,
        hidden_score=entry.hidden_score,
    )


@router.get("/ranking", response_model=RankingResponse)
@limiter.limit(settings.RANKING_RATE_LIMIT)
async def get_public_ranking(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
    client: InstagramClient = Depends(get_instagram_client)
):
    """
    Top videos for the current contest phase.

    While the contest is open, a throttled Instagram sync runs first;
    sync trouble is never reported here, the last known likes are served.
    """
    response.headers["Cache-Control"] = "no-store"
    try:
        closed = await contest_settings.is_contest_closed(db)
        show_scores = await contest_settings.show_public_scores(db)

        if not closed:
            await run_throttled_sync(db, client, settings.SYNC_INTERVAL_MS)

        videos = await load_ranking_videos(db)
        entries = rank(videos, closed, show_scores, settings.RANKING_TOP_N)
    except Exception as e:
        await db.rollback()
        raise internal_error_for(e, "public ranking")

    return RankingResponse(data=[_entry_out(entry) for entry in entries])


@router.get("/contest-status", response_model=ContestStatusOut)
async def get_contest_status(db: AsyncSession = Depends(get_db)):
    closed_at = await contest_settings.get_closed_at(db)
    return ContestStatusOut(
        is_closed=await contest_settings.is_contest_closed(db),
        closed_at=closed_at.isoformat() if closed_at else None,
    )
