"""
contest/routes/admin.py
Admin endpoints: Instagram curation, closing snapshot, contest settings
and video review. Every route requires an admin bearer token.
"""
import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from contest.database import get_db
from contest.errors import ServiceUnavailableError
from contest.rbac import AdminPrincipal, get_current_admin
from contest.schemas.admin import (
    ContestSettingsOut,
    ContestSettingsResponse,
    ContestSettingsUpdate,
    CurationResponse,
    DebugInfo,
    LikesClosingResponse,
    SnapshotResponse,
    SyncResponse,
    SyncStats,
    ToggleJudgeRequest,
    ToggleJudgeResponse,
    ValidateVideosRequest,
    ValidateVideosResponse,
)
from contest.services import contest_settings, curation_service, likes_snapshot, video_review_service
from contest.services.engagement_sync import run_full_sync
from contest.services.instagram_client import InstagramAPIError, InstagramClient, get_instagram_client

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/api/admin",
    tags=["Admin"],
    dependencies=[Depends(get_current_admin)]
)


# ================= INSTAGRAM CURATION =================

@router.get("/social-media", response_model=CurationResponse)
async def get_social_media_curation(
    filter: curation_service.CurationFilter = Query(curation_service.CurationFilter.ALL),
    db: AsyncSession = Depends(get_db),
    client: InstagramClient = Depends(get_instagram_client)
):
    """
    Tagged posts with their match status.
    Matched pending videos are auto-validated as a side effect.
    """
    view = await curation_service.get_curation_view(db, client, filter)
    return CurationResponse(
        data=view.items,
        debug_info=DebugInfo(error=view.fetch_error, count=view.fetched, mapped=view.mapped),
    )


@router.post("/social-media/sync", response_model=SyncResponse)
async def force_social_media_sync(
    db: AsyncSession = Depends(get_db),
    client: InstagramClient = Depends(get_instagram_client)
):
    """Unthrottled deep sync"""
    try:
        result = await run_full_sync(db, client)
    except InstagramAPIError as e:
        raise ServiceUnavailableError(f"Instagram unavailable: {e.message}")

    return SyncResponse(
        message=f"Deep sync processed {result.processed}, updated {result.updated}",
        stats=SyncStats(
            processed=result.processed,
            updated=result.updated,
            auto_validated=len(result.auto_validated),
            failed=len(result.failed),
        ),
    )


@router.post("/social-media/snapshot", response_model=SnapshotResponse)
async def snapshot_closing_likes(
    db: AsyncSession = Depends(get_db),
    admin: AdminPrincipal = Depends(get_current_admin)
):
    """Freeze current likes of validated videos. Irreversible."""
    logger.info(f"Closing likes snapshot requested by {admin.subject}")
    result = await likes_snapshot.snapshot_closing_likes(db)
    return SnapshotResponse(
        snapshotted=result.count,
        failed=result.failed,
        taken_at=result.taken_at.isoformat() if result.taken_at else None,
        message=f"Snapshotted {result.count} videos.",
    )


@router.get("/likes-closing", response_model=LikesClosingResponse)
async def get_likes_closing(
    db: AsyncSession = Depends(get_db),
    client: InstagramClient = Depends(get_instagram_client)
):
    view = await curation_service.get_likes_closing_view(db, client)
    return LikesClosingResponse(
        data=view.items,
        debug_info=DebugInfo(error=view.fetch_error, count=view.fetched, mapped=view.mapped),
    )


# ================= CONTEST SETTINGS =================

async def _settings_out(db: AsyncSession) -> ContestSettingsOut:
    closed_at = await contest_settings.get_closed_at(db)
    return ContestSettingsOut(
        is_closed=await contest_settings.is_contest_closed(db),
        closed_at=closed_at.isoformat() if closed_at else None,
        show_public_scores=await contest_settings.show_public_scores(db),
    )


@router.get("/contest-settings", response_model=ContestSettingsResponse)
async def get_contest_settings(db: AsyncSession = Depends(get_db)):
    return ContestSettingsResponse(data=await _settings_out(db))


@router.post("/contest-settings", response_model=ContestSettingsResponse)
async def update_contest_settings(
    data: ContestSettingsUpdate,
    db: AsyncSession = Depends(get_db),
    admin: AdminPrincipal = Depends(get_current_admin)
):
    """Toggle isClosed and/or showPublicScores; absent fields are left alone"""
    if data.is_closed is not None:
        await contest_settings.set_contest_closed(db, data.is_closed)
    if data.show_public_scores is not None:
        await contest_settings.set_show_public_scores(db, data.show_public_scores)
    logger.info(f"Contest settings updated by {admin.subject}: {data.model_dump(exclude_none=True)}")
    return ContestSettingsResponse(data=await _settings_out(db))


# ================= VIDEO REVIEW =================

@router.post("/videos/validate", response_model=ValidateVideosResponse)
async def validate_videos(
    data: ValidateVideosRequest,
    db: AsyncSession = Depends(get_db)
):
    changed = await video_review_service.review_videos(db, data.video_ids, data.action)
    return ValidateVideosResponse(
        changed=changed,
        message=f"{len(changed)} videos updated ({data.action.value})",
    )


@router.post("/videos/toggle-judge", response_model=ToggleJudgeResponse)
async def toggle_judge_selection(
    data: ToggleJudgeRequest,
    db: AsyncSession = Depends(get_db)
):
    video = await video_review_service.set_judge_selection(db, data.video_id, data.is_selected)
    return ToggleJudgeResponse(video_id=video.id, is_judge_selected=video.is_judge_selected)
