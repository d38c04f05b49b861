"""
Engagement Sync Service

Applies Instagram tagged-media data to stored videos:
fetch posts → match author to participant → auto-validate → persist likes.

Guarantees:
- Idempotent: a second pass over identical data performs no writes
- A video tagged by several posts is written once, from pick_post()
- A missing like_count never erases the stored count
- Each video is written and committed on its own; a failing row is rolled
  back, logged and reported in SyncResult.failed without aborting the batch
- A failed fetch degrades to the last known values; the sync timestamp is
  only persisted after processing, so the next request retries
"""
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from contest.orm.base import utcnow
from contest.orm.participant import Participant
from contest.orm.video import Video, VideoStatus
from contest.schemas.instagram import ExternalPost
from contest.services import contest_settings
from contest.services.identity_matcher import MatchResult, MatchStatus, match_participant, normalize_handle
from contest.services.instagram_client import InstagramAPIError, InstagramClient
from contest.services.status_reconciler import PostLinkStatus, link_status_for, reconcile_matched_video
from contest.services.sync_throttle import should_sync, sync_guard

logger = logging.getLogger(__name__)


# =============================================================================
# Detached snapshots of stored rows
# =============================================================================

@dataclass
class VideoState:
    """Plain copy of the sync-relevant columns of a video"""
    id: int
    status: VideoStatus
    instagram_likes: int
    instagram_url: Optional[str]
    last_instagram_sync: Optional[datetime]
    validated_at: Optional[datetime]
    closing_likes: Optional[int]
    closing_likes_at: Optional[datetime]
    is_judge_selected: bool

    @classmethod
    def from_orm(cls, video: Video) -> "VideoState":
        return cls(
            id=video.id,
            status=VideoStatus(video.status),
            instagram_likes=video.instagram_likes or 0,
            instagram_url=video.instagram_url,
            last_instagram_sync=video.last_instagram_sync,
            validated_at=video.validated_at,
            closing_likes=video.closing_likes,
            closing_likes_at=video.closing_likes_at,
            is_judge_selected=bool(video.is_judge_selected),
        )


@dataclass
class ParticipantRef:
    id: int
    instagram: str
    full_name: str
    video: Optional[VideoState]

    @classmethod
    def from_orm(cls, participant: Participant) -> "ParticipantRef":
        return cls(
            id=participant.id,
            instagram=participant.instagram or "",
            full_name=participant.full_name,
            video=VideoState.from_orm(participant.video) if participant.video is not None else None,
        )


# =============================================================================
# Results
# =============================================================================

@dataclass
class PostOutcome:
    """What happened to one post during a sync pass"""
    post: ExternalPost
    handle: str
    match: MatchResult
    link_status: PostLinkStatus
    video: Optional[VideoState] = None
    written: bool = False
    auto_validated: bool = False
    error: Optional[str] = None


@dataclass
class SyncFailure:
    video_id: int
    post_id: str
    error: str


@dataclass
class SyncResult:
    outcomes: List[PostOutcome] = field(default_factory=list)
    succeeded: List[int] = field(default_factory=list)
    failed: List[SyncFailure] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.outcomes)

    @property
    def updated(self) -> int:
        return len(self.succeeded)

    @property
    def auto_validated(self) -> List[int]:
        return [o.video.id for o in self.outcomes if o.auto_validated and o.error is None]


@dataclass
class ThrottledSyncReport:
    """Outcome of the gated public-path sync"""
    attempted: bool
    result: Optional[SyncResult] = None
    error: Optional[str] = None


# =============================================================================
# Loading
# =============================================================================

async def load_participants(db: AsyncSession) -> List[ParticipantRef]:
    """Participants with a handle, in id order, detached from the session"""
    result = await db.execute(
        select(Participant)
        .where(Participant.instagram != "")
        .options(selectinload(Participant.video))
        .order_by(Participant.id)
        .execution_options(populate_existing=True)
    )
    return [ParticipantRef.from_orm(p) for p in result.scalars().all()]


# =============================================================================
# Core sync
# =============================================================================

def _changes_for(post: ExternalPost, state: VideoState, transitioned: bool, now: datetime) -> dict:
    """Column values to write, or an empty dict when nothing changed"""
    new_likes = post.like_count if post.like_count is not None else state.instagram_likes
    new_url = post.permalink or state.instagram_url

    changed = (
        transitioned
        or new_likes != state.instagram_likes
        or new_url != state.instagram_url
        or state.last_instagram_sync is None
    )
    if not changed:
        return {}

    values = {
        "instagram_likes": new_likes,
        "instagram_url": new_url,
        "last_instagram_sync": now,
    }
    if transitioned:
        values["status"] = state.status
        values["validated_at"] = state.validated_at
    return values

def pick_post(candidates: Sequence[ExternalPost]) -> ExternalPost:
    """
    The post that decides what is stored when one video has several.

    Newest `timestamp` wins, then the highest like_count, then the lowest
    post id, so the choice does not depend on provider order.
    """
    ordered = sorted(candidates, key=lambda p: p.id)
    ordered.sort(key=lambda p: p.like_count if p.like_count is not None else -1, reverse=True)
    ordered.sort(key=lambda p: p.timestamp or "", reverse=True)
    return ordered[0]


async def _apply_post(
    db: AsyncSession,
    post: ExternalPost,
    participant: ParticipantRef,
    now: datetime,
    result: SyncResult
) -> Tuple[bool, bool, Optional[str]]:
    """
    Reconcile and persist one video from its chosen post.

    Returns:
        (written, auto_validated, error)
    """
    state = participant.video
    before = replace(state)
    transitioned = reconcile_matched_video(state, now)
    values = _changes_for(post, state, transitioned, now)
    if not values:
        return False, False, None

    try:
        await db.execute(update(Video).where(Video.id == state.id).values(**values))
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.error(f"Failed to apply post {post.id} to video {state.id}: {str(e)}")
        # Keep the snapshot in line with what is actually stored
        participant.video = before
        result.failed.append(SyncFailure(video_id=state.id, post_id=post.id, error=str(e)))
        return False, False, str(e)

    state.instagram_likes = values["instagram_likes"]
    state.instagram_url = values["instagram_url"]
    state.last_instagram_sync = now
    result.succeeded.append(state.id)
    return True, transitioned, None


async def sync_posts(
    db: AsyncSession,
    posts: Sequence[ExternalPost],
    participants: Sequence[ParticipantRef],
    now: Optional[datetime] = None
) -> SyncResult:
    """
    Apply a batch of posts to the stored videos.

    Each video is written at most once per pass, from the post chosen by
    pick_post(); every post still gets an outcome.

    Args:
        db: Database session
        posts: Tagged media as returned by the provider
        participants: Snapshot from load_participants(); updated in place
        now: Timestamp recorded on written rows

    Returns:
        SyncResult with one outcome per post, in provider order
    """
    now = now or utcnow()
    result = SyncResult()

    matched: List[Tuple[ExternalPost, str, MatchResult]] = []
    candidates: Dict[int, List[ExternalPost]] = {}
    for post in posts:
        handle = normalize_handle(post.username)
        match = match_participant(handle, participants)
        matched.append((post, handle, match))
        if match.status is MatchStatus.MATCHED_WITH_SUBMISSION:
            candidates.setdefault(match.video.id, []).append(post)

    chosen = {video_id: pick_post(group) for video_id, group in candidates.items()}
    applied: Dict[int, Tuple[bool, bool, Optional[str]]] = {}

    for post, handle, match in matched:
        if match.status is not MatchStatus.MATCHED_WITH_SUBMISSION:
            result.outcomes.append(PostOutcome(
                post=post,
                handle=handle,
                match=match,
                link_status=link_status_for(match),
            ))
            continue

        video_id = match.video.id
        if video_id not in applied:
            applied[video_id] = await _apply_post(db, chosen[video_id], match.participant, now, result)

        state: VideoState = match.participant.video
        outcome = PostOutcome(
            post=post,
            handle=handle,
            match=match,
            link_status=link_status_for(match, state.status),
            video=state,
        )
        if post is chosen[video_id]:
            outcome.written, outcome.auto_validated, outcome.error = applied[video_id]
        result.outcomes.append(outcome)

    logger.info(
        f"Instagram sync: processed={result.processed} updated={result.updated} "
        f"auto_validated={len(result.auto_validated)} failed={len(result.failed)}"
    )
    return result


async def run_full_sync(db: AsyncSession, client: InstagramClient, now: Optional[datetime] = None) -> SyncResult:
    """
    Unthrottled sync for admin use.

    Raises:
        InstagramAPIError: when the provider cannot be reached
    """
    now = now or utcnow()
    posts = await client.get_tagged_media()
    participants = await load_participants(db)
    result = await sync_posts(db, posts, participants, now=now)
    await contest_settings.record_sync(db, utcnow())
    return result


async def run_throttled_sync(
    db: AsyncSession,
    client: InstagramClient,
    interval_ms: int,
    now: Optional[datetime] = None
) -> ThrottledSyncReport:
    """
    Public-path sync: at most once per `interval_ms`.

    Never raises for provider or persistence trouble; the caller keeps
    serving the last known data.
    """
    async with sync_guard():
        now = now or utcnow()
        last_sync_at = await contest_settings.get_last_sync_at(db)
        if not should_sync(now, last_sync_at, interval_ms):
            return ThrottledSyncReport(attempted=False)

        logger.info("Ranking: triggering throttled Instagram sync")
        try:
            posts = await client.get_tagged_media()
        except InstagramAPIError as e:
            logger.warning(f"Instagram sync skipped, serving last known values: {e.message}")
            return ThrottledSyncReport(attempted=True, error=e.message)

        try:
            participants = await load_participants(db)
            result = await sync_posts(db, posts, participants, now=now)
            await contest_settings.record_sync(db, utcnow())
        except Exception as e:
            await db.rollback()
            logger.error(f"Instagram sync aborted (non-fatal): {str(e)}", exc_info=True)
            return ThrottledSyncReport(attempted=True, error=str(e))

        return ThrottledSyncReport(attempted=True, result=result)
