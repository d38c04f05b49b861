"""
Curation Service

Admin match tables built from live Instagram data:
- curation view: every tagged post with its match status, after applying
  the post to the stored videos (auto-validation included)
- likes-closing view: read-only comparison of live vs frozen likes

Provider failures never fail these views; they come back empty with the
error exposed in debug info.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from contest.schemas.instagram import ExternalPost
from contest.services import contest_settings
from contest.services.engagement_sync import (
    PostOutcome,
    SyncResult,
    load_participants,
    sync_posts,
)
from contest.services.identity_matcher import MatchStatus, match_participant, normalize_handle
from contest.services.instagram_client import InstagramAPIError, InstagramClient
from contest.services.status_reconciler import PostLinkStatus, link_status_for

logger = logging.getLogger(__name__)

UNKNOWN_PARTICIPANT = "Unidentified"
ANONYMOUS_USER = "Anonymous"


class CurationFilter(str, Enum):
    ALL = "all"
    PENDING = "pending"
    VALIDATED = "validated"


@dataclass
class CurationView:
    items: List[dict]
    fetch_error: Optional[str]
    fetched: int
    mapped: int


async def fetch_posts_safely(client: InstagramClient) -> Tuple[List[ExternalPost], Optional[str]]:
    """Fetch tagged media, turning provider failures into an error message"""
    try:
        return await client.get_tagged_media(), None
    except InstagramAPIError as e:
        logger.error(f"Error fetching from Instagram: {e.message}")
        return [], e.message


def matches_filter(status: PostLinkStatus, curation_filter: CurationFilter) -> bool:
    if curation_filter is CurationFilter.PENDING:
        return status not in (PostLinkStatus.VALIDATED, PostLinkStatus.REJECTED)
    if curation_filter is CurationFilter.VALIDATED:
        return status is PostLinkStatus.VALIDATED
    return True


def _display_user(post: ExternalPost) -> str:
    return f"@{post.username}" if post.username else ANONYMOUS_USER


def curation_item(outcome: PostOutcome) -> dict:
    post = outcome.post
    participant = outcome.match.participant
    return {
        "id": post.id,
        "db_id": outcome.video.id if outcome.video else None,
        "handles": {
            "post": _display_user(post),
            "participant": participant.instagram if participant else None,
        },
        "participant_name": participant.full_name if participant else UNKNOWN_PARTICIPANT,
        "status": outcome.link_status,
        "like_count": post.like_count or 0,
        "permalink": post.permalink,
        "media_type": post.media_type,
        "thumbnail_url": post.preview_url,
        "uploaded_at": post.timestamp,
        "is_judge_selected": outcome.video.is_judge_selected if outcome.video else False,
    }


def build_curation_items(result: SyncResult, curation_filter: CurationFilter) -> List[dict]:
    items = [
        curation_item(outcome)
        for outcome in result.outcomes
        if matches_filter(outcome.link_status, curation_filter)
    ]
    items.sort(key=lambda item: item["like_count"], reverse=True)
    return items


async def get_curation_view(
    db: AsyncSession,
    client: InstagramClient,
    curation_filter: CurationFilter = CurationFilter.ALL
) -> CurationView:
    """
    Fetch posts, apply them to the stored videos and build the match table.

    The admin view always fetches, since it renders the posts themselves;
    the sync timestamp is refreshed when the fetch succeeded.
    """
    posts, fetch_error = await fetch_posts_safely(client)
    participants = await load_participants(db)
    result = await sync_posts(db, posts, participants)
    if fetch_error is None:
        await contest_settings.record_sync(db)

    return CurationView(
        items=build_curation_items(result, curation_filter),
        fetch_error=fetch_error,
        fetched=len(posts),
        mapped=sum(1 for o in result.outcomes if o.match.status is MatchStatus.MATCHED_WITH_SUBMISSION),
    )


async def get_likes_closing_view(db: AsyncSession, client: InstagramClient) -> CurationView:
    """Live likes next to the frozen closing likes, without writing anything"""
    posts, fetch_error = await fetch_posts_safely(client)
    participants = await load_participants(db)

    items = []
    mapped = 0
    for post in posts:
        match = match_participant(normalize_handle(post.username), participants)
        video = match.video
        if video is not None:
            mapped += 1
        items.append({
            "id": post.id,
            "db_id": video.id if video else None,
            "instagram_user": _display_user(post),
            "participant_name": match.participant.full_name if match.participant else UNKNOWN_PARTICIPANT,
            "status": link_status_for(match),
            "current_likes": post.like_count or 0,
            "closing_likes": video.closing_likes if video else None,
            "closing_date": video.closing_likes_at.isoformat() if video and video.closing_likes_at else None,
            "permalink": post.permalink,
        })

    items.sort(key=lambda item: item["current_likes"], reverse=True)
    return CurationView(items=items, fetch_error=fetch_error, fetched=len(posts), mapped=mapped)
