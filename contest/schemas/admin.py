"""
contest/schemas/admin.py
Request and response payloads of the admin endpoints
"""
from typing import Dict, List, Optional

from pydantic import Field

from contest.schemas.base import CamelModel
from contest.services.status_reconciler import AdminDecision, PostLinkStatus


# ================= CURATION =================

class CurationItem(CamelModel):
    id: str
    db_id: Optional[int] = None
    handles: Dict[str, Optional[str]]
    participant_name: str
    status: PostLinkStatus
    like_count: int
    permalink: Optional[str] = None
    media_type: Optional[str] = None
    thumbnail_url: str = ""
    uploaded_at: Optional[str] = None
    is_judge_selected: bool = False


class DebugInfo(CamelModel):
    error: Optional[str] = None
    count: int = 0
    mapped: int = 0


class CurationResponse(CamelModel):
    success: bool = True
    data: List[CurationItem]
    debug_info: DebugInfo


class LikesClosingItem(CamelModel):
    id: str
    db_id: Optional[int] = None
    instagram_user: str
    participant_name: str
    status: PostLinkStatus
    current_likes: int
    closing_likes: Optional[int] = None
    closing_date: Optional[str] = None
    permalink: Optional[str] = None


class LikesClosingResponse(CamelModel):
    success: bool = True
    data: List[LikesClosingItem]
    debug_info: DebugInfo


class SnapshotResponse(CamelModel):
    success: bool = True
    snapshotted: int
    failed: List[int] = Field(default_factory=list)
    taken_at: Optional[str] = None
    message: str


class SyncStats(CamelModel):
    processed: int
    updated: int
    auto_validated: int
    failed: int


class SyncResponse(CamelModel):
    success: bool = True
    message: str
    stats: SyncStats


# ================= SETTINGS =================

class ContestSettingsUpdate(CamelModel):
    """Each flag is optional and persisted independently"""
    is_closed: Optional[bool] = None
    show_public_scores: Optional[bool] = None


class ContestSettingsOut(CamelModel):
    is_closed: bool
    closed_at: Optional[str] = None
    show_public_scores: bool


class ContestSettingsResponse(CamelModel):
    success: bool = True
    data: ContestSettingsOut


# ================= VIDEOS =================

class ValidateVideosRequest(CamelModel):
    video_ids: List[int] = Field(..., min_length=1)
    action: AdminDecision


class ValidateVideosResponse(CamelModel):
    success: bool = True
    changed: List[int]
    message: str


class ToggleJudgeRequest(CamelModel):
    video_id: int
    is_selected: bool


class ToggleJudgeResponse(CamelModel):
    success: bool = True
    video_id: int
    is_judge_selected: bool
