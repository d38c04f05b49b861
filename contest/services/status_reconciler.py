"""
Video Status Reconciler

State Flow: PENDING_UPLOAD → PENDING_VALIDATION → VALIDATED
                           ↘                  ↗
                             (matched Instagram post)

- A pending video is auto-validated the moment a matched post is seen.
- VALIDATED and REJECTED are terminal for the sync engine.
- Only an explicit admin decision moves a video out of a terminal state.
"""
import logging
from datetime import datetime
from enum import Enum
from typing import Optional

from contest.orm.video import Video, VideoStatus
from contest.services.identity_matcher import MatchResult, MatchStatus

logger = logging.getLogger(__name__)


class PostLinkStatus(str, Enum):
    """Status reported for an Instagram post in the admin views"""
    PENDING_UPLOAD = "PENDING_UPLOAD"
    PENDING_VALIDATION = "PENDING_VALIDATION"
    VALIDATED = "VALIDATED"
    REJECTED = "REJECTED"
    UNLINKED = "UNLINKED"
    LINKED_NO_SUBMISSION = "LINKED_NO_SUBMISSION"


class AdminDecision(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


# Transitions the sync engine may perform on its own
AUTO_TRANSITIONS = {
    VideoStatus.PENDING_UPLOAD: VideoStatus.VALIDATED,
    VideoStatus.PENDING_VALIDATION: VideoStatus.VALIDATED,
    VideoStatus.VALIDATED: None,
    VideoStatus.REJECTED: None,
}

ADMIN_TARGETS = {
    AdminDecision.APPROVE: VideoStatus.VALIDATED,
    AdminDecision.REJECT: VideoStatus.REJECTED,
}


def reconcile_matched_video(video, now: datetime) -> bool:
    """
    Advance a video after a matched post was observed.

    Works on a Video row or a detached VideoState. Mutates the in-memory
    object only; the caller decides whether to persist.

    Returns:
        True if the video transitioned to VALIDATED
    """
    current = VideoStatus(video.status)
    target = AUTO_TRANSITIONS[current]
    if target is None:
        return False

    video.status = target
    video.validated_at = now
    logger.info(f"Auto-validating video {video.id} ({current.value} -> {target.value})")
    return True


def apply_admin_decision(video: Video, decision: AdminDecision, now: datetime) -> bool:
    """
    Explicit admin override: approve or reject regardless of current state.

    Returns:
        True if the status changed
    """
    target = ADMIN_TARGETS[decision]
    if video.status == target:
        return False

    previous = video.status
    video.status = target
    if target is VideoStatus.VALIDATED:
        video.validated_at = now
    logger.info(f"Admin {decision.value} on video {video.id} ({previous} -> {target.value})")
    return True


def link_status_for(match: MatchResult, video_status: Optional[VideoStatus] = None) -> PostLinkStatus:
    """
    Project a match outcome onto the reported status.

    `video_status` is required for MATCHED_WITH_SUBMISSION and should be the
    status after reconciliation.
    """
    if match.status is MatchStatus.NO_MATCH:
        return PostLinkStatus.UNLINKED
    if match.status is MatchStatus.MATCHED_NO_SUBMISSION:
        return PostLinkStatus.LINKED_NO_SUBMISSION
    if match.status is MatchStatus.MATCHED_WITH_SUBMISSION:
        status = video_status if video_status is not None else match.video.status
        return PostLinkStatus(VideoStatus(status).value)
    raise ValueError(f"Unknown match status: {match.status}")
