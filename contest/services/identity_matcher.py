"""
Identity Matcher

Resolves the author handle of an Instagram post to a registered
participant. Matching is exact on the normalized handle, no fuzzy logic.

Two passes, most specific first:
1. normalized handle matches AND participant owns a video
2. normalized handle matches, video or not

When several participants normalize to the same handle, the first one in
the given order wins. Callers load participants ordered by id so the
result is stable.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from contest.orm.participant import Participant


class MatchStatus(str, Enum):
    MATCHED_WITH_SUBMISSION = "MATCHED_WITH_SUBMISSION"
    MATCHED_NO_SUBMISSION = "MATCHED_NO_SUBMISSION"
    NO_MATCH = "NO_MATCH"


@dataclass(frozen=True)
class MatchResult:
    status: MatchStatus
    participant: Optional[Participant] = None

    @property
    def video(self):
        if self.status is MatchStatus.MATCHED_WITH_SUBMISSION:
            return self.participant.video
        return None


NO_MATCH = MatchResult(MatchStatus.NO_MATCH)


def normalize_handle(raw: Optional[str]) -> str:
    """'  @Maria_G ' -> 'maria_g'"""
    if not raw:
        return ""
    return raw.strip().lstrip("@").strip().lower()


def match_participant(handle: Optional[str], participants: Iterable[Participant]) -> MatchResult:
    """
    Find the participant that authored a post.

    Args:
        handle: Post author handle, raw or already normalized
        participants: Candidates with their `video` relationship loaded

    Returns:
        MatchResult carrying the matched participant, if any
    """
    candidate = normalize_handle(handle)
    if not candidate:
        return NO_MATCH

    same_handle = [p for p in participants if normalize_handle(p.instagram) == candidate]
    if not same_handle:
        return NO_MATCH

    for participant in same_handle:
        if participant.video is not None:
            return MatchResult(MatchStatus.MATCHED_WITH_SUBMISSION, participant)

    return MatchResult(MatchStatus.MATCHED_NO_SUBMISSION, same_handle[0])
