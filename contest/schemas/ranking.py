"""
contest/schemas/ranking.py
Public ranking payloads
"""
from typing import List, Optional, Union

from pydantic import ConfigDict

from contest.schemas.base import CamelModel


class RankingEntryOut(CamelModel):
    """One leaderboard row. `score` is null when hidden_score is set."""
    id: int
    position: int
    alias: Optional[str] = None
    handle: Optional[str] = None
    score: Optional[Union[int, float]] = None
    engagement_count: int
    stream_url: str = ""
    is_likes: bool
    hidden_score: bool

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 12,
                "position": 1,
                "alias": "Maria G.",
                "handle": "@maria_g",
                "score": 92.0,
                "engagementCount": 340,
                "streamUrl": "https://cdn.example.com/videos/12.mp4",
                "isLikes": False,
                "hiddenScore": False
            }
        }
    )


class RankingResponse(CamelModel):
    success: bool = True
    data: List[RankingEntryOut]


class ContestStatusOut(CamelModel):
    is_closed: bool
    closed_at: Optional[str] = None
