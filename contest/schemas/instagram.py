"""
contest/schemas/instagram.py
Shape of the tagged-media objects returned by the Instagram Graph API.
These are read-through only and never persisted.
"""
from typing import Optional
from pydantic import BaseModel


class ExternalPost(BaseModel):
    """A post that tags the contest account"""
    id: str
    username: Optional[str] = None
    like_count: Optional[int] = None
    permalink: Optional[str] = None
    timestamp: Optional[str] = None
    media_type: Optional[str] = None  # IMAGE, VIDEO, CAROUSEL_ALBUM
    caption: Optional[str] = None
    comments_count: Optional[int] = None
    thumbnail_url: Optional[str] = None
    media_url: Optional[str] = None

    @property
    def preview_url(self) -> str:
        return self.thumbnail_url or self.media_url or ""
