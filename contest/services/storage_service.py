"""
Storage Service

Resolves a playable URL for a contest video. Uploads and binary storage
live in the storage collaborator; this only builds public URLs.
"""
import re
from typing import Optional

from contest.config.settings import settings

_DRIVE_ID = re.compile(r"/d/([^/]+)")


def public_object_url(storage_key: str, base_url: Optional[str] = None) -> str:
    """Public CDN URL of an object in the video bucket"""
    base = (base_url if base_url is not None else settings.PUBLIC_STORAGE_BASE_URL).rstrip("/")
    key = storage_key.lstrip("/")
    return f"{base}/{key}" if base else key


def to_direct_drive_url(url: str) -> str:
    """Google Drive viewer links → direct download links; other URLs unchanged"""
    if "drive.google.com" in url and ("/view" in url or "/file/d/" in url):
        match = _DRIVE_ID.search(url)
        if match:
            return f"https://drive.google.com/uc?export=download&id={match.group(1)}"
    return url


def resolve_stream_url(video, base_url: Optional[str] = None) -> str:
    """
    Playable URL for a video row.

    Prefers the stored `url`; falls back on the storage key. Empty string
    when neither is available.
    """
    if video is None:
        return ""

    stream_url = (video.url or "").strip()
    if not stream_url and video.storage_key:
        stream_url = public_object_url(video.storage_key, base_url)

    return to_direct_drive_url(stream_url) if stream_url else ""
