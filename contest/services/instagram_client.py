"""
Instagram Graph API client

Fetches the media in which the contest account has been tagged.
Only the response shape matters to the rest of the system; every failure
is raised as InstagramAPIError so the sync boundary can degrade to the
last known values.
"""
import logging
from typing import List, Optional

import httpx
from pydantic import ValidationError

from contest.config.settings import settings
from contest.schemas.instagram import ExternalPost

logger = logging.getLogger(__name__)

TAGGED_MEDIA_FIELDS = (
    "id,caption,media_type,media_url,thumbnail_url,permalink,"
    "timestamp,like_count,comments_count,username"
)


class InstagramAPIError(Exception):
    """Provider unreachable, rate limited, misconfigured or malformed."""
    def __init__(self, message: str, code: str = "INSTAGRAM_API_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class InstagramClient:
    """Thin async wrapper over GET /{account_id}/tags"""

    def __init__(
        self,
        access_token: Optional[str] = None,
        account_id: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        page_limit: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.access_token = access_token if access_token is not None else settings.IG_ACCESS_TOKEN
        self.account_id = account_id if account_id is not None else settings.IG_USER_ID
        self.base_url = (base_url or settings.INSTAGRAM_GRAPH_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.INSTAGRAM_TIMEOUT_SECONDS
        self.page_limit = page_limit or settings.INSTAGRAM_PAGE_LIMIT
        self._transport = transport

    async def get_tagged_media(self) -> List[ExternalPost]:
        """
        Fetch the latest tagged media of the contest account.

        Raises:
            InstagramAPIError: credentials missing, HTTP failure or bad payload
        """
        if not self.access_token or not self.account_id:
            raise InstagramAPIError("Instagram credentials missing", code="CONFIG_MISSING")

        params = {
            "fields": TAGGED_MEDIA_FIELDS,
            "limit": self.page_limit,
        }
        headers = {"Authorization": f"Bearer {self.access_token}"}

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.get(
                    f"{self.base_url}/{self.account_id}/tags",
                    params=params,
                    headers=headers
                )
                response.raise_for_status()
                payload = response.json()
            except httpx.HTTPStatusError as e:
                message = _provider_message(e.response) or str(e)
                logger.error(f"Instagram tagged media request failed: {message}")
                raise InstagramAPIError(message) from e
            except (httpx.HTTPError, ValueError) as e:
                logger.error(f"Instagram tagged media request failed: {str(e)}")
                raise InstagramAPIError(str(e)) from e

        try:
            return [ExternalPost.model_validate(item) for item in payload.get("data") or []]
        except (ValidationError, AttributeError) as e:
            raise InstagramAPIError(f"Malformed tagged media payload: {str(e)}", code="MALFORMED_PAYLOAD") from e


def _provider_message(response: httpx.Response) -> Optional[str]:
    """Extract the Graph API error message, if the body carries one"""
    try:
        return response.json().get("error", {}).get("message")
    except (ValueError, AttributeError):
        return None


def get_instagram_client() -> InstagramClient:
    """Dependency for routes; overridden in tests"""
    return InstagramClient()
