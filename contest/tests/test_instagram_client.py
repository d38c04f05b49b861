"""
Instagram Graph API client against a mocked transport
"""
import httpx
import pytest

from contest.services.instagram_client import InstagramAPIError, InstagramClient


def _client(handler, **kwargs) -> InstagramClient:
    options = dict(access_token="token", account_id="1789", base_url="https://graph.test/v19.0")
    options.update(kwargs)
    return InstagramClient(transport=httpx.MockTransport(handler), **options)


@pytest.mark.asyncio
async def test_fetches_tagged_media():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        return httpx.Response(200, json={"data": [
            {"id": "1", "username": "maria_g", "like_count": 12, "media_type": "VIDEO"},
            {"id": "2", "username": "anon_fan"},
        ]})

    posts = await _client(handler).get_tagged_media()

    assert [p.id for p in posts] == ["1", "2"]
    assert posts[0].like_count == 12
    assert posts[1].like_count is None
    assert seen["url"].startswith("https://graph.test/v19.0/1789/tags?")
    assert "like_count" in seen["url"]
    assert seen["auth"] == "Bearer token"


@pytest.mark.asyncio
async def test_missing_credentials():
    client = _client(lambda request: httpx.Response(200, json={"data": []}), access_token="")

    with pytest.raises(InstagramAPIError) as exc_info:
        await client.get_tagged_media()
    assert exc_info.value.code == "CONFIG_MISSING"


@pytest.mark.asyncio
async def test_provider_error_message_is_surfaced():
    def handler(request):
        return httpx.Response(400, json={"error": {"message": "Invalid OAuth access token."}})

    with pytest.raises(InstagramAPIError) as exc_info:
        await _client(handler).get_tagged_media()
    assert exc_info.value.message == "Invalid OAuth access token."


@pytest.mark.asyncio
async def test_network_failure_is_wrapped():
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(InstagramAPIError):
        await _client(handler).get_tagged_media()


@pytest.mark.asyncio
async def test_malformed_payload():
    def handler(request):
        return httpx.Response(200, json={"data": [{"username": "no_id"}]})

    with pytest.raises(InstagramAPIError) as exc_info:
        await _client(handler).get_tagged_media()
    assert exc_info.value.code == "MALFORMED_PAYLOAD"
