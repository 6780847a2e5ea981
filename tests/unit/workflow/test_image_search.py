import httpx
import pytest

from src.services.workflow.image_search import (
    UnsplashImageSearch,
    build_search_query,
    to_image_descriptor,
)
from tests.test_template import TestTemplate


def unsplash_photo(photo_id: str, **overrides) -> dict:
    photo = {
        "id": photo_id,
        "description": f"Description {photo_id}",
        "alt_description": f"Alt {photo_id}",
        "urls": {
            "regular": f"https://images.unsplash.com/{photo_id}?w=1080",
            "thumb": f"https://images.unsplash.com/{photo_id}?w=200",
            "full": f"https://images.unsplash.com/{photo_id}",
        },
        "links": {"download": f"https://unsplash.com/photos/{photo_id}/download"},
        "user": {"name": "Jane Photographer"},
    }
    photo.update(overrides)
    return photo


def make_search(handler) -> UnsplashImageSearch:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return UnsplashImageSearch(
        access_key="test-key",
        client=client,
        base_url="https://api.unsplash.test",
        per_page=5,
        orientation="landscape",
    )


class TestImageSearch(TestTemplate):
    def test_query_strips_punctuation(self):
        assert build_search_query(["team-work!", "modern office"]) == (
            "teamwork modern office"
        )

    def test_descriptor_falls_back_to_alt_description(self):
        descriptor = to_image_descriptor(unsplash_photo("abc", description=None))

        assert descriptor.description == "Alt abc"
        assert descriptor.photographer == "Jane Photographer"
        assert descriptor.download_url.endswith("/abc/download")

    @pytest.mark.asyncio
    async def test_search_sends_expected_request(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = request.url
            seen["headers"] = request.headers
            return httpx.Response(
                200, json={"results": [unsplash_photo("a"), unsplash_photo("b")]}
            )

        images = await make_search(handler).search(["modern office", "teamwork"])

        assert [image.id for image in images] == ["a", "b"]
        assert seen["url"].path == "/search/photos"
        assert seen["url"].params["query"] == "modern office teamwork"
        assert seen["url"].params["per_page"] == "5"
        assert seen["url"].params["orientation"] == "landscape"
        assert seen["headers"]["Authorization"] == "Client-ID test-key"
        assert seen["headers"]["Accept-Version"] == "v1"

    @pytest.mark.asyncio
    async def test_error_status_returns_empty(self):
        images = await make_search(lambda request: httpx.Response(403)).search(
            ["office"]
        )

        assert images == []

    @pytest.mark.asyncio
    async def test_transport_error_returns_empty(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        images = await make_search(handler).search(["office"])

        assert images == []

    @pytest.mark.asyncio
    async def test_malformed_payload_returns_empty(self):
        images = await make_search(
            lambda request: httpx.Response(200, json={"results": [{"id": "x"}]})
        ).search(["office"])

        assert images == []
