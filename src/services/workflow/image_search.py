"""Unsplash stock photo search client."""

import re
from typing import Any, List, Optional, Sequence

import httpx
from loguru import logger as log

from common import global_config
from src.services.workflow.models import ImageDescriptor

_NON_ALPHANUMERIC = re.compile(r"[^a-zA-Z0-9\s]")


def build_search_query(keywords: Sequence[str]) -> str:
    return _NON_ALPHANUMERIC.sub("", " ".join(keywords))


def to_image_descriptor(photo: dict[str, Any]) -> ImageDescriptor:
    urls = photo.get("urls") or {}
    links = photo.get("links") or {}
    user = photo.get("user") or {}
    return ImageDescriptor(
        id=str(photo["id"]),
        url=urls["regular"],
        thumb=urls["thumb"],
        description=photo.get("description")
        or photo.get("alt_description")
        or "Stock photo",
        photographer=user.get("name") or "Unknown",
        download_url=links.get("download") or urls.get("full") or urls["regular"],
    )


class UnsplashImageSearch:
    def __init__(
        self,
        access_key: str = global_config.UNSPLASH_ACCESS_KEY,
        client: Optional[httpx.AsyncClient] = None,
        base_url: str = global_config.stock_photos.api_base_url,
        per_page: int = global_config.stock_photos.per_page,
        orientation: str = global_config.stock_photos.orientation,
    ) -> None:
        self.access_key = access_key
        self.client = client or httpx.AsyncClient(
            timeout=global_config.stock_photos.request_timeout_seconds
        )
        self.base_url = base_url.rstrip("/")
        self.per_page = per_page
        self.orientation = orientation

    async def search(self, keywords: Sequence[str]) -> List[ImageDescriptor]:
        """
        Search for landscape photos matching the keywords.

        Returns an empty list on any non-success status or transport failure.
        """
        query = build_search_query(keywords)
        try:
            response = await self.client.get(
                f"{self.base_url}/search/photos",
                params={
                    "query": query,
                    "per_page": self.per_page,
                    "orientation": self.orientation,
                },
                headers={
                    "Accept-Version": "v1",
                    "Authorization": f"Client-ID {self.access_key}",
                },
            )
            if not response.is_success:
                log.warning(f"Unsplash API error: {response.status_code}")
                return []

            data = response.json()
            return [to_image_descriptor(photo) for photo in data.get("results") or []]
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            log.warning(f"Unsplash API request failed: {e}")
            return []
