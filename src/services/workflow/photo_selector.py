"""
Photo Selector

Picks one stock photo per post. Searches widen from the generated keywords to
an enhanced set and then to a themed alternative set; posts are processed in
fixed-size concurrent batches with a pause between batches.
"""

import asyncio
import random
import re
import zlib
from typing import Awaitable, Callable, List, Optional, Protocol, Sequence

from loguru import logger as log

from common import global_config
from src.services.workflow.keywords import KeywordGenerator
from src.services.workflow.models import (
    BrandMetadata,
    ImageDescriptor,
    PhotoSelectionResult,
    Post,
)

MIN_RESULTS = 3
TOP_RESULTS = 3

SEARCH_ENHANCERS = [
    "modern",
    "contemporary",
    "diverse",
    "successful",
    "innovative",
    "collaborative",
    "dynamic",
    "creative",
    "professional",
    "corporate",
    "startup",
    "enterprise",
    "global",
    "local",
    "sustainable",
]

ALTERNATIVE_KEYWORD_SETS = [
    ["workspace", "productivity", "teamwork", "communication"],
    ["technology", "digital", "innovation", "future"],
    ["leadership", "strategy", "growth", "achievement"],
    ["creativity", "design", "inspiration", "vision"],
    ["community", "connection", "networking", "relationships"],
    ["education", "learning", "development", "knowledge"],
    ["health", "wellness", "balance", "lifestyle"],
    ["finance", "investment", "wealth", "security"],
]

SCENE_MODIFIERS = ["environment", "setting", "atmosphere", "scene", "moment"]

FALLBACK_SEARCH_KEYWORDS = ["business", "professional", "office"]
NO_RESULTS_KEYWORDS = ["business", "professional"]
ERROR_KEYWORDS = ["business"]

_FALLBACK_PHOTO = "https://images.unsplash.com/photo-1507003211169-0a1dd7228f2d"

_LEADING_DIGITS = re.compile(r"\d+")


class ImageSearch(Protocol):
    async def search(self, keywords: Sequence[str]) -> List[ImageDescriptor]: ...


def placeholder_image() -> ImageDescriptor:
    return ImageDescriptor(
        id="fallback",
        url=f"{_FALLBACK_PHOTO}?w=800&h=600&fit=crop",
        thumb=f"{_FALLBACK_PHOTO}?w=400&h=300&fit=crop",
        description="Professional business meeting",
        photographer="Unsplash",
        download_url=f"{_FALLBACK_PHOTO}?w=800&h=600&fit=crop",
    )


def alternative_set_index(post_id: str) -> int:
    """Map a post id onto one of the themed keyword groups.

    The leading digits of the second ``_`` segment pick the group, so
    ``post_12`` and ``post_12_a`` both map from 12 and ``post_3x`` from 3.
    Ids without such digits are hashed so the choice stays stable per post.
    """
    segments = post_id.split("_")
    match = _LEADING_DIGITS.match(segments[1]) if len(segments) > 1 else None
    if match:
        value = int(match.group(0))
    else:
        value = zlib.crc32(post_id.encode("utf-8"))
    return value % len(ALTERNATIVE_KEYWORD_SETS)


class PhotoSelector:
    def __init__(
        self,
        keyword_generator: KeywordGenerator,
        image_search: ImageSearch,
        rng: Optional[random.Random] = None,
        batch_size: int = global_config.stock_photos.batch_size,
        batch_delay_seconds: float = global_config.stock_photos.batch_delay_seconds,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.keyword_generator = keyword_generator
        self.image_search = image_search
        self.rng = rng or random.Random()
        self.batch_size = batch_size
        self.batch_delay_seconds = batch_delay_seconds
        self.sleep = sleep

    def alternative_keywords(self, post: Post) -> List[str]:
        themed = ALTERNATIVE_KEYWORD_SETS[alternative_set_index(post.id)]
        return [*themed[:3], self.rng.choice(SCENE_MODIFIERS)]

    async def select_for_post(
        self, post: Post, brand: Optional[BrandMetadata] = None
    ) -> PhotoSelectionResult:
        """Select a photo for one post; failures become a placeholder result."""
        try:
            return await self._select(post, brand)
        except Exception as e:
            log.warning(f"Error selecting stock photo for post {post.id}: {e}")
            return PhotoSelectionResult(
                post_id=post.id,
                selected_image=placeholder_image(),
                keywords=list(ERROR_KEYWORDS),
                reasoning="Error occurred, using fallback image",
            )

    async def _select(
        self, post: Post, brand: Optional[BrandMetadata]
    ) -> PhotoSelectionResult:
        keywords = await self.keyword_generator.generate(post, brand)
        log.debug(f"Post {post.id} keywords: {keywords}")

        # (attempt name, keywords, results) of the last attempt that found anything
        best: Optional[tuple[str, List[str], List[ImageDescriptor]]] = None

        images = await self.image_search.search(keywords)
        if images:
            best = ("original", keywords, images)

        if len(images) < MIN_RESULTS:
            enhanced = [*keywords, self.rng.choice(SEARCH_ENHANCERS)]
            log.debug(f"Post {post.id} enhanced keywords: {enhanced}")
            images = await self.image_search.search(enhanced)
            if images:
                best = ("enhanced", enhanced, images)

        if len(images) < MIN_RESULTS:
            alternative = self.alternative_keywords(post)
            log.debug(f"Post {post.id} alternative keywords: {alternative}")
            images = await self.image_search.search(alternative)
            if images:
                best = ("alternative", alternative, images)

        if best is None:
            fallback_images = await self.image_search.search(FALLBACK_SEARCH_KEYWORDS)
            return PhotoSelectionResult(
                post_id=post.id,
                selected_image=fallback_images[0]
                if fallback_images
                else placeholder_image(),
                keywords=list(NO_RESULTS_KEYWORDS),
                reasoning=(
                    "No images found for specific keywords, "
                    "using fallback business images"
                ),
            )

        attempt_name, used_keywords, found = best
        index = self.rng.randrange(min(len(found), TOP_RESULTS))
        selected = found[index]
        log.info(
            f"Post {post.id} selected image {selected.id} by {selected.photographer}"
        )
        return PhotoSelectionResult(
            post_id=post.id,
            selected_image=selected,
            keywords=used_keywords,
            reasoning=(
                f"Selected random image {index + 1} from {len(found)} results "
                f"of the {attempt_name} search based on keywords: "
                f"{', '.join(used_keywords)}"
            ),
        )

    async def select_for_posts(
        self, posts: Sequence[Post], brand: Optional[BrandMetadata] = None
    ) -> List[PhotoSelectionResult]:
        """
        Select photos for every post, batch by batch.

        Posts inside a batch run concurrently; batches run one after another
        with a fixed delay between them (none after the last batch).
        """
        results: List[PhotoSelectionResult] = []
        for start in range(0, len(posts), self.batch_size):
            batch = posts[start : start + self.batch_size]
            batch_results = await asyncio.gather(
                *(self.select_for_post(post, brand) for post in batch)
            )
            results.extend(batch_results)

            if start + self.batch_size < len(posts):
                await self.sleep(self.batch_delay_seconds)
        return results
