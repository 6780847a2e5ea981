"""
Keyword Generator

Turns a post (plus optional brand metadata) into stock-photo search keywords
using the text generation model, with canned fallbacks when the model fails.
"""

import random
from typing import List, Optional

from loguru import logger as log

from common import global_config
from src.services.workflow.models import BrandMetadata, Post
from utils.llm.text_generation import TextGenerator

MIN_KEYWORDS = 4
MAX_KEYWORDS = 6
MIN_KEYWORD_LENGTH = 3
MAX_KEYWORD_LENGTH = 29
FALLBACK_KEYWORD_LIMIT = 4

KEYWORD_ENHANCERS = [
    "modern",
    "contemporary",
    "diverse",
    "successful",
    "innovative",
    "collaborative",
    "dynamic",
]

FALLBACK_KEYWORD_SETS = [
    ["corporate meeting", "business professionals", "office workspace"],
    ["team collaboration", "modern office", "business growth"],
    ["professional success", "workplace diversity", "corporate culture"],
    ["business innovation", "executive team", "company success"],
    ["office environment", "business meeting", "professional development"],
]

# Checked in order; a later match overrides an earlier one
CATEGORY_FALLBACKS = [
    (
        "education",
        ["education", "learning environment", "knowledge sharing", "academic success"],
    ),
    (
        "promotional",
        [
            "marketing campaign",
            "brand promotion",
            "advertising success",
            "product launch",
        ],
    ),
    (
        "engagement",
        [
            "community building",
            "social interaction",
            "customer engagement",
            "relationship building",
        ],
    ),
]


class KeywordGenerationError(Exception):
    """Raised internally when the model gives no usable keywords."""


def build_keyword_prompt(post: Post, brand: Optional[BrandMetadata] = None) -> str:
    brand_lines = []
    if brand and brand.industry:
        brand_lines.append(f"Industry: {brand.industry}")
    if brand and brand.visual_style:
        brand_lines.append(f"Brand visual style: {brand.visual_style}")

    return f"""Analyze this social media post and suggest 4-6 diverse and specific keywords for finding unique stock photos. Make keywords very specific to avoid generic results.

Post content: "{post.text}"
Category: {post.category or 'general'}
Platform: {post.platform or 'social media'}
Post ID: {post.id}

{chr(10).join(brand_lines)}

IMPORTANT: Make keywords very specific and varied. For example:
- Instead of "business", use "corporate meeting", "office collaboration", "professional workspace"
- Instead of "people", use "diverse team", "young professionals", "business executives"
- Add specific actions: "working on laptop", "discussing project", "presenting charts"
- Add specific settings: "modern office", "cozy cafe", "industrial warehouse"

Return only a comma-separated list of 4-6 unique keywords, no other text."""


def parse_keywords(response: str) -> List[str]:
    """Split a comma-separated model response into clean, unique keywords."""
    keywords: List[str] = []
    for raw in response.split(","):
        keyword = raw.strip().lower()
        if not MIN_KEYWORD_LENGTH <= len(keyword) <= MAX_KEYWORD_LENGTH:
            continue
        if keyword not in keywords:
            keywords.append(keyword)
    return keywords[:MAX_KEYWORDS]


def fallback_keywords(post: Post, rng: random.Random) -> List[str]:
    keywords = rng.choice(FALLBACK_KEYWORD_SETS)
    if post.category:
        for marker, category_keywords in CATEGORY_FALLBACKS:
            if marker in post.category:
                keywords = category_keywords
    return list(keywords[:FALLBACK_KEYWORD_LIMIT])


class KeywordGenerator:
    def __init__(
        self,
        text_generator: TextGenerator,
        rng: Optional[random.Random] = None,
        max_tokens: int = global_config.stock_photos.keyword_max_tokens,
    ) -> None:
        self.text_generator = text_generator
        self.rng = rng or random.Random()
        self.max_tokens = max_tokens

    async def generate(
        self, post: Post, brand: Optional[BrandMetadata] = None
    ) -> List[str]:
        """
        Generate 1-6 lowercase search keywords for a post.

        Never raises: any model or parsing failure falls back to a canned set,
        overridden by the post category when it mentions education, promotional
        or engagement content.
        """
        try:
            response = await self.text_generator.generate(
                build_keyword_prompt(post, brand), self.max_tokens
            )
            keywords = parse_keywords(response or "")
            if not keywords:
                raise KeywordGenerationError("Model returned no usable keywords")

            if len(keywords) < MIN_KEYWORDS:
                candidates = [e for e in KEYWORD_ENHANCERS if e not in keywords]
                if candidates:
                    keywords.append(self.rng.choice(candidates))
            return keywords
        except Exception as e:
            log.warning(f"Keyword generation failed for post {post.id}: {e}")
            return fallback_keywords(post, self.rng)
