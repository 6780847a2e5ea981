"""
Bulk Content Generator

Writes a requested number of social posts (5, 25, 50 or 100) for a brand
voice. Posts are produced in batches; inside a batch every platform/category
pair gets at most five posts from one model call. Model replies are parsed
leniently and any shortfall is filled with templated fallback posts, so the
caller always receives exactly ``count`` posts.
"""

import json
import random
import re
import time
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Protocol, Sequence

from loguru import logger as log

from common import global_config
from src.services.workflow.models import (
    BulkContentMetadata,
    BulkContentRequest,
    BulkContentResult,
    ContentPost,
    EngagementLevel,
)
from utils.llm.text_generation import TextGenerator

MAX_POST_LENGTH = 280
DEFAULT_GOAL = "engagement"
FALLBACK_ALIGNMENT = 75

_HASHTAG = re.compile(r"#[a-zA-Z][a-zA-Z0-9]*")
_HASHTAG_START = re.compile(r"#[a-zA-Z]")
_NUMBERED_POST = re.compile(r"Post \d+:\s*(.*?)(?=Post \d+:|\Z)", re.DOTALL)
_NUMBERED_LINE = re.compile(r"^\d+\.")
_SURROUNDING_QUOTE = re.compile(r"^[\"']|[\"']\Z")
_WHITESPACE = re.compile(r"\s+")

CATEGORY_HASHTAGS: Dict[str, List[str]] = {
    "educational": ["Learn", "Education", "Knowledge", "Tips"],
    "promotional": ["New", "Launch", "Deal", "Offer"],
    "engagement": ["Community", "Together", "Share", "Connect"],
    "industry": ["Business", "Professional", "Industry", "Expert"],
}
DEFAULT_CATEGORY_HASHTAGS = ["Content", "Social"]

ENGAGING_EMOJIS = ("🚀", "💡", "✨")

FALLBACK_TEMPLATES: Dict[str, Dict[str, str]] = {
    "educational": {
        "instagram": "🚀 Did you know? [Educational fact about the industry] What's your biggest takeaway? #Learning #Growth #Knowledge",
        "facebook": "Sharing some valuable insights about [topic]. What's one thing you've learned recently? Let's discuss in the comments! 📚",
        "linkedin": "Key insight: [Industry fact]. This changes how we approach [business aspect]. What's your experience? #Business #Insights",
        "twitter": "💡 Industry tip: [Quick advice]. RT if this helps! What's your go-to strategy? #Tips #Success",
    },
    "promotional": {
        "instagram": "🌟 Exciting news! [Product/service highlight] Ready to transform your [benefit]? Link in bio 🔗 #Innovation #Results",
        "facebook": "We're thrilled to announce [update/feature]! This is designed to help you [benefit]. What's your favorite feature?",
        "linkedin": "Proud to share our latest [product/service] designed specifically for [target audience]. Ready to [benefit]? #Business #Innovation",
        "twitter": "Big news! [Product/service announcement] Perfect for [audience]. Check it out! 🔗 #New #Exciting",
    },
}
DEFAULT_FALLBACK_TEXT = (
    "Here's something special we prepared for you. What do you think? "
    "#Content #Engagement"
)


class BulkContentValidationError(ValueError):
    """Raised when a bulk request cannot be served; the message is user-facing."""


class MetadataStore(Protocol):
    def put(self, key: str, value: str) -> None: ...


def bulk_content_key(result_id: str) -> str:
    return f"bulk-content:{result_id}"


def validate_bulk_request(request: BulkContentRequest) -> None:
    config = global_config.bulk_content
    if (
        not request.brand_voice
        or len(request.brand_voice) < config.min_brand_voice_length
    ):
        raise BulkContentValidationError("Valid brand voice is required")
    if not request.categories:
        raise BulkContentValidationError("At least one content category is required")
    if not request.platforms:
        raise BulkContentValidationError("At least one platform is required")
    if isinstance(request.count, bool) or request.count not in config.allowed_counts:
        allowed = ", ".join(str(count) for count in config.allowed_counts[:-1])
        raise BulkContentValidationError(
            f"Count must be {allowed}, or {config.allowed_counts[-1]}"
        )


def generate_hashtags(category: str, platform: str) -> List[str]:
    """Category tags, platform tags, then the category and platform themselves."""
    category_tags = CATEGORY_HASHTAGS.get(category, DEFAULT_CATEGORY_HASHTAGS)
    platform_tags = (
        ["Business", "Professional"] if platform == "linkedin" else ["Social", "Life"]
    )
    tags = [*category_tags[:2], *platform_tags[:2], category, platform]
    return list(dict.fromkeys(tag.lower() for tag in tags))


def estimate_engagement(text: str, hashtag_count: int) -> EngagementLevel:
    score = 0

    if 50 < len(text) < 150:
        score += 20
    elif 150 < len(text) < MAX_POST_LENGTH:
        score += 15

    if 3 <= hashtag_count <= 5:
        score += 20
    elif hashtag_count > 0:
        score += 10

    if "?" in text or "quiz" in text or "poll" in text:
        score += 15
    if any(emoji in text for emoji in ENGAGING_EMOJIS):
        score += 10
    if "you" in text:
        score += 10

    if score >= 50:
        return EngagementLevel.HIGH
    if score >= 25:
        return EngagementLevel.MEDIUM
    return EngagementLevel.LOW


def platform_content_prompt(
    brand_voice: str, platform: str, category: str, goals: Sequence[str], count: int
) -> str:
    context_chars = global_config.bulk_content.brand_voice_context_chars
    return f"""Create {count} social media posts for {platform}.

BRAND VOICE: {brand_voice[:context_chars]}

CATEGORY: {category}
GOALS: {", ".join(goals) or DEFAULT_GOAL}

Create {count} posts that match the brand voice. Each post should be engaging and include 3-5 relevant hashtags.

Format:
Post 1: [post text with hashtags]
Post 2: [post text with hashtags]
Post 3: [post text with hashtags]
(etc.)"""


def fallback_post_for_platform(platform: str, category: str, goal: str) -> ContentPost:
    text = FALLBACK_TEMPLATES.get(category, {}).get(platform, DEFAULT_FALLBACK_TEXT)
    return ContentPost(
        id="",
        text=text,
        platform=platform,
        category=category,
        goal=goal,
        hashtags=generate_hashtags(category, platform),
        character_count=len(text),
        estimated_engagement=EngagementLevel.MEDIUM,
        brand_voice_alignment=FALLBACK_ALIGNMENT,
    )


def fallback_post(request: BulkContentRequest, index: int) -> ContentPost:
    """Fallback for slot ``index`` of a failed batch; platform and category rotate."""
    platforms = request.platforms or []
    categories = request.categories or []
    post = fallback_post_for_platform(
        platforms[index % len(platforms)],
        categories[index % len(categories)],
        request.goals[0] if request.goals else DEFAULT_GOAL,
    )
    return post.model_copy(update={"id": f"fallback_post_{index + 1}"})


class BulkContentGenerator:
    def __init__(
        self,
        text_generator: TextGenerator,
        metadata_store: MetadataStore,
        rng: Optional[random.Random] = None,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.text_generator = text_generator
        self.metadata_store = metadata_store
        self.rng = rng or random.Random()
        self.id_factory = id_factory
        self.clock = clock
        self.batch_size = global_config.bulk_content.batch_size
        self.max_posts_per_combination = (
            global_config.bulk_content.max_posts_per_combination
        )

    def create_post_from_text(
        self, text: str, platform: str, category: str, goal: str
    ) -> ContentPost:
        clean_text = _SURROUNDING_QUOTE.sub("", text)
        clean_text = _WHITESPACE.sub(" ", clean_text).strip()

        hashtags = [tag[1:] for tag in _HASHTAG.findall(clean_text)]
        if len(hashtags) < 3:
            hashtags += generate_hashtags(category, platform)[: 5 - len(hashtags)]

        clean_text = _HASHTAG.sub("", clean_text).strip()
        if len(clean_text) > MAX_POST_LENGTH:
            clean_text = clean_text[: MAX_POST_LENGTH - 3] + "..."

        return ContentPost(
            id="",
            text=clean_text,
            platform=platform,
            category=category,
            goal=goal,
            hashtags=list(dict.fromkeys(hashtags)),
            character_count=len(clean_text),
            estimated_engagement=estimate_engagement(clean_text, len(hashtags)),
            brand_voice_alignment=self.rng.randint(80, 99),
        )

    def parse_generated_posts(
        self, content: str, platform: str, category: str, goal: str
    ) -> List[ContentPost]:
        """
        Pull posts out of a free-form model reply.

        Tries ``Post N:`` sections first, then separator-delimited line
        blocks, then splitting on hashtags. The first strategy that yields
        anything wins.
        """
        texts = [
            match.group(1).strip() for match in _NUMBERED_POST.finditer(content)
        ]
        texts = [text for text in texts if len(text) > 10]

        if not texts:
            lines = [line for line in content.split("\n") if line.strip()]
            current = ""
            for index, line in enumerate(lines):
                lowered = line.lower()
                if "post" in lowered and ":" in line:
                    continue
                if "hashtags" in lowered or "alignment" in lowered:
                    continue
                if _NUMBERED_LINE.match(line):
                    continue

                current += line + " "
                at_boundary = (
                    "---" in line or "===" in line or index == len(lines) - 1
                )
                if len(current.strip()) > 20 and at_boundary:
                    texts.append(current.strip())
                    current = ""

        if not texts:
            texts = [
                part.strip()
                for part in _HASHTAG_START.split(content)
                if len(part.strip()) > 20
            ]

        log.debug(f"Parsed {len(texts)} posts for {platform}/{category}")
        return [
            self.create_post_from_text(text, platform, category, goal)
            for text in texts
        ]

    async def generate_platform_content(
        self,
        brand_voice: str,
        platform: str,
        category: str,
        goals: Sequence[str],
        count: int,
    ) -> List[ContentPost]:
        goal = goals[0] if goals else DEFAULT_GOAL
        try:
            content = await self.text_generator.generate(
                platform_content_prompt(brand_voice, platform, category, goals, count),
                global_config.bulk_content.max_tokens,
            )
        except Exception as e:
            log.warning(f"Content generation failed for {platform}/{category}: {e}")
            return [
                fallback_post_for_platform(platform, category, goal)
                for _ in range(count)
            ]

        posts = self.parse_generated_posts(content, platform, category, goal)
        while len(posts) < count:
            posts.append(fallback_post_for_platform(platform, category, goal))
        return posts[:count]

    async def generate_batch(
        self, request: BulkContentRequest, batch_count: int, offset: int
    ) -> List[ContentPost]:
        posts: List[ContentPost] = []
        for platform in request.platforms or []:
            for category in request.categories or []:
                if len(posts) >= batch_count:
                    break
                platform_posts = await self.generate_platform_content(
                    request.brand_voice or "",
                    platform,
                    category,
                    request.goals,
                    min(self.max_posts_per_combination, batch_count - len(posts)),
                )
                start = offset + len(posts)
                posts.extend(
                    post.model_copy(update={"id": f"post_{start + i + 1}"})
                    for i, post in enumerate(platform_posts)
                )
            if len(posts) >= batch_count:
                break
        return posts[:batch_count]

    async def generate_posts(self, request: BulkContentRequest) -> List[ContentPost]:
        count = int(request.count)
        posts: List[ContentPost] = []
        for batch_start in range(0, count, self.batch_size):
            batch_count = min(self.batch_size, count - batch_start)
            try:
                posts.extend(await self.generate_batch(request, batch_count, batch_start))
            except Exception as e:
                batch_number = batch_start // self.batch_size + 1
                log.warning(f"Failed to generate batch {batch_number}: {e}")
                posts.extend(
                    fallback_post(request, batch_start + i) for i in range(batch_count)
                )
        return posts

    async def generate(self, request: BulkContentRequest) -> BulkContentResult:
        """
        Validate the request, generate every post and persist the result.

        Raises:
            BulkContentValidationError: if the request is incomplete
        """
        validate_bulk_request(request)
        started = self.clock()
        log.info(
            f"Generating {request.count} posts for {len(request.platforms or [])} "
            f"platforms and {len(request.categories or [])} categories"
        )

        posts = await self.generate_posts(request)
        result = BulkContentResult(
            id=self.id_factory(),
            posts=posts,
            metadata=BulkContentMetadata(
                total_generated=len(posts),
                categories_used=list(request.categories or []),
                platforms_used=list(request.platforms or []),
                generation_time=int((self.clock() - started) * 1000),
                created_at=datetime.now(timezone.utc).isoformat(),
            ),
        )
        self.metadata_store.put(
            bulk_content_key(result.id),
            json.dumps(result.model_dump(mode="json", by_alias=True)),
        )
        return result
