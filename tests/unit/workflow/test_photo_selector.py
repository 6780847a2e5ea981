import math
import random
import zlib

import pytest

from src.services.workflow.keywords import KeywordGenerator
from src.services.workflow.models import Post
from src.services.workflow.photo_selector import (
    ALTERNATIVE_KEYWORD_SETS,
    FALLBACK_SEARCH_KEYWORDS,
    PhotoSelector,
    alternative_set_index,
    placeholder_image,
)
from tests.fakes import (
    FakeImageSearch,
    FakeTextGenerator,
    FixedRandom,
    SleepRecorder,
    make_image,
)
from tests.test_template import TestTemplate

MODEL_KEYWORDS = "corporate meeting, diverse team, modern office, laptop work"


def make_selector(image_search, rng=None, sleep=None, keyword_reply=MODEL_KEYWORDS):
    rng = rng or FixedRandom()
    return PhotoSelector(
        keyword_generator=KeywordGenerator(FakeTextGenerator(keyword_reply), rng=rng),
        image_search=image_search,
        rng=rng,
        batch_size=5,
        batch_delay_seconds=1.0,
        sleep=sleep or SleepRecorder(),
    )


class ExplodingKeywordGenerator:
    async def generate(self, post, brand=None):
        raise RuntimeError("boom")


class TestAlternativeSetIndex(TestTemplate):
    def test_numeric_suffix_selects_group(self):
        assert alternative_set_index("post_3") == 3
        assert alternative_set_index("post_11") == 11 % len(ALTERNATIVE_KEYWORD_SETS)

    def test_second_segment_leading_digits_select_group(self):
        assert alternative_set_index("post_12_a") == 12 % len(ALTERNATIVE_KEYWORD_SETS)
        assert alternative_set_index("post_3x") == 3

    def test_digits_outside_second_segment_are_hashed(self):
        # "campaign7" has no second segment, so its trailing 7 is not used
        assert alternative_set_index("campaign7") == zlib.crc32(b"campaign7") % len(
            ALTERNATIVE_KEYWORD_SETS
        )

    def test_non_numeric_id_is_stable(self):
        first = alternative_set_index("launch-announcement")

        assert first == alternative_set_index("launch-announcement")
        assert 0 <= first < len(ALTERNATIVE_KEYWORD_SETS)


class TestSelectForPost(TestTemplate):
    @pytest.mark.asyncio
    async def test_enough_results_uses_original_search(self):
        images = [make_image(f"img{i}") for i in range(5)]
        search = FakeImageSearch([images])

        result = await make_selector(search).select_for_post(
            Post(id="post_1", text="Quarterly results")
        )

        assert len(search.queries) == 1
        assert result.post_id == "post_1"
        assert result.selected_image.id == "img0"
        assert result.keywords == MODEL_KEYWORDS.split(", ")
        assert result.reasoning.startswith("Selected random image 1 from 5 results")
        assert "original search" in result.reasoning

    @pytest.mark.asyncio
    async def test_random_pick_stays_within_top_three(self):
        images = [make_image(f"img{i}") for i in range(5)]
        for seed in range(20):
            search = FakeImageSearch([images])
            result = await make_selector(
                search, rng=random.Random(seed)
            ).select_for_post(Post(id="post_1", text="Quarterly results"))

            assert result.selected_image.id in {"img0", "img1", "img2"}

    @pytest.mark.asyncio
    async def test_few_results_triggers_enhanced_search(self):
        search = FakeImageSearch(
            [[make_image("only")], [make_image(f"e{i}") for i in range(4)]]
        )

        result = await make_selector(search).select_for_post(
            Post(id="post_1", text="Quarterly results")
        )

        assert len(search.queries) == 2
        assert search.queries[1] == [*MODEL_KEYWORDS.split(", "), "modern"]
        assert result.selected_image.id == "e0"
        assert result.keywords == search.queries[1]
        assert "enhanced search" in result.reasoning

    @pytest.mark.asyncio
    async def test_alternative_search_uses_themed_group(self):
        search = FakeImageSearch([[], [], [make_image("alt")]])

        result = await make_selector(search).select_for_post(
            Post(id="post_2", text="Quarterly results")
        )

        assert len(search.queries) == 3
        assert search.queries[2] == [*ALTERNATIVE_KEYWORD_SETS[2][:3], "environment"]
        assert result.selected_image.id == "alt"
        assert result.keywords == search.queries[2]
        assert "alternative search" in result.reasoning

    @pytest.mark.asyncio
    async def test_partial_results_survive_empty_later_attempts(self):
        search = FakeImageSearch([[make_image("first")], [], []])

        result = await make_selector(search).select_for_post(
            Post(id="post_1", text="Quarterly results")
        )

        assert result.selected_image.id == "first"
        assert "original search" in result.reasoning

    @pytest.mark.asyncio
    async def test_all_attempts_empty_uses_fallback_search(self):
        search = FakeImageSearch([[], [], [], [make_image("biz")]])

        result = await make_selector(search).select_for_post(
            Post(id="post_1", text="Quarterly results")
        )

        assert search.queries[3] == FALLBACK_SEARCH_KEYWORDS
        assert result.selected_image.id == "biz"
        assert result.keywords == ["business", "professional"]

    @pytest.mark.asyncio
    async def test_all_searches_empty_uses_placeholder(self):
        result = await make_selector(FakeImageSearch()).select_for_post(
            Post(id="post_1", text="Quarterly results")
        )

        assert result.selected_image == placeholder_image()
        assert result.keywords == ["business", "professional"]
        assert result.reasoning == (
            "No images found for specific keywords, using fallback business images"
        )

    @pytest.mark.asyncio
    async def test_unexpected_error_uses_placeholder(self):
        selector = PhotoSelector(
            keyword_generator=ExplodingKeywordGenerator(),  # type: ignore[arg-type]
            image_search=FakeImageSearch(),
            rng=FixedRandom(),
            sleep=SleepRecorder(),
        )

        result = await selector.select_for_post(Post(id="post_9", text="Hello"))

        assert result.post_id == "post_9"
        assert result.selected_image.id == "fallback"
        assert result.keywords == ["business"]
        assert result.reasoning == "Error occurred, using fallback image"


class TestSelectForPosts(TestTemplate):
    @pytest.mark.asyncio
    @pytest.mark.parametrize("post_count", [1, 5, 6, 12])
    async def test_batches_and_delays(self, post_count):
        sleep = SleepRecorder()
        images = [make_image(f"img{i}") for i in range(3)]
        search = FakeImageSearch([images] * post_count)
        posts = [Post(id=f"post_{i}", text=f"Post {i}") for i in range(post_count)]

        results = await make_selector(search, sleep=sleep).select_for_posts(posts)

        assert len(results) == post_count
        assert [r.post_id for r in results] == [p.id for p in posts]
        assert sleep.delays == [1.0] * (math.ceil(post_count / 5) - 1)

    @pytest.mark.asyncio
    async def test_every_post_gets_a_result_when_nothing_is_found(self):
        posts = [Post(id=f"post_{i}", text=f"Post {i}") for i in range(7)]

        results = await make_selector(FakeImageSearch()).select_for_posts(posts)

        assert len(results) == 7
        for result in results:
            assert result.selected_image.id == "fallback"
            assert result.keywords == ["business", "professional"]
