import json

import pytest

from src.services.campaign.models import CampaignInput
from src.services.campaign.pipeline import (
    CampaignPipeline,
    image_prompts_prompt,
    metadata_key,
    split_image_prompts,
)
from tests.fakes import (
    FailingTextGenerator,
    FakeImageGenerator,
    FakeTextGenerator,
    InMemoryMetadataStore,
    InMemoryObjectStorage,
)
from tests.test_template import TestTemplate

IMAGE_PROMPTS = """Image prompts:
1. A sunlit kitchen with a steaming cup of Aurora coffee on oak
2. Close-up of hands holding an Aurora mug at golden hour
3. Flat lay of Aurora beans, grinder and notebook on linen
4. Barista pouring latte art into an Aurora branded cup
5. Morning commuter sipping Aurora on a rainy city street
6. Aurora coffee bag beside fresh croissants on a cafe table"""


def campaign_input(**campaign_overrides) -> CampaignInput:
    campaign = {
        "goal": "awareness",
        "platforms": ["facebook", "instagram"],
        "cta": "Shop now",
    }
    campaign.update(campaign_overrides)
    return CampaignInput.model_validate(
        {
            "brand": {
                "name": "Aurora",
                "description": "Small-batch coffee roaster",
                "tone": "warm",
                "visualStyle": "bright natural light",
            },
            "product": {
                "name": "Morning Blend",
                "description": "Medium roast with notes of caramel",
                "targetAudience": "young professionals",
            },
            "campaign": campaign,
            "sources": ["https://aurora.example.com"],
        }
    )


def scripted_reply(prompt: str) -> str:
    if prompt.startswith("Generate a comprehensive brand voice"):
        return "Warm, upbeat and inviting. " * 40
    if prompt.startswith("Create compelling ad copy for"):
        platform = prompt.split("Create compelling ad copy for ", 1)[1].split(" ")[0]
        return f"Wake up with Aurora on {platform}!"
    return IMAGE_PROMPTS


def make_pipeline(text_generator=None, image_generator=None):
    storage = InMemoryObjectStorage()
    metadata_store = InMemoryMetadataStore()
    pipeline = CampaignPipeline(
        text_generator=text_generator or FakeTextGenerator(scripted_reply),
        image_generator=image_generator or FakeImageGenerator(),
        storage=storage,
        metadata_store=metadata_store,
        id_factory=lambda: "camp-123",
    )
    return pipeline, storage, metadata_store


class TestSplitImagePrompts(TestTemplate):
    def test_drops_short_lines_and_caps_at_five(self):
        prompts = split_image_prompts(IMAGE_PROMPTS)

        assert len(prompts) == 5
        assert prompts[0].startswith("Image prompts")
        assert all(len(p) >= 11 for p in prompts)

    def test_lines_are_trimmed(self):
        assert split_image_prompts("   a long enough prompt   \n\n short\n") == [
            "a long enough prompt"
        ]


class TestCampaignPipeline(TestTemplate):
    @pytest.mark.asyncio
    async def test_full_run(self):
        pipeline, storage, metadata_store = make_pipeline()

        output = await pipeline.run(campaign_input())

        assert output.id == "camp-123"
        assert output.brand_voice.startswith("Warm, upbeat")
        assert set(output.ad_content) == {"facebook", "instagram"}
        assert output.ad_content["instagram"] == "Wake up with Aurora on instagram!"
        assert len(output.image_prompts) == 5
        assert output.images == [
            f"https://cdn.example.com/campaigns/camp-123/image-{n}.png"
            for n in (1, 2, 3)
        ]
        assert len(storage.objects) == 3

        stored = json.loads(metadata_store.values[metadata_key("camp-123")])
        assert stored["status"] == "completed"
        assert stored["references"] == ["https://aurora.example.com"]
        assert "createdAt" in stored

    @pytest.mark.asyncio
    async def test_stage_token_budgets(self):
        generator = FakeTextGenerator(scripted_reply)
        pipeline, _, _ = make_pipeline(text_generator=generator)

        await pipeline.run(campaign_input())

        assert [budget for _, budget in generator.calls] == [1000, 500, 500, 1000]

    def test_image_prompt_uses_truncated_brand_voice(self):
        brand_voice = "v" * 500

        prompt = image_prompts_prompt(campaign_input(), brand_voice)

        assert f"Brand Voice Context: {'v' * 300}..." in prompt
        assert "v" * 301 not in prompt

    @pytest.mark.asyncio
    async def test_empty_model_output_uses_fallbacks(self):
        pipeline, _, _ = make_pipeline(text_generator=FakeTextGenerator(""))

        output = await pipeline.run(campaign_input())

        assert output.brand_voice == "Brand voice generation failed"
        assert output.ad_content == {
            "facebook": "Ad content for facebook",
            "instagram": "Ad content for instagram",
        }
        assert output.image_prompts == []
        assert output.images is None

    @pytest.mark.asyncio
    async def test_image_failures_still_complete(self):
        image_generator = FakeImageGenerator(
            [RuntimeError("a"), RuntimeError("b"), RuntimeError("c")]
        )
        pipeline, _, metadata_store = make_pipeline(image_generator=image_generator)

        output = await pipeline.run(campaign_input())

        assert output.images == [
            "/placeholder-image-1.png",
            "/placeholder-image-2.png",
            "/placeholder-image-3.png",
        ]
        stored = json.loads(metadata_store.values["campaign:camp-123"])
        assert stored["status"] == "completed"

    @pytest.mark.asyncio
    async def test_text_failure_propagates(self):
        pipeline, _, metadata_store = make_pipeline(
            text_generator=FailingTextGenerator()
        )

        with pytest.raises(RuntimeError):
            await pipeline.run(campaign_input())

        assert metadata_store.values == {}
