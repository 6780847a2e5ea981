"""
Campaign Content Pipeline

Sequential generation of brand voice, per-platform ad copy, image prompts and
images for one campaign, followed by a metadata record in the key-value store.
"""

import json
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Protocol

from loguru import logger as log

from common import global_config
from src.services.campaign.images import ImageGenerator, render_campaign_images
from src.services.campaign.models import (
    CampaignInput,
    CampaignMetadata,
    CampaignOutput,
    CampaignStatus,
)
from src.services.storage.object_storage import ObjectStorage
from utils.llm.text_generation import TextGenerator

MIN_IMAGE_PROMPT_LENGTH = 11
BRAND_VOICE_CONTEXT_CHARS = 300


class MetadataStore(Protocol):
    def put(self, key: str, value: str) -> None: ...


def metadata_key(campaign_id: str) -> str:
    return f"campaign:{campaign_id}"


def brand_voice_prompt(data: CampaignInput) -> str:
    return f"""Generate a comprehensive brand voice profile for {data.brand.name}.

Brand Description: {data.brand.description}
Tone: {data.brand.tone}
Visual Style: {data.brand.visual_style}
Product: {data.product.name} - {data.product.description}
Target Audience: {data.product.target_audience}

Create a detailed brand voice that includes:
- Core personality traits
- Communication style guidelines
- Key messaging principles
- Tone and language preferences
- Brand values and positioning

Make it specific and actionable for content creation."""


def ad_copy_prompt(data: CampaignInput, brand_voice: str, platform: str) -> str:
    return f"""Create compelling ad copy for {platform} based on the following:

Brand Voice: {brand_voice}

Product: {data.product.name}
Product Description: {data.product.description}
Target Audience: {data.product.target_audience}
Campaign Goal: {data.campaign.goal.value}
Call to Action: {data.campaign.cta}

Platform: {platform}
Visual Style: {data.brand.visual_style}

Create engaging, platform-optimized content that:
- Matches the brand voice and tone
- Appeals to the target audience
- Achieves the campaign goal
- Includes the call to action naturally
- Is appropriate length for the platform
- Incorporates the visual style description

Make it ready to post with emojis and formatting as appropriate for {platform}."""


def image_prompts_prompt(data: CampaignInput, brand_voice: str) -> str:
    return f"""Generate detailed, professional image generation prompts for an advertising campaign.

Brand: {data.brand.name}
Visual Style: {data.brand.visual_style}
Product: {data.product.name} - {data.product.description}
Target Audience: {data.product.target_audience}
Campaign Goal: {data.campaign.goal.value}
Call to Action: {data.campaign.cta}

Brand Voice Context: {brand_voice[:BRAND_VOICE_CONTEXT_CHARS]}...

Create 3-5 highly detailed image prompts that:
- Are optimized for AI image generation (like DALL-E, Midjourney, or Flux)
- Incorporate brand elements and visual style
- Show the product in context
- Appeal to the target audience
- Support the campaign goal
- Are ultra-realistic and Instagram-worthy
- Include specific details about lighting, composition, colors, and mood
- Integrate brand text/names naturally into the image

Each prompt should be comprehensive and ready to use for image generation."""


def split_image_prompts(
    content: str, limit: int = global_config.campaign.max_image_prompts
) -> List[str]:
    """One prompt per line; short lines (headings, blanks) are dropped."""
    lines = [line.strip() for line in content.split("\n")]
    return [line for line in lines if len(line) >= MIN_IMAGE_PROMPT_LENGTH][:limit]


class CampaignPipeline:
    def __init__(
        self,
        text_generator: TextGenerator,
        image_generator: ImageGenerator,
        storage: ObjectStorage,
        metadata_store: MetadataStore,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ) -> None:
        self.text_generator = text_generator
        self.image_generator = image_generator
        self.storage = storage
        self.metadata_store = metadata_store
        self.id_factory = id_factory

    async def generate_brand_voice(self, data: CampaignInput) -> str:
        response = await self.text_generator.generate(
            brand_voice_prompt(data), global_config.campaign.brand_voice_max_tokens
        )
        return response or "Brand voice generation failed"

    async def generate_ad_content(
        self, data: CampaignInput, brand_voice: str
    ) -> Dict[str, str]:
        ad_content: Dict[str, str] = {}
        for platform in data.campaign.platforms:
            response = await self.text_generator.generate(
                ad_copy_prompt(data, brand_voice, platform),
                global_config.campaign.ad_copy_max_tokens,
            )
            ad_content[platform] = response or f"Ad content for {platform}"
        return ad_content

    async def generate_image_prompts(
        self, data: CampaignInput, brand_voice: str
    ) -> List[str]:
        response = await self.text_generator.generate(
            image_prompts_prompt(data, brand_voice),
            global_config.campaign.image_prompts_max_tokens,
        )
        return split_image_prompts(response or "")

    async def run(self, data: CampaignInput) -> CampaignOutput:
        """
        Run every stage in order and persist the campaign metadata.

        Text stage failures propagate to the caller. Image failures are
        replaced by placeholders, and the stored status is always
        ``completed``.
        """
        campaign_id = self.id_factory()
        log.info(f"Generating campaign {campaign_id} for brand {data.brand.name}")

        brand_voice = await self.generate_brand_voice(data)
        ad_content = await self.generate_ad_content(data, brand_voice)
        image_prompts = await self.generate_image_prompts(data, brand_voice)

        images: List[str] = []
        try:
            images = await render_campaign_images(
                image_prompts, campaign_id, self.image_generator, self.storage
            )
        except Exception as e:
            log.warning(f"Image generation failed for {campaign_id}: {e}")

        # TODO: surface a partial status once the UI can show per-image failures
        metadata = CampaignMetadata(
            created_at=datetime.now(timezone.utc).isoformat(),
            status=CampaignStatus.COMPLETED,
            references=list(data.sources),
        )
        self.metadata_store.put(
            metadata_key(campaign_id),
            json.dumps(metadata.model_dump(mode="json", by_alias=True)),
        )

        return CampaignOutput(
            id=campaign_id,
            brand_voice=brand_voice,
            ad_content=ad_content,
            image_prompts=image_prompts,
            images=images or None,
            metadata=metadata,
        )
