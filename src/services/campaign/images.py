"""Campaign image rendering: model call, payload decoding and storage."""

import base64
from typing import Any, List, Optional, Protocol, Sequence

from google import genai
from google.genai import types
from loguru import logger as log

from common import global_config
from src.services.storage.object_storage import ObjectStorage

DATA_URI_PREFIX = "data:image/png;base64,"


class ImageGenerator(Protocol):
    async def generate(self, prompt: str) -> Any: ...


class ImagePayloadError(ValueError):
    """Raised when the image model returns something that is not an image."""


class ImagenImageGenerator:
    """Renders one image per prompt with the Gemini Imagen model."""

    def __init__(
        self,
        model: str = global_config.campaign.image_model,
        client: Optional[genai.Client] = None,
    ) -> None:
        self.model = model
        self._client = client

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=global_config.llm_api_key(self.model))
        return self._client

    async def generate(self, prompt: str) -> bytes:
        resp = await self.client.aio.models.generate_images(
            model=self.model,
            prompt=prompt,
            config=types.GenerateImagesConfig(number_of_images=1),
        )
        try:
            if not resp.generated_images:
                raise ImagePayloadError("No images generated")

            generated_image = resp.generated_images[0]
            if not generated_image.image or not generated_image.image.image_bytes:
                raise ImagePayloadError("Invalid image data")

            return generated_image.image.image_bytes
        except (IndexError, AttributeError, TypeError) as e:
            raise ImagePayloadError(f"Failed to extract image from response: {e}") from e


def decode_image_payload(payload: Any) -> bytes:
    """Strings are base64 PNG (optionally a data URI); bytes pass through."""
    if isinstance(payload, str):
        return base64.b64decode(payload.removeprefix(DATA_URI_PREFIX))
    if isinstance(payload, (bytes, bytearray, memoryview)):
        return bytes(payload)
    raise ImagePayloadError("Unexpected image response format")


def image_key(campaign_id: str, number: int) -> str:
    return f"campaigns/{campaign_id}/image-{number}.png"


def placeholder_image_path(number: int) -> str:
    return f"/placeholder-image-{number}.png"


async def render_campaign_images(
    prompts: Sequence[str],
    campaign_id: str,
    generator: ImageGenerator,
    storage: ObjectStorage,
    max_images: int = global_config.campaign.max_images,
) -> List[str]:
    """
    Render and store an image for each of the first ``max_images`` prompts.

    A failure for one image is logged and replaced by a static placeholder
    path, so the result has one entry per attempted prompt.
    """
    images: List[str] = []
    for number, prompt in enumerate(prompts[:max_images], start=1):
        try:
            payload = await generator.generate(prompt)
            data = decode_image_payload(payload)
            url = await storage.put(
                image_key(campaign_id, number), data, content_type="image/png"
            )
            images.append(url)
        except Exception as e:
            log.warning(f"Failed to generate image {number} for {campaign_id}: {e}")
            images.append(placeholder_image_path(number))
    return images
