"""
Service providers for the route modules.

Tests swap any of these through ``app.dependency_overrides``.
"""

import random
from functools import lru_cache

import httpx
from fastapi import Depends
from sqlalchemy.orm import Session

from common import global_config
from src.db.database import get_db_session
from src.db.utils.kv_store import (
    CAMPAIGN_STATE_NAMESPACE,
    METADATA_NAMESPACE,
    KeyValueStore,
)
from src.services.campaign.images import ImagenImageGenerator
from src.services.campaign.pipeline import CampaignPipeline
from src.services.speech.google_auth import GoogleAccessTokenProvider
from src.services.speech.synthesizer import SpeechSynthesizer
from src.services.storage.object_storage import S3ObjectStorage
from src.services.webhook.bridge import WorkflowWebhookBridge
from src.services.workflow.content_bulk import BulkContentGenerator
from src.services.workflow.image_search import UnsplashImageSearch
from src.services.workflow.keywords import KeywordGenerator
from src.services.workflow.photo_selector import PhotoSelector
from utils.llm.text_generation import DSPYTextGenerator, TextGenerator


def _client_with_timeout(seconds: float) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(
            seconds, connect=global_config.llm_config.timeout.connect_timeout_seconds
        )
    )


@lru_cache
def get_stock_photos_client() -> httpx.AsyncClient:
    return _client_with_timeout(global_config.stock_photos.request_timeout_seconds)


@lru_cache
def get_speech_client() -> httpx.AsyncClient:
    return _client_with_timeout(global_config.speech.request_timeout_seconds)


@lru_cache
def get_webhook_client() -> httpx.AsyncClient:
    return _client_with_timeout(global_config.webhook.request_timeout_seconds)


HTTP_CLIENT_PROVIDERS = (get_stock_photos_client, get_speech_client, get_webhook_client)


async def close_http_clients() -> None:
    """Close the shared clients that were created and forget them."""
    for provider in HTTP_CLIENT_PROVIDERS:
        if provider.cache_info().currsize:
            await provider().aclose()
            provider.cache_clear()


@lru_cache
def get_text_generator() -> TextGenerator:
    return DSPYTextGenerator()


def get_photo_selector(
    text_generator: TextGenerator = Depends(get_text_generator),
    client: httpx.AsyncClient = Depends(get_stock_photos_client),
) -> PhotoSelector:
    rng = random.Random()
    return PhotoSelector(
        keyword_generator=KeywordGenerator(text_generator, rng=rng),
        image_search=UnsplashImageSearch(client=client),
        rng=rng,
    )


def get_campaign_pipeline(
    text_generator: TextGenerator = Depends(get_text_generator),
    db: Session = Depends(get_db_session),
) -> CampaignPipeline:
    return CampaignPipeline(
        text_generator=text_generator,
        image_generator=ImagenImageGenerator(),
        storage=S3ObjectStorage(),
        metadata_store=KeyValueStore(METADATA_NAMESPACE, db),
    )


def get_bulk_content_generator(
    text_generator: TextGenerator = Depends(get_text_generator),
    db: Session = Depends(get_db_session),
) -> BulkContentGenerator:
    return BulkContentGenerator(
        text_generator=text_generator,
        metadata_store=KeyValueStore(METADATA_NAMESPACE, db),
    )


def get_speech_synthesizer(
    client: httpx.AsyncClient = Depends(get_speech_client),
) -> SpeechSynthesizer:
    return SpeechSynthesizer(
        token_provider=GoogleAccessTokenProvider(client=client),
        client=client,
    )


def get_webhook_bridge(
    client: httpx.AsyncClient = Depends(get_webhook_client),
) -> WorkflowWebhookBridge:
    return WorkflowWebhookBridge(client=client)


def get_campaign_state_store(db: Session = Depends(get_db_session)) -> KeyValueStore:
    return KeyValueStore(CAMPAIGN_STATE_NAMESPACE, db)
