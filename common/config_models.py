"""
Pydantic models for global configuration structure.
This module defines all the nested configuration models used by the Config class.
Each model corresponds to a section in the global_config.yaml file and provides
type validation and structure for the configuration data.
"""

from pydantic import BaseModel


class DefaultLlm(BaseModel):
    """Default LLM configuration."""

    default_model: str
    fast_model: str
    default_temperature: float
    default_max_tokens: int


class RetryConfig(BaseModel):
    """Retry configuration for LLM requests."""

    max_attempts: int


class TimeoutConfig(BaseModel):
    """Timeout configuration for outbound API requests."""

    api_timeout_seconds: int
    connect_timeout_seconds: int


class LlmConfig(BaseModel):
    """LLM configuration including caching and retry settings."""

    cache_enabled: bool
    retry: RetryConfig
    timeout: TimeoutConfig


class LoggingLocationConfig(BaseModel):
    """Location information display configuration for logging."""

    enabled: bool
    show_file: bool
    show_function: bool
    show_line: bool
    show_for_info: bool
    show_for_debug: bool
    show_for_warning: bool
    show_for_error: bool


class LoggingFormatConfig(BaseModel):
    """Logging format configuration."""

    show_time: bool
    show_session_id: bool
    location: LoggingLocationConfig


class LoggingLevelsConfig(BaseModel):
    """Logging level configuration."""

    debug: bool
    info: bool
    warning: bool
    error: bool
    critical: bool


class LoggingConfig(BaseModel):
    """Complete logging configuration."""

    verbose: bool
    format: LoggingFormatConfig
    levels: LoggingLevelsConfig


class ServerConfig(BaseModel):
    """Server configuration."""

    allowed_origins: list[str]


class StockPhotosConfig(BaseModel):
    """Stock photo selection configuration."""

    api_base_url: str
    per_page: int
    orientation: str
    batch_size: int
    batch_delay_seconds: float
    keyword_max_tokens: int
    request_timeout_seconds: int


class CampaignConfig(BaseModel):
    """Campaign content pipeline configuration."""

    image_model: str
    max_image_prompts: int
    max_images: int
    brand_voice_max_tokens: int
    ad_copy_max_tokens: int
    image_prompts_max_tokens: int


class BulkContentConfig(BaseModel):
    """Bulk social post generation configuration."""

    allowed_counts: list[int]
    batch_size: int
    max_posts_per_combination: int
    max_tokens: int
    brand_voice_context_chars: int
    min_brand_voice_length: int


class SpeechConfig(BaseModel):
    """Text-to-speech configuration."""

    token_url: str
    synthesize_url: str
    scope: str
    token_lifetime_seconds: int
    request_timeout_seconds: int


class WebhookConfig(BaseModel):
    """Workflow automation webhook configuration."""

    base_url: str
    create_path: str
    publish_delay_seconds: float
    request_timeout_seconds: int


class ObjectStorageConfig(BaseModel):
    """Object storage configuration."""

    bucket: str
    endpoint_url: str | None = None
    region: str
    public_base_url: str


class DatabaseConfig(BaseModel):
    """Database configuration."""

    echo: bool
