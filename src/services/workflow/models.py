from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import ConfigDict

from src.utils.models import CamelModel


class Post(CamelModel):
    id: str
    text: str
    category: Optional[str] = None
    platform: Optional[str] = None


class BrandMetadata(CamelModel):
    model_config = ConfigDict(extra="ignore")

    industry: Optional[str] = None
    visual_style: Optional[str] = None


class ImageDescriptor(CamelModel):
    id: str
    url: str
    thumb: str
    description: str
    photographer: str
    download_url: str


class PhotoSelectionResult(CamelModel):
    post_id: str
    selected_image: ImageDescriptor
    keywords: List[str]
    reasoning: str


class EngagementLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class BulkContentRequest(CamelModel):
    brand_voice: Optional[str] = None
    categories: Optional[List[str]] = None
    platforms: Optional[List[str]] = None
    # Any, so "5" or 5.5 reach the count check instead of being coerced
    count: Any = None
    goals: List[str] = []
    brand_data: Optional[Dict[str, Any]] = None


class ContentPost(CamelModel):
    id: str
    text: str
    platform: str
    category: str
    goal: str
    hashtags: List[str]
    character_count: int
    estimated_engagement: EngagementLevel
    brand_voice_alignment: int


class BulkContentMetadata(CamelModel):
    total_generated: int
    categories_used: List[str]
    platforms_used: List[str]
    generation_time: int
    created_at: str


class BulkContentResult(CamelModel):
    id: str
    posts: List[ContentPost]
    metadata: BulkContentMetadata
