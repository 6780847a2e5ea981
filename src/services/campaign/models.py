from enum import Enum
from typing import Dict, List, Optional

from src.utils.models import CamelModel


class CampaignGoal(str, Enum):
    AWARENESS = "awareness"
    CONVERSION = "conversion"
    ENGAGEMENT = "engagement"


class CampaignStatus(str, Enum):
    COMPLETED = "completed"
    PROCESSING = "processing"
    FAILED = "failed"


class BrandDescriptor(CamelModel):
    name: str
    description: str
    tone: str
    visual_style: str


class ProductDescriptor(CamelModel):
    name: str
    description: str
    target_audience: str


class CampaignDescriptor(CamelModel):
    goal: CampaignGoal
    platforms: List[str]
    cta: str


class CampaignInput(CamelModel):
    brand: BrandDescriptor
    product: ProductDescriptor
    campaign: CampaignDescriptor
    sources: List[str] = []


class CampaignMetadata(CamelModel):
    created_at: str
    status: CampaignStatus
    references: List[str]


class CampaignOutput(CamelModel):
    id: str
    brand_voice: str
    ad_content: Dict[str, str]
    image_prompts: List[str]
    images: Optional[List[str]] = None
    metadata: CampaignMetadata
