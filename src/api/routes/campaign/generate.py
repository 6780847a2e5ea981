"""
Campaign Generate Route

Runs the content pipeline (brand voice, ad copy, image prompts, images) for
one campaign brief.
"""

from fastapi import APIRouter, Depends

from src.api.dependencies import get_campaign_pipeline
from src.services.campaign.models import CampaignInput, CampaignOutput
from src.services.campaign.pipeline import CampaignPipeline

router = APIRouter(prefix="/api/campaign", tags=["Campaign"])


@router.post(
    "/generate", response_model=CampaignOutput, response_model_exclude_none=True
)
async def generate_campaign(
    payload: CampaignInput,
    pipeline: CampaignPipeline = Depends(get_campaign_pipeline),
) -> CampaignOutput:
    return await pipeline.run(payload)
