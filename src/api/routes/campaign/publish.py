from typing import Any, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from loguru import logger as log

from src.api.dependencies import get_webhook_bridge
from src.services.webhook.bridge import WorkflowWebhookBridge
from src.utils.models import CamelModel

router = APIRouter(prefix="/api/campaign", tags=["Campaign"])


class PublishRequest(CamelModel):
    campaign_id: Any = None
    schedule: Optional[str] = "now"


@router.post("/publish")
async def publish_campaign(
    payload: PublishRequest,
    bridge: WorkflowWebhookBridge = Depends(get_webhook_bridge),
):
    try:
        # An explicit null schedule means publish now
        schedule = payload.schedule or "now"
        return await bridge.publish_campaign(payload.campaign_id, schedule)
    except Exception as e:
        log.error(f"Error publishing campaign: {e}")
        return JSONResponse(
            status_code=500, content={"error": "Failed to publish campaign"}
        )
