"""
Campaign Create Route

Relays the campaign form to the workflow automation webhook.
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from loguru import logger as log

from src.api.dependencies import get_webhook_bridge
from src.services.webhook.bridge import WebhookRelayError, WorkflowWebhookBridge

router = APIRouter(prefix="/api/campaign", tags=["Campaign"])


@router.post("/create")
async def create_campaign(
    payload: Dict[str, Any] = Body(...),
    bridge: WorkflowWebhookBridge = Depends(get_webhook_bridge),
):
    """Forward the body to the webhook and return its response unchanged."""
    try:
        return await bridge.create_campaign(payload)
    except WebhookRelayError as e:
        log.error(f"Error creating campaign: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to create campaign", "details": str(e)},
        )
