"""
Campaign State Routes

Durable per-campaign workflow state. The stored body is returned byte for
byte, so it is kept as the raw request text rather than re-serialized.
"""

import json

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from src.api.dependencies import get_campaign_state_store
from src.db.utils.kv_store import KeyValueStore

router = APIRouter(prefix="/api/campaign-state", tags=["Campaign State"])

EMPTY_STATE = "{}"


@router.post("/{state_id}/store")
async def store_campaign_state(
    state_id: str,
    request: Request,
    store: KeyValueStore = Depends(get_campaign_state_store),
):
    body = await request.body()
    try:
        text = body.decode("utf-8")
        json.loads(text)
    except ValueError:
        return JSONResponse(status_code=400, content={"error": "Invalid JSON body"})

    store.put(state_id, text)
    return {"success": True}


@router.get("/{state_id}/retrieve")
async def retrieve_campaign_state(
    state_id: str,
    store: KeyValueStore = Depends(get_campaign_state_store),
) -> Response:
    value = store.get(state_id)
    return Response(
        content=EMPTY_STATE if value is None else value,
        media_type="application/json",
    )
