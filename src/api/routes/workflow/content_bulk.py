"""
Bulk Content Route

Generates a batch of ready-to-post social posts for one brand voice.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from loguru import logger as log

from src.api.dependencies import get_bulk_content_generator
from src.services.workflow.content_bulk import (
    BulkContentGenerator,
    BulkContentValidationError,
)
from src.services.workflow.models import BulkContentRequest, BulkContentResult

router = APIRouter(prefix="/api/workflow", tags=["Workflow"])


@router.post("/content-bulk-generate", response_model=BulkContentResult)
async def generate_bulk_content(
    payload: BulkContentRequest,
    generator: BulkContentGenerator = Depends(get_bulk_content_generator),
):
    try:
        return await generator.generate(payload)
    except BulkContentValidationError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    except Exception as e:
        log.error(f"Bulk content generation error: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": str(e) or "Failed to generate bulk content"},
        )
