"""
Stock Photos Route

Picks one stock photo per post for the workflow's image step.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from loguru import logger as log

from src.api.dependencies import get_photo_selector
from src.services.workflow.models import BrandMetadata, PhotoSelectionResult, Post
from src.services.workflow.photo_selector import PhotoSelector
from src.utils.models import CamelModel

router = APIRouter(prefix="/api/workflow", tags=["Workflow"])


class StockPhotosRequest(CamelModel):
    posts: Optional[List[Post]] = None
    brand_data: Optional[BrandMetadata] = None


class StockPhotosResponse(CamelModel):
    success: bool
    results: List[PhotoSelectionResult]
    total_processed: int


@router.post("/stock-photos", response_model=StockPhotosResponse)
async def select_stock_photos(
    payload: StockPhotosRequest,
    selector: PhotoSelector = Depends(get_photo_selector),
):
    if not payload.posts:
        return JSONResponse(status_code=400, content={"error": "Posts array is required"})

    log.info(f"Selecting stock photos for {len(payload.posts)} posts")
    results = await selector.select_for_posts(payload.posts, payload.brand_data)
    return StockPhotosResponse(
        success=True, results=results, total_processed=len(results)
    )
