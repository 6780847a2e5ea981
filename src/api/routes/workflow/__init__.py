from .content_bulk import router as content_bulk_router
from .stock_photos import router as stock_photos_router

__all__ = ["content_bulk_router", "stock_photos_router"]
