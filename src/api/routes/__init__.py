"""
API Routes Package

This package contains all API route modules. When adding a new route:
1. Create your route module in this directory (or subdirectory)
2. Import the router here with a descriptive name (e.g., `router as <feature>_router`)
3. Add it to the `all_routers` list
4. The router will be automatically included in the FastAPI app
"""

from .ping import router as ping_router
from .campaign import create_router, generate_router, publish_router
from .workflow import content_bulk_router, stock_photos_router
from .tts import synthesize_router
from .campaign_state import router as campaign_state_router

# List of all routers to be included in the application
# Add new routers to this list when creating new endpoints
all_routers = [
    ping_router,
    # Campaign routers
    create_router,
    publish_router,
    generate_router,
    stock_photos_router,
    content_bulk_router,
    synthesize_router,
    campaign_state_router,
]

__all__ = [
    "all_routers",
    "ping_router",
    "create_router",
    "publish_router",
    "generate_router",
    "stock_photos_router",
    "content_bulk_router",
    "synthesize_router",
    "campaign_state_router",
]
