from .create import router as create_router
from .generate import router as generate_router
from .publish import router as publish_router

__all__ = ["create_router", "generate_router", "publish_router"]
