from .synthesize import router as synthesize_router

__all__ = ["synthesize_router"]
