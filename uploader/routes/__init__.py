"""API routes package."""

from uploader.routes.playback_routes import router as playback_router
from uploader.routes.upload_routes import router as upload_router

__all__ = ["playback_router", "upload_router"]
