"""
HTTP routers.
"""

from .download import router as download_router
from .health import router as health_router
from .video import router as video_router

__all__ = [
    "download_router",
    "health_router",
    "video_router",
]
