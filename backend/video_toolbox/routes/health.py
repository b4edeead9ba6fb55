"""
Service index and health check.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from .. import __version__
from .responses import success

router = APIRouter(tags=["health"])

SERVICE_NAME = "Video Toolbox API"

ENDPOINTS = [
    {"method": "GET", "path": "/api/health", "description": "Health check"},
    {"method": "GET", "path": "/api/video/info", "description": "Remote video metadata", "query": "url"},
    {"method": "POST", "path": "/api/video/download", "description": "Start a remote download", "body": "{ url, itag }"},
    {"method": "GET", "path": "/api/video/download/{id}", "description": "Download status"},
    {"method": "POST", "path": "/api/video/convert", "description": "Start a conversion", "body": "multipart (file, outputFormat)"},
    {"method": "GET", "path": "/api/video/convert/{id}", "description": "Conversion status"},
    {"method": "POST", "path": "/api/video/trim", "description": "Start a trim", "body": "multipart (file, startTime, endTime, outputFormat)"},
    {"method": "GET", "path": "/api/video/trim/{id}", "description": "Trim status"},
    {"method": "POST", "path": "/api/video/screenshot", "description": "Take a screenshot", "body": "multipart (file, timestamp, format, quality)"},
    {"method": "GET", "path": "/api/video/screenshot/{id}", "description": "Screenshot status"},
    {"method": "POST", "path": "/api/video/compress", "description": "Start a compression", "body": "multipart (file, compressionLevel, resolution)"},
    {"method": "GET", "path": "/api/video/compress/{id}", "description": "Compression status"},
    {"method": "GET", "path": "/api/download", "description": "Download an artifact", "query": "path"},
]


@router.get("/")
def index():
    return success({
        "name": SERVICE_NAME,
        "version": __version__,
        "endpoints": ENDPOINTS,
    })


@router.get("/api/health")
def health(request: Request):
    engine = request.app.state.engine
    return success(
        message=f"{SERVICE_NAME} is running",
        version=__version__,
        timestamp=datetime.now(timezone.utc).isoformat(),
        ffmpeg=engine.available,
    )
