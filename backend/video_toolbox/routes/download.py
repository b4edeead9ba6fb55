"""
Artifact retrieval.

GET /api/download?path=outputs/clip.mp4

The path is resolved by StorageLayout.resolve_artifact(), which rejects
traversal, absolute paths and anything resolving outside the uploads root.
"""

import logging
import mimetypes
import re

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import FileResponse

from ..storage.errors import ArtifactAccessError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["download"])

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def sanitize_filename(name: str) -> str:
    """Replace characters that are unsafe in a Content-Disposition filename."""
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", name).strip(".")
    return cleaned or "download"


@router.get("/download")
def download_artifact(request: Request, path: str = Query("")):
    storage = request.app.state.storage
    try:
        artifact = storage.resolve_artifact(path)
    except ArtifactAccessError as e:
        logger.info(f"[Download] Rejected {path!r}: {e.reason}")
        raise HTTPException(status_code=e.status_code, detail=e.reason)

    media_type, _ = mimetypes.guess_type(artifact.name)
    return FileResponse(
        artifact,
        media_type=media_type or "application/octet-stream",
        filename=sanitize_filename(artifact.name),
        headers={
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Methods": "GET",
        },
    )
