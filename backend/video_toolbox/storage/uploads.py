"""
Upload staging.

Uploaded videos are written to the temp area as "<uuid4><original ext>"
before a task is created. Only video MIME types are accepted. The size
limit is enforced while copying into the temp area, so the staged copy never
exceeds it; the multipart body itself has already been spooled by the
framework by then.
"""

import logging
import uuid
from pathlib import Path
from typing import FrozenSet

from fastapi import UploadFile

from .errors import UploadRejectedError, UploadTooLargeError
from .layout import remove_if_exists

logger = logging.getLogger(__name__)

ALLOWED_VIDEO_MIME_TYPES: FrozenSet[str] = frozenset({
    "video/mp4",
    "video/quicktime",
    "video/x-msvideo",
    "video/x-matroska",
    "video/webm",
})

CHUNK_SIZE = 1024 * 1024


def staged_filename(original_name: str) -> str:
    """Unique staging name that keeps the original extension."""
    suffix = Path(original_name or "").suffix.lower()
    return f"{uuid.uuid4()}{suffix}"


async def stage_upload(upload: UploadFile, temp_dir: Path, max_size: int) -> Path:
    """
    Write an uploaded video into the temp area.

    Args:
        upload: Multipart file from the request
        temp_dir: Destination directory
        max_size: Maximum accepted size in bytes

    Returns:
        Path of the staged file

    Raises:
        UploadRejectedError: Disallowed MIME type
        UploadTooLargeError: Upload exceeds max_size (partial file removed)
    """
    if upload.content_type not in ALLOWED_VIDEO_MIME_TYPES:
        raise UploadRejectedError(
            "File type not allowed. Only MP4, MOV, AVI, MKV and WebM files can be uploaded."
        )

    temp_dir.mkdir(parents=True, exist_ok=True)
    destination = temp_dir / staged_filename(upload.filename or "")

    written = 0
    try:
        with destination.open("wb") as fh:
            while True:
                chunk = await upload.read(CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > max_size:
                    raise UploadTooLargeError(max_size)
                fh.write(chunk)
    except BaseException:
        remove_if_exists(destination)
        raise
    finally:
        await upload.close()

    logger.info(f"[Upload] Staged {upload.filename!r} as {destination.name} ({written} bytes)")
    return destination
