"""
Video operation endpoints.

Submissions validate their fields, stage the upload, register a pending
task and hand it to the executor pool. They answer 202 with the initial
snapshot; clients then poll GET /api/video/{kind}/{id}.

Field validation happens before the upload is staged, so a rejected
request leaves nothing on disk and creates no task.
"""

import logging
import uuid
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict

from ..remote.errors import InvalidVideoUrlError, ProviderError, VideoNotFoundError
from ..storage.errors import UploadRejectedError
from ..storage.layout import remove_if_exists
from ..storage.uploads import stage_upload
from ..tasks.models import (
    CompressionLevel,
    CompressionTask,
    ConversionTask,
    DownloadTask,
    ImageFormat,
    OutputFormat,
    ScreenshotQuality,
    ScreenshotTask,
    TargetResolution,
    Task,
    TaskKind,
    TrimTask,
    task_key,
)
from .responses import success

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/video", tags=["video"])


class DownloadRequest(BaseModel):
    """Remote download submission."""

    model_config = ConfigDict(extra="forbid")

    url: str
    itag: int


def is_uuid4(value: str) -> bool:
    try:
        parsed = uuid.UUID(value)
    except ValueError:
        return False
    return parsed.version == 4 and str(parsed) == value.lower()


async def _stage(request: Request, file: UploadFile) -> Path:
    settings = request.app.state.settings
    storage = request.app.state.storage
    try:
        return await stage_upload(file, storage.temp_dir, settings.max_file_size)
    except UploadRejectedError as e:
        raise HTTPException(status_code=e.status_code, detail=e.reason)


def _launch(request: Request, task: Task, input_path: Optional[Path] = None) -> JSONResponse:
    """Register a pending task, start its executor and answer 202."""
    registry = request.app.state.registry
    executor = request.app.state.executor
    profile = request.app.state.profiles[task.KIND]

    registry.set(task.key, task)
    snapshot = task.snapshot()
    try:
        executor.launch(profile, task, input_path)
    except RuntimeError:
        registry.delete(task.key)
        raise

    logger.info(f"[API] Submitted {task.key}")
    return success(snapshot, status_code=202)


async def _submit_upload(request: Request, file: UploadFile, build_task) -> JSONResponse:
    """Stage the upload, then build and launch the task. The staged file is removed on failure."""
    input_path = await _stage(request, file)
    try:
        task = build_task(input_path)
        return _launch(request, task, input_path)
    except BaseException:
        remove_if_exists(input_path)
        raise


@router.get("/info")
def video_info(request: Request, url: str = Query(..., min_length=1)):
    """Look up metadata and available encodings for a YouTube URL."""
    provider = request.app.state.provider
    try:
        info = provider.get_info(url)
    except InvalidVideoUrlError:
        raise HTTPException(status_code=400, detail="Not a valid YouTube URL.")
    except VideoNotFoundError as e:
        logger.warning(f"[API] {e}")
        raise HTTPException(status_code=404, detail="Video not found.")

    return success(info.model_dump(mode="json", by_alias=True))


@router.post("/download", status_code=202)
def submit_download(request: Request, body: DownloadRequest):
    """Start a remote download of one encoding."""
    provider = request.app.state.provider
    try:
        info = provider.get_info(body.url)
    except InvalidVideoUrlError:
        raise HTTPException(status_code=400, detail="Not a valid YouTube URL.")
    except ProviderError as e:
        logger.warning(f"[API] {e}")
        raise HTTPException(status_code=404, detail="Video not found.")

    video_format = info.find_format(body.itag)
    if video_format is None:
        raise HTTPException(status_code=400, detail=f"Format {body.itag} is not available.")

    return _launch(request, DownloadTask(url=body.url, format=video_format))


@router.post("/convert", status_code=202)
async def submit_convert(
    request: Request,
    file: UploadFile = File(...),
    output_format: OutputFormat = Form(..., alias="outputFormat"),
):
    return await _submit_upload(
        request,
        file,
        lambda path: ConversionTask(input_file=path.name, output_format=output_format),
    )


@router.post("/trim", status_code=202)
async def submit_trim(
    request: Request,
    file: UploadFile = File(...),
    start_time: float = Form(..., alias="startTime", ge=0),
    end_time: float = Form(..., alias="endTime", ge=0),
    output_format: OutputFormat = Form(..., alias="outputFormat"),
):
    if end_time <= start_time:
        raise HTTPException(status_code=400, detail="End time must be after start time.")

    return await _submit_upload(
        request,
        file,
        lambda path: TrimTask(
            input_file=path.name,
            start_time=start_time,
            end_time=end_time,
            output_format=output_format,
        ),
    )


@router.post("/screenshot", status_code=202)
async def submit_screenshot(
    request: Request,
    file: UploadFile = File(...),
    timestamp: float = Form(..., ge=0),
    format: ImageFormat = Form(...),
    quality: ScreenshotQuality = Form(...),
):
    return await _submit_upload(
        request,
        file,
        lambda path: ScreenshotTask(
            input_file=path.name,
            timestamp=timestamp,
            format=format,
            quality=quality,
        ),
    )


@router.post("/compress", status_code=202)
async def submit_compress(
    request: Request,
    file: UploadFile = File(...),
    compression_level: CompressionLevel = Form(..., alias="compressionLevel"),
    resolution: TargetResolution = Form(...),
):
    return await _submit_upload(
        request,
        file,
        lambda path: CompressionTask(
            input_file=path.name,
            compression_level=compression_level,
            resolution=resolution,
            original_size=path.stat().st_size,
        ),
    )


@router.get("/{kind}/{task_id}")
def task_status(request: Request, kind: TaskKind, task_id: str):
    """Current snapshot of one task."""
    if not is_uuid4(task_id):
        raise HTTPException(status_code=400, detail="Invalid task ID.")

    task = request.app.state.registry.get(task_key(kind, task_id))
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found.")

    return success(task.snapshot())
