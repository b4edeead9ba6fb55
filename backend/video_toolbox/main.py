"""
Video Toolbox backend service.

create_app() wires the shared components onto app.state:

    settings   Settings read from the environment
    storage    StorageLayout for the uploads root
    registry   TaskRegistry shared by routes, executors and the reaper
    engine     MediaEngine (ffmpeg)
    provider   RemoteVideoProvider (yt-dlp or simulated)
    profiles   OperationProfile per TaskKind
    executor   TaskExecutor worker pool
    reaper     RetentionReaper background thread

Run with:
    uvicorn video_toolbox.main:create_app --factory
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .config import RemoteProviderKind, Settings
from .execution.base import MediaEngine
from .execution.executor import TaskExecutor
from .execution.ffmpeg import FFmpegEngine
from .execution.profiles import build_profiles
from .logging_config import configure_logging
from .remote.base import RemoteVideoProvider
from .remote.simulated import SimulatedProvider
from .remote.ytdlp import YtDlpProvider
from .retention.reaper import RetentionReaper
from .routes import download_router, health_router, video_router
from .routes.responses import failure
from .storage.layout import StorageLayout
from .tasks.registry import TaskRegistry

logger = logging.getLogger(__name__)


def build_provider(settings: Settings) -> RemoteVideoProvider:
    """Select the remote download strategy once, at startup."""
    if settings.remote_provider == RemoteProviderKind.SIMULATED:
        return SimulatedProvider(settings.sample_video_path)
    return YtDlpProvider()


def _validation_details(exc: RequestValidationError):
    details = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        details.append({
            "field": ".".join(location),
            "message": error.get("msg", ""),
        })
    return details


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return failure("Invalid request.", 400, details=_validation_details(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return failure(str(exc.detail), exc.status_code)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"[API] Unhandled error on {request.method} {request.url.path}: {exc}")
        return failure("Internal server error.", 500)


def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[MediaEngine] = None,
    provider: Optional[RemoteVideoProvider] = None,
) -> FastAPI:
    """
    Build the application.

    engine and provider override the ffmpeg engine and the configured
    remote provider.
    """
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    storage = StorageLayout(settings.uploads_dir)
    registry = TaskRegistry()
    engine = engine or FFmpegEngine(settings.ffmpeg_path)
    provider = provider or build_provider(settings)
    executor = TaskExecutor(registry, storage, max_workers=settings.worker_threads)
    reaper = RetentionReaper(
        storage,
        registry,
        file_retention=settings.file_retention,
        task_retention=settings.task_retention,
        interval=settings.reaper_interval_seconds,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        storage.ensure_directories()
        reaper.start()
        logger.info(
            f"Video Toolbox {__version__} started ({settings.environment.value}), "
            f"uploads at {storage.root}, provider {provider.name}, "
            f"ffmpeg {'available' if engine.available else 'NOT FOUND'}"
        )
        try:
            yield
        finally:
            reaper.stop()
            executor.shutdown(wait=False)
            logger.info("Video Toolbox stopped")

    app = FastAPI(title="Video Toolbox API", version=__version__, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.storage = storage
    app.state.registry = registry
    app.state.engine = engine
    app.state.provider = provider
    app.state.profiles = build_profiles(engine, provider)
    app.state.executor = executor
    app.state.reaper = reaper

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(video_router)
    app.include_router(download_router)

    return app
