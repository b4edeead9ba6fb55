"""
Operation profiles.

A profile holds everything that differs between operation kinds, so one
generic executor can drive them all:

- which capability runs and with which arguments
- where the artifact goes and what it is called
- the in-progress status (downloading vs processing)
- the fixed failure message shown to clients
- fields only known once the artifact exists (compressed size)

Profiles are stateless and shared by every task of their kind.
"""

import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..remote.base import RemoteVideoProvider
from ..storage.layout import StorageArea, StorageLayout
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
    TaskStatus,
    TrimTask,
)
from .base import EngineRequest, MediaEngine
from .events import EventStream


# Codec and muxer arguments per output container
CONTAINER_ARGS: Dict[OutputFormat, List[str]] = {
    OutputFormat.MP4: ["-c:v", "libx264", "-c:a", "aac", "-f", "mp4"],
    OutputFormat.MOV: ["-c:v", "libx264", "-c:a", "aac", "-f", "mov"],
    OutputFormat.AVI: ["-c:v", "libxvid", "-c:a", "libmp3lame", "-f", "avi"],
    OutputFormat.WEBM: ["-c:v", "libvpx", "-c:a", "libvorbis", "-f", "webm"],
    OutputFormat.MKV: ["-c:v", "libx264", "-c:a", "aac", "-f", "matroska"],
    OutputFormat.GIF: ["-an", "-f", "gif"],
}

GIF_CLIP_FILTER = "fps=10,scale=320:-1:flags=lanczos"

# -q:v per image format and quality tier
SCREENSHOT_QSCALE: Dict[ImageFormat, Dict[ScreenshotQuality, int]] = {
    ImageFormat.JPG: {
        ScreenshotQuality.LOW: 10,
        ScreenshotQuality.MEDIUM: 5,
        ScreenshotQuality.HIGH: 2,
    },
    ImageFormat.PNG: {
        ScreenshotQuality.LOW: 2,
        ScreenshotQuality.MEDIUM: 5,
        ScreenshotQuality.HIGH: 9,
    },
}

# Screenshot progress jumps here once ffmpeg is running
SCREENSHOT_START_PROGRESS = 50

# (video bitrate, audio bitrate, x264 preset)
COMPRESSION_SETTINGS: Dict[CompressionLevel, tuple] = {
    CompressionLevel.LIGHT: ("5000k", "192k", "medium"),
    CompressionLevel.MEDIUM: ("2500k", "128k", "medium"),
    CompressionLevel.HIGH: ("1000k", "96k", "veryslow"),
}

RESOLUTION_HEIGHTS: Dict[TargetResolution, int] = {
    TargetResolution.FHD: 1080,
    TargetResolution.HD: 720,
    TargetResolution.SD: 480,
}


def _format_seconds(value: float) -> str:
    """Render seconds without a trailing '.0' for whole values."""
    return f"{value:g}"


class OperationProfile(ABC):
    """Per-kind strategy consumed by TaskExecutor."""

    kind: TaskKind
    failure_message: str
    active_status: TaskStatus = TaskStatus.PROCESSING
    output_area: StorageArea = StorageArea.OUTPUTS

    @abstractmethod
    def output_filename(self, task: Task, stem: str) -> str:
        """Artifact file name. stem is the staged input name without extension."""
        pass

    @abstractmethod
    def events(self, task: Task, input_path: Optional[Path], output_path: Path) -> EventStream:
        """Start the capability and return its event stream."""
        pass

    def output_location(
        self, storage: StorageLayout, task: Task, input_path: Optional[Path]
    ) -> Path:
        stem = Path(input_path).stem if input_path is not None else ""
        return storage.area(self.output_area) / self.output_filename(task, stem)

    def completion_fields(self, task: Task, output_path: Path) -> Dict[str, Any]:
        """Extra fields written together with status=completed."""
        return {}


class FFmpegOperation(OperationProfile):
    """Profile whose capability is a single media engine run."""

    def __init__(self, engine: MediaEngine):
        self.engine = engine

    @abstractmethod
    def build_request(self, task: Task, input_path: Path, output_path: Path) -> EngineRequest:
        pass

    def events(self, task: Task, input_path: Optional[Path], output_path: Path) -> EventStream:
        if input_path is None:
            raise ValueError(f"{self.kind.value} requires an input file")
        return self.engine.run(self.build_request(task, input_path, output_path))


class ConvertOperation(FFmpegOperation):
    kind = TaskKind.CONVERT
    failure_message = "An error occurred while converting the video."

    def output_filename(self, task: ConversionTask, stem: str) -> str:
        return f"{stem}.{task.output_format.value}"

    def build_request(self, task: ConversionTask, input_path: Path, output_path: Path) -> EngineRequest:
        return EngineRequest(
            input_path=str(input_path),
            output_path=str(output_path),
            output_args=list(CONTAINER_ARGS[task.output_format]),
        )


class TrimOperation(FFmpegOperation):
    kind = TaskKind.TRIM
    failure_message = "An error occurred while trimming the video."

    def output_filename(self, task: TrimTask, stem: str) -> str:
        return f"trimmed-{stem}.{task.output_format.value}"

    def build_request(self, task: TrimTask, input_path: Path, output_path: Path) -> EngineRequest:
        output_args = ["-t", _format_seconds(task.duration)]
        if task.output_format == OutputFormat.GIF:
            output_args += ["-vf", GIF_CLIP_FILTER]
        output_args += CONTAINER_ARGS[task.output_format]

        # Progress is measured against the clip, not the whole input
        return EngineRequest(
            input_path=str(input_path),
            output_path=str(output_path),
            input_args=["-ss", _format_seconds(task.start_time)],
            output_args=output_args,
            duration=task.duration,
        )


class ScreenshotOperation(FFmpegOperation):
    kind = TaskKind.SCREENSHOT
    failure_message = "An error occurred while taking the screenshot."

    def output_filename(self, task: ScreenshotTask, stem: str) -> str:
        return f"screenshot-{stem}-{_format_seconds(task.timestamp)}.{task.format.value}"

    def build_request(self, task: ScreenshotTask, input_path: Path, output_path: Path) -> EngineRequest:
        qscale = SCREENSHOT_QSCALE[task.format][task.quality]
        return EngineRequest(
            input_path=str(input_path),
            output_path=str(output_path),
            input_args=["-ss", _format_seconds(task.timestamp)],
            output_args=["-frames:v", "1", "-q:v", str(qscale)],
            progress_on_start=SCREENSHOT_START_PROGRESS,
        )


class CompressOperation(FFmpegOperation):
    kind = TaskKind.COMPRESS
    failure_message = "An error occurred while compressing the video."

    def output_filename(self, task: CompressionTask, stem: str) -> str:
        return f"compressed-{stem}.mp4"

    def build_request(self, task: CompressionTask, input_path: Path, output_path: Path) -> EngineRequest:
        video_bitrate, audio_bitrate, preset = COMPRESSION_SETTINGS[task.compression_level]

        filters = []
        height = RESOLUTION_HEIGHTS.get(task.resolution)
        if height is not None:
            filters.append(f"scale=-2:{height}")
        if task.compression_level != CompressionLevel.LIGHT:
            filters.append("hqdn3d")

        output_args = [
            "-c:v", "libx264",
            "-b:v", video_bitrate,
            "-preset", preset,
            "-crf", "23",
            "-c:a", "aac",
            "-b:a", audio_bitrate,
        ]
        if filters:
            output_args += ["-vf", ",".join(filters)]
        output_args += ["-movflags", "+faststart", "-f", "mp4"]

        return EngineRequest(
            input_path=str(input_path),
            output_path=str(output_path),
            output_args=output_args,
        )

    def completion_fields(self, task: CompressionTask, output_path: Path) -> Dict[str, Any]:
        return {"output_size": os.path.getsize(output_path)}


class DownloadOperation(OperationProfile):
    """Remote fetch through the configured provider. No input file."""

    kind = TaskKind.DOWNLOAD
    failure_message = "An error occurred while downloading the video."
    active_status = TaskStatus.DOWNLOADING
    output_area = StorageArea.DOWNLOADS

    def __init__(self, provider: RemoteVideoProvider):
        self.provider = provider

    def output_filename(self, task: DownloadTask, stem: str) -> str:
        return f"{task.id}.{task.format.container}"

    def events(self, task: DownloadTask, input_path: Optional[Path], output_path: Path) -> EventStream:
        return self.provider.download(task.url, task.format, str(output_path))


def build_profiles(engine: MediaEngine, provider: RemoteVideoProvider) -> Dict[TaskKind, OperationProfile]:
    """One profile per operation kind."""
    profiles: List[OperationProfile] = [
        ConvertOperation(engine),
        TrimOperation(engine),
        ScreenshotOperation(engine),
        CompressOperation(engine),
        DownloadOperation(provider),
    ]
    return {profile.kind: profile for profile in profiles}
