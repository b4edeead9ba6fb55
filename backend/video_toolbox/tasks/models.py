"""
Task data models.

One Task record exists per submitted operation. Every operation kind shares
the base lifecycle fields (status, progress, error, created, output_path) and
adds its own immutable parameters.

All models use Pydantic for validation and are frozen: the registry replaces
a record wholesale on update instead of mutating it in place.
State transitions are validated externally (see state.py).

Snapshots are serialized with camelCase keys, omitting unset fields, so that
clients see the same shape at every stage of a task's life.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..remote.models import VideoFormat


class TaskStatus(str, Enum):
    """
    Task status.

    pending -> downloading | processing -> completed | error
    """

    PENDING = "pending"  # Created, executor not yet started
    DOWNLOADING = "downloading"  # Remote download in progress
    PROCESSING = "processing"  # ffmpeg operation in progress
    COMPLETED = "completed"  # Artifact produced
    ERROR = "error"  # Operation failed


class TaskKind(str, Enum):
    """Operation kind. Also the registry key namespace."""

    CONVERT = "convert"
    TRIM = "trim"
    SCREENSHOT = "screenshot"
    COMPRESS = "compress"
    DOWNLOAD = "download"


class OutputFormat(str, Enum):
    """Video containers accepted for convert and trim."""

    MP4 = "mp4"
    MOV = "mov"
    AVI = "avi"
    MKV = "mkv"
    WEBM = "webm"
    GIF = "gif"


class ImageFormat(str, Enum):
    JPG = "jpg"
    PNG = "png"


class ScreenshotQuality(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class CompressionLevel(str, Enum):
    LIGHT = "light"
    MEDIUM = "medium"
    HIGH = "high"


class TargetResolution(str, Enum):
    ORIGINAL = "original"
    FHD = "1080p"
    HD = "720p"
    SD = "480p"


def task_key(kind: TaskKind, task_id: str) -> str:
    """Build the namespaced registry key for a task."""
    return f"{kind.value}:{task_id}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Task(BaseModel):
    """
    Base task record shared by every operation kind.

    output_path is the web-addressable location of the artifact, relative to
    the uploads root. It is only set once the artifact exists.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    KIND: ClassVar[TaskKind]

    # Identity
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))

    # State
    status: TaskStatus = TaskStatus.PENDING
    progress: int = 0
    error: Optional[str] = None

    # Timestamps
    created: datetime = Field(default_factory=_utcnow)

    # Output
    output_path: Optional[str] = None

    @property
    def key(self) -> str:
        return task_key(self.KIND, self.id)

    def snapshot(self) -> Dict[str, Any]:
        """Client-facing JSON representation."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ConversionTask(Task):
    KIND: ClassVar[TaskKind] = TaskKind.CONVERT

    input_file: str
    output_format: OutputFormat


class TrimTask(Task):
    KIND: ClassVar[TaskKind] = TaskKind.TRIM

    input_file: str
    start_time: float
    end_time: float
    output_format: OutputFormat

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time


class ScreenshotTask(Task):
    KIND: ClassVar[TaskKind] = TaskKind.SCREENSHOT

    input_file: str
    timestamp: float
    format: ImageFormat
    quality: ScreenshotQuality


class CompressionTask(Task):
    KIND: ClassVar[TaskKind] = TaskKind.COMPRESS

    input_file: str
    compression_level: CompressionLevel
    resolution: TargetResolution
    original_size: Optional[int] = None  # Bytes, measured at submission
    output_size: Optional[int] = None  # Bytes, set on completion


class DownloadTask(Task):
    KIND: ClassVar[TaskKind] = TaskKind.DOWNLOAD

    url: str
    format: VideoFormat
