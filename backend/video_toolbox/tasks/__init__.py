"""
Task lifecycle: records, state machine and the in-memory registry.

Tasks are created by the API layer, mutated only by their own executor and
deleted by the retention reaper once they expire.
"""

from .errors import (
    TaskError,
    TaskNotFoundError,
    InvalidStateTransitionError,
)
from .models import (
    TaskStatus,
    TaskKind,
    OutputFormat,
    ImageFormat,
    ScreenshotQuality,
    CompressionLevel,
    TargetResolution,
    Task,
    ConversionTask,
    TrimTask,
    ScreenshotTask,
    CompressionTask,
    DownloadTask,
    task_key,
)
from .state import (
    TERMINAL_TASK_STATES,
    is_task_terminal,
    can_transition_task,
    validate_task_transition,
)
from .registry import TaskRegistry

__all__ = [
    # Errors
    "TaskError",
    "TaskNotFoundError",
    "InvalidStateTransitionError",
    # Models
    "TaskStatus",
    "TaskKind",
    "OutputFormat",
    "ImageFormat",
    "ScreenshotQuality",
    "CompressionLevel",
    "TargetResolution",
    "Task",
    "ConversionTask",
    "TrimTask",
    "ScreenshotTask",
    "CompressionTask",
    "DownloadTask",
    "task_key",
    # State validation
    "TERMINAL_TASK_STATES",
    "is_task_terminal",
    "can_transition_task",
    "validate_task_transition",
    # Registry
    "TaskRegistry",
]
