"""
Execution: media engine capability and the event stream contract.

Profiles and the task executor depend on the task models and are imported
from their own modules (execution.profiles, execution.executor).
"""

from .errors import (
    ExecutionError,
    EngineNotAvailableError,
    OutputVerificationError,
)
from .events import (
    ProgressEvent,
    CompletedEvent,
    FailedEvent,
    CapabilityEvent,
    EventStream,
    is_terminal,
)
from .base import EngineRequest, MediaEngine
from .progress import ProgressInfo, ProgressParser
from .ffmpeg import FFmpegEngine

__all__ = [
    # Errors
    "ExecutionError",
    "EngineNotAvailableError",
    "OutputVerificationError",
    # Events
    "ProgressEvent",
    "CompletedEvent",
    "FailedEvent",
    "CapabilityEvent",
    "EventStream",
    "is_terminal",
    # Engines
    "EngineRequest",
    "MediaEngine",
    "ProgressInfo",
    "ProgressParser",
    "FFmpegEngine",
]
