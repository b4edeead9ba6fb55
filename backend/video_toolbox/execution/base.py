"""
Media engine abstraction layer.

An engine runs one transcoding request against one input file and reports
its work as a stream of capability events (see events.py).

Design rules:
- One request per task, one process per request
- Engines are stateless: all context is carried by the request
- Failures are reported as FailedEvent, never raised to the caller
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

from .events import EventStream


@dataclass(frozen=True)
class EngineRequest:
    """
    One transcoding invocation.

    input_args are placed before the input (seeking), output_args after it
    (codecs, filters, container).
    """

    input_path: str
    output_path: str
    input_args: List[str] = field(default_factory=list)
    output_args: List[str] = field(default_factory=list)

    # Expected output duration in seconds. None means "read it from the input".
    duration: Optional[float] = None

    # Progress reported as soon as the process has started, for single-frame
    # operations where there is no time-based progress to parse.
    progress_on_start: Optional[int] = None


class MediaEngine(ABC):
    """
    Abstract base class for media engines.

    All engines must implement:
    - available: whether the engine can run on this system
    - run: execute a request, yielding capability events
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable engine name for logs."""
        pass

    @property
    @abstractmethod
    def available(self) -> bool:
        """True if the engine can execute on this system."""
        pass

    @abstractmethod
    def run(self, request: EngineRequest) -> EventStream:
        """
        Execute a request.

        Yields ProgressEvent zero or more times, then exactly one
        CompletedEvent or FailedEvent.
        """
        pass
