"""
Capability events.

An external capability (ffmpeg, a remote provider) reports its work as an
iterator of events:

- zero or more ProgressEvent
- exactly one terminal event: CompletedEvent or FailedEvent

No event follows the terminal event.
"""

from dataclasses import dataclass
from typing import Iterator, Union


@dataclass(frozen=True)
class ProgressEvent:
    """Incremental progress, as a raw percentage (may be fractional or out of range)."""

    percent: float


@dataclass(frozen=True)
class CompletedEvent:
    """The capability produced its artifact at output_path."""

    output_path: str


@dataclass(frozen=True)
class FailedEvent:
    """
    The capability failed.

    reason is diagnostic detail for logs. It is never shown to clients.
    """

    reason: str


CapabilityEvent = Union[ProgressEvent, CompletedEvent, FailedEvent]
EventStream = Iterator[CapabilityEvent]


def is_terminal(event: CapabilityEvent) -> bool:
    return isinstance(event, (CompletedEvent, FailedEvent))
