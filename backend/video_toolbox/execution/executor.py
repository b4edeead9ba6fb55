"""
Task executor.

One generic driver runs every operation kind. The kind-specific parts come
from an OperationProfile; the executor only translates the capability's
event stream into registry updates.

Rules:
- The executor is the only writer of its task's record
- Progress is clamped to 0-100, floored, and written only when it increases
- Completion pins progress to 100 and records the artifact's web path
- Failure records the profile's fixed message; the cause is only logged
- The staged input is removed on every terminal path
- Nothing raised inside a run escapes the worker thread
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional

from ..storage.layout import StorageLayout, remove_if_exists
from ..tasks.errors import TaskError
from ..tasks.models import Task, TaskStatus
from ..tasks.registry import TaskRegistry
from .events import CompletedEvent, FailedEvent, ProgressEvent
from .profiles import OperationProfile

logger = logging.getLogger(__name__)


def clamp_progress(percent: float) -> int:
    """Clamp a raw percentage to an integer in [0, 100]."""
    if math.isnan(percent):
        return 0
    return int(max(0.0, min(100.0, percent)))


class TaskExecutor:
    """
    Runs tasks on a worker pool.

    launch() is fire-and-forget: the HTTP layer never waits on an executor
    and has no handle to one.
    """

    def __init__(self, registry: TaskRegistry, storage: StorageLayout, max_workers: int = 4):
        self._registry = registry
        self._storage = storage
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="task-executor")

    def launch(self, profile: OperationProfile, task: Task, input_path: Optional[Path] = None) -> None:
        """Schedule a task on the worker pool."""
        output_path = profile.output_location(self._storage, task, input_path)
        self._pool.submit(self.run, task.key, input_path, output_path, profile, task)

    def run(
        self,
        key: str,
        input_path: Optional[Path],
        output_path: Path,
        profile: OperationProfile,
        task: Task,
    ) -> None:
        """Drive one task to a terminal state. Never raises."""
        try:
            self._drive(key, input_path, output_path, profile, task)
        except Exception as e:
            logger.exception(f"[Executor] {key} crashed: {e}")
            self._mark_failed(key, profile)
        finally:
            if input_path is not None:
                self._cleanup_input(key, input_path)

    def _drive(
        self,
        key: str,
        input_path: Optional[Path],
        output_path: Path,
        profile: OperationProfile,
        task: Task,
    ) -> None:
        if not self._registry.update(key, status=profile.active_status, progress=0):
            logger.warning(f"[Executor] {key} is no longer registered, skipping")
            return

        logger.info(f"[Executor] {key} started ({profile.active_status.value})")

        last_progress = 0
        events = profile.events(task, input_path, output_path)
        try:
            for event in events:
                if isinstance(event, ProgressEvent):
                    progress = clamp_progress(event.percent)
                    if progress > last_progress:
                        self._registry.update(key, progress=progress)
                        last_progress = progress

                elif isinstance(event, CompletedEvent):
                    fields = {
                        "status": TaskStatus.COMPLETED,
                        "progress": 100,
                        "output_path": self._storage.web_path(event.output_path),
                    }
                    fields.update(profile.completion_fields(task, Path(event.output_path)))
                    self._registry.update(key, **fields)
                    logger.info(f"[Executor] {key} completed: {fields['output_path']}")
                    return

                elif isinstance(event, FailedEvent):
                    logger.error(f"[Executor] {key} failed: {event.reason}")
                    self._mark_failed(key, profile)
                    return
        finally:
            close = getattr(events, "close", None)
            if close is not None:
                close()

        logger.error(f"[Executor] {key} event stream ended without an outcome")
        self._mark_failed(key, profile)

    def _mark_failed(self, key: str, profile: OperationProfile) -> None:
        try:
            self._registry.update(key, status=TaskStatus.ERROR, error=profile.failure_message)
        except TaskError as e:
            logger.warning(f"[Executor] {key} could not be marked as failed: {e}")

    def _cleanup_input(self, key: str, input_path: Path) -> None:
        try:
            if remove_if_exists(input_path):
                logger.debug(f"[Executor] {key} removed input {input_path}")
        except OSError as e:
            logger.warning(f"[Executor] {key} could not remove input {input_path}: {e}")

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting tasks. Running tasks finish unless wait is False."""
        self._pool.shutdown(wait=wait)
