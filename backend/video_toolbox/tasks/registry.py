"""
In-memory task registry.

The registry provides:
- Task storage and retrieval by namespaced key ("<kind>:<id>")
- Partial updates validated against the task state machine
- Prefix listing (all tasks of one kind)
- Expiry purge used by the retention reaper

Executors update records from worker threads while request handlers read
them, so every operation runs under a single lock. Records are frozen
Pydantic models; an update stores a new copy instead of mutating in place,
so a record returned by get() is a stable snapshot.
"""

import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from .models import Task, TaskStatus
from .state import validate_task_transition
from .errors import TaskNotFoundError

logger = logging.getLogger(__name__)


class TaskRegistry:
    """
    Thread-safe in-memory registry for task tracking.

    Constructed once by the application factory and shared by the API
    layer, the executors and the retention reaper.
    """

    def __init__(self):
        # task key -> Task
        self._tasks: Dict[str, Task] = {}
        self._lock = threading.Lock()

    def set(self, key: str, task: Task) -> None:
        """
        Insert or overwrite a task.

        No constraint checking: callers own the key scheme.
        """
        with self._lock:
            self._tasks[key] = task

    def get(self, key: str) -> Optional[Task]:
        """
        Retrieve a task by key.

        Returns:
            The task if found, None otherwise
        """
        with self._lock:
            return self._tasks.get(key)

    def get_or_raise(self, key: str) -> Task:
        """
        Retrieve a task by key, raising an exception if not found.

        Raises:
            TaskNotFoundError: If the task does not exist
        """
        task = self.get(key)
        if task is None:
            raise TaskNotFoundError(key)
        return task

    def update(self, key: str, **fields: Any) -> bool:
        """
        Merge fields into an existing task.

        A missing key is reported, never inserted: an executor that outlives
        its reaped record must not resurrect it.

        Args:
            key: Task key
            **fields: Field values to merge (snake_case names)

        Returns:
            True if the task was updated, False if the key is absent

        Raises:
            InvalidStateTransitionError: If fields change the status illegally
        """
        with self._lock:
            task = self._tasks.get(key)
            if task is None:
                return False

            if "status" in fields:
                validate_task_transition(task.status, TaskStatus(fields["status"]))

            self._tasks[key] = task.model_copy(update=fields)
            return True

    def delete(self, key: str) -> bool:
        """
        Remove a task.

        Returns:
            True if the task existed and was removed
        """
        with self._lock:
            return self._tasks.pop(key, None) is not None

    def list_by_prefix(self, prefix: str) -> List[Task]:
        """
        List all tasks whose key starts with prefix.

        Order is unspecified.
        """
        with self._lock:
            return [task for key, task in self._tasks.items() if key.startswith(prefix)]

    def purge_expired(self, max_age: timedelta, now: Optional[datetime] = None) -> int:
        """
        Delete tasks created more than max_age ago.

        Args:
            max_age: Retention window
            now: Reference time (defaults to current UTC time)

        Returns:
            Number of tasks removed
        """
        now = now or datetime.now(timezone.utc)
        cutoff = now - max_age

        with self._lock:
            expired = [key for key, task in self._tasks.items() if task.created < cutoff]
            for key in expired:
                del self._tasks[key]

        if expired:
            logger.info(f"[Registry] Purged {len(expired)} expired task(s)")
        return len(expired)

    def count(self) -> int:
        """Get the total number of tasks in the registry."""
        with self._lock:
            return len(self._tasks)

    def clear(self) -> None:
        """
        Clear all tasks from the registry.

        Useful for testing or resetting state.
        """
        with self._lock:
            self._tasks.clear()
