"""
Task-specific error types.

All errors inherit from TaskError for easy catching.
Errors are explicit and provide actionable messages.
"""


class TaskError(Exception):
    """Base exception for all task-related failures."""
    pass


class TaskNotFoundError(TaskError):
    """Raised when a task cannot be found in the registry."""

    def __init__(self, task_key: str):
        self.task_key = task_key
        super().__init__(f"Task not found: {task_key}")


class InvalidStateTransitionError(TaskError):
    """Raised when attempting an illegal status transition."""

    def __init__(self, current_state: str, target_state: str):
        self.current_state = current_state
        self.target_state = target_state
        super().__init__(
            f"Invalid task state transition: "
            f"{current_state} -> {target_state}"
        )
