"""
State transition validation for tasks.

Task lifecycle: PENDING -> DOWNLOADING | PROCESSING -> COMPLETED | ERROR

INVARIANT: Terminal task states (COMPLETED, ERROR) are immutable. Once a task
enters a terminal state, no status transition is allowed. No task re-enters
PENDING.
"""

from typing import FrozenSet, Set, Tuple
from .models import TaskStatus
from .errors import InvalidStateTransitionError


TERMINAL_TASK_STATES: FrozenSet[TaskStatus] = frozenset({
    TaskStatus.COMPLETED,
    TaskStatus.ERROR,
})

ACTIVE_TASK_STATES: FrozenSet[TaskStatus] = frozenset({
    TaskStatus.DOWNLOADING,
    TaskStatus.PROCESSING,
})


def is_task_terminal(status: TaskStatus) -> bool:
    """Check if a task status is terminal (immutable)."""
    return status in TERMINAL_TASK_STATES


_TASK_TRANSITIONS: Set[Tuple[TaskStatus, TaskStatus]] = {
    # Executor picks the task up
    (TaskStatus.PENDING, TaskStatus.DOWNLOADING),
    (TaskStatus.PENDING, TaskStatus.PROCESSING),

    # Outcome
    (TaskStatus.DOWNLOADING, TaskStatus.COMPLETED),
    (TaskStatus.DOWNLOADING, TaskStatus.ERROR),
    (TaskStatus.PROCESSING, TaskStatus.COMPLETED),
    (TaskStatus.PROCESSING, TaskStatus.ERROR),

    # An executor may fail before it manages to start the capability
    (TaskStatus.PENDING, TaskStatus.ERROR),
}


def can_transition_task(from_status: TaskStatus, to_status: TaskStatus) -> bool:
    """
    Check if a task state transition is legal.

    INVARIANT: Terminal states cannot transition to any other state.

    Args:
        from_status: Current task status
        to_status: Target task status

    Returns:
        True if the transition is allowed, False otherwise
    """
    # Re-writing the same status accompanies progress updates
    if from_status == to_status:
        return True

    if is_task_terminal(from_status):
        return False

    return (from_status, to_status) in _TASK_TRANSITIONS


def validate_task_transition(from_status: TaskStatus, to_status: TaskStatus) -> None:
    """
    Validate a task state transition, raising an exception if illegal.

    Raises:
        InvalidStateTransitionError: If the transition is not allowed
    """
    if not can_transition_task(from_status, to_status):
        raise InvalidStateTransitionError(from_status.value, to_status.value)
