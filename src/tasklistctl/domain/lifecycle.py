"""Task status and priority enums plus the natural status flow.

Any status may be set explicitly; the transition map only decides whether
a change is part of the natural flow or deserves a warning.
"""

from __future__ import annotations

from enum import StrEnum


class TaskStatus(StrEnum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    BLOCKED = "blocked"


class Priority(StrEnum):
    NORMAL = "normal"
    LOW = "low"
    HIGH = "high"
    CRITICAL = "critical"


# Sort rank, lowest first.
PRIORITY_RANK: dict[Priority, int] = {
    Priority.LOW: 0,
    Priority.NORMAL: 1,
    Priority.HIGH: 2,
    Priority.CRITICAL: 3,
}

TERMINAL_STATUSES: frozenset[TaskStatus] = frozenset(
    {TaskStatus.COMPLETED, TaskStatus.CANCELLED}
)

TASK_TRANSITIONS: dict[TaskStatus, frozenset[TaskStatus]] = {
    TaskStatus.PENDING: frozenset(
        {TaskStatus.IN_PROGRESS, TaskStatus.CANCELLED, TaskStatus.BLOCKED}
    ),
    TaskStatus.IN_PROGRESS: frozenset(
        {TaskStatus.PENDING, TaskStatus.COMPLETED, TaskStatus.CANCELLED, TaskStatus.BLOCKED}
    ),
    TaskStatus.BLOCKED: frozenset(
        {TaskStatus.PENDING, TaskStatus.IN_PROGRESS, TaskStatus.CANCELLED}
    ),
    TaskStatus.COMPLETED: frozenset(),
    TaskStatus.CANCELLED: frozenset(),
}


def is_natural_transition(current: TaskStatus, target: TaskStatus) -> bool:
    """True when *current* → *target* follows the normal task flow."""
    return current == target or target in TASK_TRANSITIONS[current]


def transition_warning(current: TaskStatus, target: TaskStatus) -> str | None:
    """Describe an explicit out-of-flow status change, or None if it is routine."""
    if is_natural_transition(current, target):
        return None
    if current in TERMINAL_STATUSES:
        return f"Reopened {current.value} task as {target.value}"
    return f"Unusual status change: {current.value} -> {target.value}"
