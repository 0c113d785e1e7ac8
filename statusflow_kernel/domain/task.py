"""
Task domain type and its completion lifecycle.

A task is a unit of required or optional work gating one transition.
Completion flips ``is_completed`` and stamps ``completed_at`` /
``completed_by`` together; undo clears all three together.  Both
operations return a new frozen ``Task`` -- callers persist the result.

Undo is unrestricted here.  Who may undo a completion is a caller policy.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime

from statusflow_kernel.domain.values import TaskId, TransitionId, UserId


@dataclass(frozen=True)
class Task:
    """A unit of work gating a specific transition.

    ``description`` holds the task's goal.  Exactly one assignee; there is
    no role-based assignment.
    """

    id: TaskId
    name: str
    transition_id: TransitionId
    assigned_user_id: UserId
    description: str = ""
    deadline: date | None = None
    is_required: bool = True
    is_completed: bool = False
    completed_at: datetime | None = None
    completed_by: UserId | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_blocking(self) -> bool:
        """Required and not yet completed."""
        return self.is_required and not self.is_completed


def mark_task_completed(task: Task, actor_id: UserId, at: datetime) -> Task:
    """Return ``task`` completed by ``actor_id`` at ``at``.

    Any earlier completion metadata is replaced, so complete -> undo ->
    complete leaves only the latest stamps.
    """
    return replace(
        task,
        is_completed=True,
        completed_at=at,
        completed_by=actor_id,
        updated_at=at,
    )


def mark_task_incomplete(task: Task, at: datetime) -> Task:
    """Return ``task`` reopened, with both completion stamps cleared."""
    return replace(
        task,
        is_completed=False,
        completed_at=None,
        completed_by=None,
        updated_at=at,
    )
