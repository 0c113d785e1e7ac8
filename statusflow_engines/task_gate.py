"""
statusflow_engines.task_gate -- Required-task gating of transitions.

Responsibility:
    Answer one question for the resolver: which required tasks attached to a
    transition are still incomplete?  A non-empty answer blocks the
    transition.

Architecture position:
    Engines -- pure calculation layer.  Task data arrives through the
    read-only ``TaskRepository`` protocol, so the same gate runs against
    in-memory fixtures and against the database (``TaskSelector``).

Invariants enforced:
    - Optional tasks never block, whatever their completion state.
    - Results keep repository order.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from statusflow_kernel.domain.task import Task


@runtime_checkable
class TaskRepository(Protocol):
    """Read-only task lookup injected into the resolver."""

    def get_incomplete_by_transition_id(self, transition_id: str) -> list[Task]:
        """Incomplete tasks (required or not) attached to ``transition_id``."""
        ...


class InMemoryTaskRepository:
    """TaskRepository over a fixed task list.  Used by tests and callers
    that already hold their tasks in memory."""

    def __init__(self, tasks: Iterable[Task] = ()) -> None:
        self._tasks: tuple[Task, ...] = tuple(tasks)

    @property
    def tasks(self) -> tuple[Task, ...]:
        return self._tasks

    def get_incomplete_by_transition_id(self, transition_id: str) -> list[Task]:
        return [
            t for t in self._tasks
            if t.transition_id == transition_id and not t.is_completed
        ]


def required_incomplete_tasks(tasks: TaskRepository, transition_id: str) -> tuple[Task, ...]:
    """Required, incomplete tasks gating ``transition_id``."""
    return tuple(
        t for t in tasks.get_incomplete_by_transition_id(transition_id)
        if t.is_required
    )


def is_blocked(tasks: TaskRepository, transition_id: str) -> bool:
    return bool(required_incomplete_tasks(tasks, transition_id))
