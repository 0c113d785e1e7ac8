"""
Project, user and status-history domain types.

``Project`` is any tracked entity that moves through a workflow.  The
engines only read ``current_status_id`` and ``workflow_id``; the history
log is append-only and is extended exclusively through
``statusflow_engines.transition_apply.apply_transition`` so that the
current-status pointer and its audit entry never diverge.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from statusflow_kernel.domain.values import (
    HistoryEntryId,
    ProjectId,
    StatusId,
    TaskId,
    UserId,
    UserRole,
    WorkflowId,
)


@dataclass(frozen=True)
class User:
    """An application user.  Authentication is out of scope."""

    id: UserId
    name: str
    email: str = ""
    role: UserRole = UserRole.USER

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


@dataclass(frozen=True)
class StatusHistoryEntry:
    """One executed status change.  Immutable once recorded.

    ``from_status_id`` is None only for the creation entry.
    ``approved_by`` is set when the executed transition required approval.
    """

    id: HistoryEntryId
    to_status_id: StatusId
    user_id: UserId
    timestamp: datetime
    from_status_id: StatusId | None = None
    comment: str | None = None
    tasks_completed: tuple[TaskId, ...] = ()
    approved_by: UserId | None = None


@dataclass(frozen=True)
class Project:
    """A tracked entity with a live state pointer into its workflow.

    ``version`` increases by one on every applied transition and backs the
    optimistic concurrency check at the persistence boundary.
    """

    id: ProjectId
    title: str
    current_status_id: StatusId
    workflow_id: WorkflowId
    creator_id: UserId
    description: str = ""
    status_history: tuple[StatusHistoryEntry, ...] = ()
    created_at: datetime | None = None
    last_edited_at: datetime | None = None
    version: int = 1
