"""
statusflow_engines.transition_apply -- Move a project along one transition.

Responsibility:
    Produce the new project state and its audit entry from one permitted
    transition, as a single value, so the current-status pointer and the
    history log cannot diverge.

Architecture position:
    Engines -- pure.  Persistence and the permission decision belong to the
    caller (``statusflow_services.WorkflowExecutor``).

Invariants enforced:
    - The transition must start at the project's current status.
    - The new history entry is appended; earlier entries are untouched.
    - ``approved_by`` is the actor exactly when the transition requires
      approval.
    - ``version`` grows by one.

Failure modes:
    - TransitionMismatchError: transition does not leave the current status.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime
from uuid import uuid4

from statusflow_kernel.domain.project import Project, StatusHistoryEntry, User
from statusflow_kernel.domain.values import HistoryEntryId, TaskId
from statusflow_kernel.domain.workflow import Transition
from statusflow_kernel.exceptions import TransitionMismatchError


def apply_transition(
    project: Project,
    transition: Transition,
    actor: User,
    at: datetime,
    *,
    comment: str | None = None,
    tasks_completed: Iterable[TaskId] = (),
    entry_id: HistoryEntryId | None = None,
) -> tuple[Project, StatusHistoryEntry]:
    """Apply ``transition`` to ``project`` on behalf of ``actor`` at ``at``.

    Args:
        project: Current project state.
        transition: A transition the caller has already resolved and
            permitted.
        actor: The executing user.
        at: Timestamp for the entry and ``last_edited_at``.
        comment: Optional free text recorded on the entry.
        tasks_completed: Task ids to record as completed for this step.
        entry_id: History entry id; a random UUID when omitted.

    Returns:
        ``(new_project, history_entry)``.
    """
    if transition.from_status_id != project.current_status_id:
        raise TransitionMismatchError(
            project_id=project.id,
            transition_id=transition.id,
            current_status_id=project.current_status_id,
        )

    entry = StatusHistoryEntry(
        id=entry_id or HistoryEntryId(str(uuid4())),
        from_status_id=project.current_status_id,
        to_status_id=transition.to_status_id,
        user_id=actor.id,
        timestamp=at,
        comment=comment,
        tasks_completed=tuple(tasks_completed),
        approved_by=actor.id if transition.requires_approval else None,
    )

    new_project = replace(
        project,
        current_status_id=transition.to_status_id,
        status_history=project.status_history + (entry,),
        last_edited_at=at,
        version=project.version + 1,
    )
    return new_project, entry
