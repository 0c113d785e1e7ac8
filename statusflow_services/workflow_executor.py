"""
statusflow_services.workflow_executor -- Workflow transition execution.

Responsibility:
    Executes a project's status change end to end: resolve the legal next
    transitions, evaluate the actor's permission, apply the transition and
    persist the new state with its history entry.  Thin coordinator --
    delegates resolution to the transition resolver, gating to the task
    gate, authorization to the permission evaluator, state change to
    apply_transition and persistence to ProjectService.

Architecture position:
    Services layer.  May import from statusflow_engines/ (pure engines)
    and statusflow_kernel/ (domain, selectors, services).

Invariants enforced:
    - Resolve and apply read one snapshot: every read and the final write
      go through the caller's session and transaction.
    - A transition is applied only if it is among the resolved options and
      the permission evaluator allows it.
    - Every outcome emits one ``workflow_transition`` trace record.

Failure modes:
    - ProjectNotFoundError / UserNotFoundError for unknown ids.
    - OptimisticLockError when ``expected_version`` is stale or a
      concurrent writer wins the flush.
    - With ``raise_on_failure=True``: TransitionNotAvailableError and
      TransitionNotPermittedError instead of unsuccessful results.
"""

from __future__ import annotations

import time
from datetime import UTC, datetime
from typing import Any, Callable

from sqlalchemy.orm import Session

from statusflow_engines.permissions import can_user_transition
from statusflow_engines.transition_apply import apply_transition
from statusflow_engines.transition_resolver import (
    describe_transition_requirements,
    resolve_next_transitions,
)
from statusflow_kernel.domain.clock import Clock, SystemClock
from statusflow_kernel.domain.dtos import (
    TransitionRequirements,
    TransitionResolution,
    TransitionResult,
)
from statusflow_kernel.domain.project import Project
from statusflow_kernel.exceptions import (
    OptimisticLockError,
    ProjectNotFoundError,
    TransitionNotAvailableError,
    TransitionNotFoundError,
    TransitionNotPermittedError,
    UserNotFoundError,
)
from statusflow_kernel.logging_config import LogContext, get_logger
from statusflow_kernel.selectors.project_selector import ProjectSelector
from statusflow_kernel.selectors.status_selector import StatusSelector
from statusflow_kernel.selectors.task_selector import TaskSelector
from statusflow_kernel.selectors.user_selector import UserSelector
from statusflow_kernel.selectors.workflow_selector import WorkflowSelector
from statusflow_kernel.services.project_service import ProjectService

logger = get_logger("services.workflow_executor")

# Trace message and outcome codes for structured logging and traceability
TRACE_TYPE_WORKFLOW_TRANSITION = "WORKFLOW_TRANSITION"
OUTCOME_SUCCESS = "success"
OUTCOME_NO_TRANSITION = "no_transition"
OUTCOME_BLOCKED = "blocked"
OUTCOME_NOT_PERMITTED = "not_permitted"
OUTCOME_VERSION_CONFLICT = "version_conflict"


def _emit_workflow_trace(
    project: Project,
    transition_id: str,
    actor_id: str,
    outcome: str,
    reason: str,
    duration_ms: float,
    to_status_id: str | None = None,
    outcome_sink: Callable[[dict], None] | None = None,
) -> None:
    """Emit a structured workflow transition record for traceability and lookback."""
    record: dict[str, Any] = {
        "trace_type": TRACE_TYPE_WORKFLOW_TRANSITION,
        "ts": datetime.now(UTC).isoformat(),
        "workflow_id": project.workflow_id,
        "project_id": project.id,
        "transition_id": transition_id,
        "actor_id": actor_id,
        "from_status_id": project.current_status_id,
        "outcome": outcome,
        "reason": reason,
        "duration_ms": round(duration_ms, 3),
        "version": project.version,
    }
    if to_status_id is not None:
        record["to_status_id"] = to_status_id
    record.update(LogContext.get_all())
    # LogRecord reserves "message"; use log msg as first arg, not in extra
    extra_for_log = {k: v for k, v in record.items() if k != "message"}
    logger.info("workflow_transition", extra=extra_for_log)
    record["message"] = "workflow_transition"
    if outcome_sink is not None:
        outcome_sink(record)


class WorkflowExecutor:
    """Executes project status transitions.

    Thin coordinator -- owns no rules of its own.  All reads and the final
    write use the session passed in; the caller commits.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        outcome_sink: Callable[[dict], None] | None = None,
    ) -> None:
        self._session = session
        self._clock = clock or SystemClock()
        self._outcome_sink = outcome_sink
        self._projects = ProjectSelector(session)
        self._workflows = WorkflowSelector(session)
        self._statuses = StatusSelector(session)
        self._tasks = TaskSelector(session)
        self._users = UserSelector(session)
        self._project_service = ProjectService(session, self._clock)

    def _get_project(self, project_id: str) -> Project:
        project = self._projects.get(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    def available_transitions(self, project_id: str) -> TransitionResolution:
        """Resolve the project's legal next transitions, with task gating."""
        project = self._get_project(project_id)
        return resolve_next_transitions(
            self._workflows.get(project.workflow_id),
            project.current_status_id,
            self._statuses.list_all(),
            self._tasks,
        )

    def transition_requirements(self, transition_id: str) -> TransitionRequirements:
        """Approval requirements of a transition, with approver names resolved."""
        transition = self._workflows.get_transition(transition_id)
        if transition is None:
            raise TransitionNotFoundError(transition_id)
        return describe_transition_requirements(transition, self._users.name_lookup())

    def execute_transition(
        self,
        project_id: str,
        transition_id: str,
        actor_id: str,
        *,
        comment: str | None = None,
        expected_version: int | None = None,
        raise_on_failure: bool = False,
    ) -> TransitionResult:
        """Execute ``transition_id`` on ``project_id`` on behalf of ``actor_id``.

        Returns a successful TransitionResult with the new project state and
        its history entry, or an unsuccessful one whose ``outcome`` is
        ``no_transition``, ``blocked`` or ``not_permitted`` and whose
        ``reason`` explains it.  With ``raise_on_failure=True`` those
        outcomes raise instead.

        Raises:
            ProjectNotFoundError, UserNotFoundError: Unknown ids.
            OptimisticLockError: ``expected_version`` differs from the stored
                version, or a concurrent writer moved the project first.
        """
        t0 = time.monotonic()
        project = self._get_project(project_id)

        with LogContext.bind(
            actor_id=actor_id,
            project_id=project_id,
            workflow_id=project.workflow_id,
        ):
            actor = self._users.get(actor_id)
            if actor is None:
                raise UserNotFoundError(actor_id)

            # 1. Stale caller view
            if expected_version is not None and expected_version != project.version:
                self._trace(project, transition_id, actor_id, OUTCOME_VERSION_CONFLICT,
                            f"Expected version {expected_version}, found {project.version}", t0)
                raise OptimisticLockError(
                    "Project", project_id,
                    expected_version=expected_version,
                    actual_version=project.version,
                )

            # 2. Resolve legal options from the current status
            resolution = resolve_next_transitions(
                self._workflows.get(project.workflow_id),
                project.current_status_id,
                self._statuses.list_all(),
                self._tasks,
            )
            option = resolution.option_for(transition_id)
            if option is None:
                reason = (
                    f"Transition {transition_id} is not available from status "
                    f"{project.current_status_id}"
                )
                self._trace(project, transition_id, actor_id, OUTCOME_NO_TRANSITION, reason, t0)
                if raise_on_failure:
                    raise TransitionNotAvailableError(project_id, transition_id)
                return TransitionResult(
                    success=False,
                    project=project,
                    outcome=OUTCOME_NO_TRANSITION,
                    reason=reason,
                )

            # 3. Task gate and permission (delegated to pure evaluator)
            decision = can_user_transition(actor, option.transition, option.blocked_by_tasks)
            if not decision.allowed:
                outcome = OUTCOME_BLOCKED if option.blocked_by_tasks else OUTCOME_NOT_PERMITTED
                reason = decision.reason or ""
                self._trace(project, transition_id, actor_id, outcome, reason, t0,
                            to_status_id=option.transition.to_status_id)
                if raise_on_failure:
                    raise TransitionNotPermittedError(project_id, transition_id, actor_id, reason)
                return TransitionResult(
                    success=False,
                    project=project,
                    outcome=outcome,
                    reason=reason,
                    blocked_task_ids=tuple(t.id for t in option.incomplete_tasks),
                )

            # 4. Apply (pure) and persist
            new_project, entry = apply_transition(
                project,
                option.transition,
                actor,
                self._clock.now(),
                comment=comment,
                tasks_completed=self._tasks.completed_ids_for_transition(transition_id),
            )
            try:
                saved = self._project_service.record_transition(project, new_project, entry)
            except OptimisticLockError as exc:
                self._trace(project, transition_id, actor_id, OUTCOME_VERSION_CONFLICT,
                            str(exc), t0, to_status_id=option.transition.to_status_id)
                raise

            self._trace(project, transition_id, actor_id, OUTCOME_SUCCESS,
                        "Transition applied", t0, to_status_id=option.transition.to_status_id)
            return TransitionResult(
                success=True,
                project=saved,
                history_entry=entry,
                outcome=OUTCOME_SUCCESS,
            )

    def _trace(
        self,
        project: Project,
        transition_id: str,
        actor_id: str,
        outcome: str,
        reason: str,
        t0: float,
        to_status_id: str | None = None,
    ) -> None:
        _emit_workflow_trace(
            project=project,
            transition_id=transition_id,
            actor_id=actor_id,
            outcome=outcome,
            reason=reason,
            duration_ms=(time.monotonic() - t0) * 1000,
            to_status_id=to_status_id,
            outcome_sink=self._outcome_sink,
        )
