"""
statusflow_engines.transition_resolver -- Legal next steps from a status.

Responsibility:
    Given a workflow, the current status of an entity, the known statuses
    and a task repository, list every outgoing transition whose destination
    belongs to the workflow, annotated with the required work still blocking
    it.

Architecture position:
    Engines -- pure calculation layer.  Reads tasks only through the
    injected ``TaskRepository``.

Invariants enforced:
    - No workflow means no options, never an error.
    - Transitions whose destination is outside the workflow's status set are
      skipped.  The skip is logged at DEBUG as ``dangling_transition_skipped``
      and reported by ``graph_validation.diagnose_workflow``.
    - Option order follows stored transition order.

Failure modes:
    None.  A destination missing from ``statuses`` yields ``to_status=None``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping

from statusflow_engines.task_gate import TaskRepository, required_incomplete_tasks
from statusflow_engines.tracer import traced_engine
from statusflow_kernel.domain.dtos import (
    NextTransitionOption,
    ResolutionStatus,
    TransitionRequirements,
    TransitionResolution,
)
from statusflow_kernel.domain.workflow import Status, Transition, Workflow
from statusflow_kernel.logging_config import get_logger

logger = get_logger("engines.transition_resolver")


@traced_engine(
    "transition_resolver", "1.0",
    fingerprint_fields=("workflow", "current_status_id"),
)
def get_valid_next_transitions(
    workflow: Workflow | None,
    current_status_id: str,
    statuses: Iterable[Status],
    tasks: TaskRepository,
) -> list[NextTransitionOption]:
    """Options available from ``current_status_id``.

    Each option carries its destination ``Status`` (or None when unknown)
    and the required, incomplete tasks that block it.
    """
    if workflow is None:
        return []

    members = workflow.status_set
    by_id = {s.id: s for s in statuses}
    options: list[NextTransitionOption] = []

    for transition in workflow.outgoing(current_status_id):
        if transition.to_status_id not in members:
            logger.debug(
                "dangling_transition_skipped",
                extra={
                    "workflow_id": workflow.id,
                    "transition_id": transition.id,
                    "to_status_id": transition.to_status_id,
                },
            )
            continue

        incomplete = required_incomplete_tasks(tasks, transition.id)
        options.append(NextTransitionOption(
            transition=transition,
            to_status=by_id.get(transition.to_status_id),
            incomplete_tasks=incomplete,
            blocked_by_tasks=bool(incomplete),
        ))

    return options


def resolve_next_transitions(
    workflow: Workflow | None,
    current_status_id: str,
    statuses: Iterable[Status],
    tasks: TaskRepository,
) -> TransitionResolution:
    """Same options as ``get_valid_next_transitions``, tagged with why.

    NO_WORKFLOW when there is no workflow, TERMINAL when the workflow has no
    usable outgoing edge from the current status, AVAILABLE otherwise.
    """
    if workflow is None:
        return TransitionResolution(
            status=ResolutionStatus.NO_WORKFLOW,
            current_status_id=current_status_id,
        )

    options = get_valid_next_transitions(workflow, current_status_id, statuses, tasks)
    return TransitionResolution(
        status=ResolutionStatus.AVAILABLE if options else ResolutionStatus.TERMINAL,
        current_status_id=current_status_id,
        options=tuple(options),
    )


def describe_transition_requirements(
    transition: Transition,
    id_to_user_name: Mapping[str, str] | Callable[[str], str | None] | None = None,
) -> TransitionRequirements:
    """Display-ready approval requirements.

    ``id_to_user_name`` may be a mapping or a callable; user ids it cannot
    name are shown raw.
    """
    if id_to_user_name is None:
        names = list(transition.approver_user_ids)
    elif callable(id_to_user_name):
        names = [id_to_user_name(uid) or uid for uid in transition.approver_user_ids]
    else:
        names = [id_to_user_name.get(uid, uid) for uid in transition.approver_user_ids]

    return TransitionRequirements(
        requires_approval=transition.requires_approval,
        approver_roles=tuple(transition.approver_roles),
        approver_users=tuple(names),
    )
