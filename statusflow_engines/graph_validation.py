"""
statusflow_engines.graph_validation -- Structural validation of workflow graphs.

Responsibility:
    Decide whether a proposed transition set is structurally sound before a
    caller persists an add or edit: no duplicate edges, no directed cycle,
    a start and an end status, and approvers on approval-gated edges.
    Also provides a diagnostics pass over stored workflows that reports
    data-integrity problems without changing resolver behavior.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import statusflow_kernel/domain types.

Invariants enforced:
    - Totality: every function returns a result for any well-typed input,
      including empty status lists and empty transition lists.  Violations
      are reported as messages, never raised.
    - Whole-graph cycle check: the cycle search runs over the proposed full
      transition set, because one new edge can close a cycle spanning many
      existing edges.
    - Check order: duplicate edge, cycle, start/end, approvers.  All checks
      run and every violation is collected.

Failure modes:
    None.  The validator is never invoked implicitly by the resolver or the
    permission evaluator; those assume the stored workflow already passed.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from enum import Enum

from statusflow_engines.tracer import traced_engine
from statusflow_kernel.domain.dtos import (
    DiagnosticIssue,
    DiagnosticSeverity,
    ValidationResult,
    WorkflowDiagnostics,
)
from statusflow_kernel.domain.task import Task
from statusflow_kernel.domain.workflow import Transition, Workflow

DUPLICATE_EDGE_MESSAGE = "A transition with the same From → To already exists"
CYCLE_MESSAGE = "This change would create a circular dependency"
START_END_MESSAGE = "Workflow must contain at least one start and one end status"
APPROVERS_MESSAGE = "Approval required: select at least one approver role or user"


class NodeState(Enum):
    """Depth-first search marking."""

    UNVISITED = 0
    IN_PROGRESS = 1
    DONE = 2


def _adjacency(
    status_ids: Iterable[str],
    transitions: Iterable[Transition],
) -> dict[str, list[str]]:
    """status id -> neighbor ids, in transition order.

    Endpoints outside ``status_ids`` still become nodes so that stale edges
    cannot hide a cycle.
    """
    graph: dict[str, list[str]] = {sid: [] for sid in status_ids}
    for t in transitions:
        graph.setdefault(t.from_status_id, []).append(t.to_status_id)
        graph.setdefault(t.to_status_id, [])
    return graph


def has_cycle(status_ids: Sequence[str], transitions: Iterable[Transition]) -> bool:
    """True when the transition graph contains any directed cycle.

    Iterative depth-first search with an explicit stack.  Reaching a node
    that is still IN_PROGRESS is a back edge, which means a cycle.  A self
    loop is the shortest such cycle.
    """
    graph = _adjacency(status_ids, transitions)
    state = {node: NodeState.UNVISITED for node in graph}

    for root in graph:
        if state[root] is not NodeState.UNVISITED:
            continue
        state[root] = NodeState.IN_PROGRESS
        stack = [(root, iter(graph[root]))]
        while stack:
            node, neighbors = stack[-1]
            descended = False
            for nxt in neighbors:
                if state[nxt] is NodeState.IN_PROGRESS:
                    return True
                if state[nxt] is NodeState.UNVISITED:
                    state[nxt] = NodeState.IN_PROGRESS
                    stack.append((nxt, iter(graph[nxt])))
                    descended = True
                    break
            if not descended:
                state[node] = NodeState.DONE
                stack.pop()
    return False


def has_duplicate_edge(
    transitions: Iterable[Transition],
    from_status_id: str,
    to_status_id: str,
    ignore_id: str | None = None,
) -> bool:
    """True when a transition other than ``ignore_id`` already has this edge."""
    return any(
        t.from_status_id == from_status_id
        and t.to_status_id == to_status_id
        and t.id != ignore_id
        for t in transitions
    )


def _without_candidate(
    proposed_transitions: Sequence[Transition],
    candidate: Transition,
) -> list[Transition]:
    """The proposed list minus one occurrence of the candidate.

    Only the candidate's own entry is dropped.  An existing transition that
    happens to share its id still counts toward the duplicate-edge check.
    """
    others = list(proposed_transitions)
    for index, t in enumerate(others):
        if t is candidate:
            del others[index]
            return others
    for index, t in enumerate(others):
        if t == candidate:
            del others[index]
            return others
    return others


def has_start_and_end_nodes(
    status_ids: Sequence[str],
    transitions: Sequence[Transition],
) -> bool:
    """Conservative well-formedness check; not a reachability guarantee.

    With at most one status there is nothing to check.  Otherwise some
    status must have in-degree 0 and out-degree > 0 (a start) and some
    status must have out-degree 0 and in-degree > 0 (an end).
    """
    if len(status_ids) <= 1:
        return True
    if not transitions:
        return False

    in_degree: Counter[str] = Counter()
    out_degree: Counter[str] = Counter()
    for t in transitions:
        out_degree[t.from_status_id] += 1
        in_degree[t.to_status_id] += 1

    has_start = any(in_degree[s] == 0 and out_degree[s] > 0 for s in status_ids)
    has_end = any(out_degree[s] == 0 and in_degree[s] > 0 for s in status_ids)
    return has_start and has_end


def approvers_missing(transition: Transition) -> bool:
    """Approval is required but neither a role nor a user may approve."""
    return (
        transition.requires_approval
        and not transition.approver_roles
        and not transition.approver_user_ids
    )


@traced_engine(
    "graph_validation", "1.0",
    fingerprint_fields=("proposed_transitions", "candidate", "editing_id"),
)
def validate_transition_against_workflow(
    workflow: Workflow,
    proposed_transitions: Sequence[Transition],
    candidate: Transition,
    editing_id: str | None = None,
) -> ValidationResult:
    """Validate adding or editing ``candidate`` in ``workflow``.

    Args:
        workflow: The workflow being edited (its ordered status list is used).
        proposed_transitions: The full transition list as it would be saved,
            i.e. existing transitions with the candidate added or substituted.
        candidate: The transition being added or edited.
        editing_id: Id of the transition being replaced, when editing.

    Returns:
        ValidationResult whose ``errors`` lists every violation in check order.
    """
    errors: list[str] = []
    statuses = workflow.statuses

    others = _without_candidate(proposed_transitions, candidate)
    if has_duplicate_edge(others, candidate.from_status_id, candidate.to_status_id, editing_id):
        errors.append(DUPLICATE_EDGE_MESSAGE)

    if has_cycle(statuses, proposed_transitions):
        errors.append(CYCLE_MESSAGE)

    if not has_start_and_end_nodes(statuses, proposed_transitions):
        errors.append(START_END_MESSAGE)

    if approvers_missing(candidate):
        errors.append(APPROVERS_MESSAGE)

    return ValidationResult(errors=tuple(errors))


def validate_workflow_graph(workflow: Workflow) -> ValidationResult:
    """Run the graph-level checks over a whole stored or proposed workflow.

    Used when a workflow is created or loaded from configuration rather
    than edited one transition at a time.
    """
    errors: list[str] = []
    seen: set[tuple[str, str]] = set()
    for t in workflow.transitions:
        if t.edge in seen:
            errors.append(DUPLICATE_EDGE_MESSAGE)
            break
        seen.add(t.edge)

    if has_cycle(workflow.statuses, workflow.transitions):
        errors.append(CYCLE_MESSAGE)

    if not has_start_and_end_nodes(workflow.statuses, workflow.transitions):
        errors.append(START_END_MESSAGE)

    if any(approvers_missing(t) for t in workflow.transitions):
        errors.append(APPROVERS_MESSAGE)

    return ValidationResult(errors=tuple(errors))


# =========================================================================
# Diagnostics
# =========================================================================


@traced_engine("workflow_diagnostics", "1.0", fingerprint_fields=("workflow",))
def diagnose_workflow(workflow: Workflow) -> WorkflowDiagnostics:
    """Report every data-integrity problem of a stored workflow.

    Distinct from the live resolver, which silently skips dangling
    transitions: this pass surfaces them so an administrator can repair the
    data.  It never raises and never mutates.
    """
    issues: list[DiagnosticIssue] = []
    members = workflow.status_set

    id_counts = Counter(t.id for t in workflow.transitions)
    for transition_id, count in id_counts.items():
        if count > 1:
            issues.append(DiagnosticIssue(
                code="DUPLICATE_TRANSITION_ID",
                message=f"Transition id {transition_id} is used {count} times",
                transition_id=transition_id,
            ))

    seen_edges: set[tuple[str, str]] = set()
    for t in workflow.transitions:
        for endpoint in (t.from_status_id, t.to_status_id):
            if endpoint not in members:
                issues.append(DiagnosticIssue(
                    code="DANGLING_TRANSITION",
                    message=(
                        f"Transition {t.id} references status {endpoint} "
                        "which is not part of the workflow"
                    ),
                    transition_id=t.id,
                    status_id=endpoint,
                ))
        if t.from_status_id == t.to_status_id:
            issues.append(DiagnosticIssue(
                code="SELF_LOOP",
                message=f"Transition {t.id} starts and ends at {t.from_status_id}",
                transition_id=t.id,
                status_id=t.from_status_id,
            ))
        if t.edge in seen_edges:
            issues.append(DiagnosticIssue(
                code="DUPLICATE_EDGE",
                message=f"{DUPLICATE_EDGE_MESSAGE} ({t.from_status_id} → {t.to_status_id})",
                transition_id=t.id,
            ))
        seen_edges.add(t.edge)
        if approvers_missing(t):
            issues.append(DiagnosticIssue(
                code="MISSING_APPROVERS",
                message=f"Transition {t.id}: {APPROVERS_MESSAGE}",
                transition_id=t.id,
            ))

    if has_cycle(workflow.statuses, workflow.transitions):
        issues.append(DiagnosticIssue(code="CYCLE", message=CYCLE_MESSAGE))

    if not has_start_and_end_nodes(workflow.statuses, workflow.transitions):
        issues.append(DiagnosticIssue(code="MISSING_START_OR_END", message=START_END_MESSAGE))

    if len(workflow.statuses) > 1:
        touched = {s for t in workflow.transitions for s in t.edge}
        for status_id in workflow.statuses:
            if status_id not in touched:
                issues.append(DiagnosticIssue(
                    code="ISOLATED_STATUS",
                    message=f"Status {status_id} has no incoming or outgoing transitions",
                    severity=DiagnosticSeverity.WARNING,
                    status_id=status_id,
                ))

    return WorkflowDiagnostics(workflow_id=workflow.id, issues=tuple(issues))


def find_orphan_tasks(
    workflows: Iterable[Workflow],
    tasks: Iterable[Task],
) -> tuple[Task, ...]:
    """Tasks whose ``transition_id`` no longer exists in any workflow.

    Tasks outlive transition edits as long as the id persists; once the id
    disappears the task can never gate anything again.
    """
    known = {t.id for w in workflows for t in w.transitions}
    return tuple(task for task in tasks if task.transition_id not in known)
