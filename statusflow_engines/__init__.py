"""
Module: statusflow_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    workflow engines: graph validation, transition resolution, task gating,
    permission evaluation and transition application.  This is the
    canonical import surface for statusflow_services and the kernel
    services.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import statusflow_kernel/domain (and sibling engine modules).
    MUST NOT import statusflow_services or the kernel's db/models layers.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()``.  Timestamps arrive as
      explicit parameters; callers supply the current time from a Clock.
    - Totality: validation, resolution and permission outcomes are returned
      as values.  Only ``apply_transition`` raises, on a caller contract
      violation (TransitionMismatchError).
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    The validator, the diagnostics pass and the resolver are traced via
    ``@traced_engine`` (see ``statusflow_engines.tracer``), emitting
    STATUSFLOW_ENGINE_TRACE records with engine name, version, input
    fingerprint and duration.

Usage:
    from statusflow_engines import (
        validate_transition_against_workflow,
        get_valid_next_transitions,
        can_user_transition,
        apply_transition,
    )
"""

from statusflow_engines.graph_validation import (
    APPROVERS_MESSAGE,
    CYCLE_MESSAGE,
    DUPLICATE_EDGE_MESSAGE,
    START_END_MESSAGE,
    NodeState,
    approvers_missing,
    diagnose_workflow,
    find_orphan_tasks,
    has_cycle,
    has_duplicate_edge,
    has_start_and_end_nodes,
    validate_transition_against_workflow,
    validate_workflow_graph,
)
from statusflow_engines.permissions import (
    NOT_APPROVER_REASON,
    TASKS_INCOMPLETE_REASON,
    can_user_execute_transition,
    can_user_transition,
)
from statusflow_engines.task_gate import (
    InMemoryTaskRepository,
    TaskRepository,
    is_blocked,
    required_incomplete_tasks,
)
from statusflow_engines.tracer import traced_engine
from statusflow_engines.transition_apply import apply_transition
from statusflow_engines.transition_resolver import (
    describe_transition_requirements,
    get_valid_next_transitions,
    resolve_next_transitions,
)

__all__ = [
    # Graph validation
    "APPROVERS_MESSAGE",
    "CYCLE_MESSAGE",
    "DUPLICATE_EDGE_MESSAGE",
    "START_END_MESSAGE",
    "NodeState",
    "approvers_missing",
    "diagnose_workflow",
    "find_orphan_tasks",
    "has_cycle",
    "has_duplicate_edge",
    "has_start_and_end_nodes",
    "validate_transition_against_workflow",
    "validate_workflow_graph",
    # Task gate
    "InMemoryTaskRepository",
    "TaskRepository",
    "is_blocked",
    "required_incomplete_tasks",
    # Resolver
    "describe_transition_requirements",
    "get_valid_next_transitions",
    "resolve_next_transitions",
    # Permissions
    "NOT_APPROVER_REASON",
    "TASKS_INCOMPLETE_REASON",
    "can_user_execute_transition",
    "can_user_transition",
    # Apply
    "apply_transition",
    # Tracing
    "traced_engine",
]
