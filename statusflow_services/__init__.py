"""
statusflow_services -- Package init and public API.

Responsibility:
    Stateful orchestration that composes the pure workflow engines
    (statusflow_engines/) with database sessions.  This is the layer callers
    use to move projects through their workflows.

Architecture position:
    Services -- stateful orchestration over engines + kernel.

    Dependency direction:
        statusflow_services/ -> statusflow_engines/  (allowed)
        statusflow_services/ -> statusflow_kernel/   (allowed)
        statusflow_engines/  -> statusflow_services/ (FORBIDDEN)
        statusflow_kernel/   -> statusflow_services/ (FORBIDDEN)
"""

from statusflow_services.workflow_executor import (
    OUTCOME_BLOCKED,
    OUTCOME_NO_TRANSITION,
    OUTCOME_NOT_PERMITTED,
    OUTCOME_SUCCESS,
    OUTCOME_VERSION_CONFLICT,
    WorkflowExecutor,
)

__all__ = [
    "OUTCOME_BLOCKED",
    "OUTCOME_NO_TRANSITION",
    "OUTCOME_NOT_PERMITTED",
    "OUTCOME_SUCCESS",
    "OUTCOME_VERSION_CONFLICT",
    "WorkflowExecutor",
]
