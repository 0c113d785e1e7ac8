"""
Pure domain layer.

This module contains pure data transfer objects and domain logic
with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O

All domain objects are immutable and deterministic.  Time enters only
through explicit parameters or an injected ``Clock``.
"""

from statusflow_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from statusflow_kernel.domain.dtos import (
    AppliedTransition,
    DiagnosticIssue,
    DiagnosticSeverity,
    NextTransitionOption,
    PermissionDecision,
    ResolutionStatus,
    TransitionRequirements,
    TransitionResolution,
    TransitionResult,
    ValidationResult,
    WorkflowDiagnostics,
)
from statusflow_kernel.domain.project import Project, StatusHistoryEntry, User
from statusflow_kernel.domain.task import Task, mark_task_completed, mark_task_incomplete
from statusflow_kernel.domain.values import (
    HistoryEntryId,
    ProjectId,
    StatusId,
    TaskId,
    TransitionId,
    UserId,
    UserRole,
    WorkflowId,
)
from statusflow_kernel.domain.workflow import Status, Transition, TransitionDraft, Workflow

__all__ = [
    # Identifiers
    "HistoryEntryId",
    "ProjectId",
    "StatusId",
    "TaskId",
    "TransitionId",
    "UserId",
    "UserRole",
    "WorkflowId",
    # Entities
    "Status",
    "Transition",
    "TransitionDraft",
    "Workflow",
    "Task",
    "mark_task_completed",
    "mark_task_incomplete",
    "User",
    "Project",
    "StatusHistoryEntry",
    # Results
    "AppliedTransition",
    "DiagnosticIssue",
    "DiagnosticSeverity",
    "NextTransitionOption",
    "PermissionDecision",
    "ResolutionStatus",
    "TransitionRequirements",
    "TransitionResolution",
    "TransitionResult",
    "ValidationResult",
    "WorkflowDiagnostics",
    # Clock
    "Clock",
    "SystemClock",
    "DeterministicClock",
]
