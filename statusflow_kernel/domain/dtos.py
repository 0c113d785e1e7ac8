"""
Result DTOs for the workflow engines.

Pure, immutable records returned by the validator, resolver, permission
evaluator and executor.  Nothing here raises: failures are data.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from statusflow_kernel.domain.project import Project, StatusHistoryEntry
from statusflow_kernel.domain.task import Task
from statusflow_kernel.domain.workflow import Status, Transition


# =========================================================================
# Validation
# =========================================================================


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a proposed transition change.

    ``valid`` is True exactly when ``errors`` is empty.  Errors keep the
    order in which the checks ran.
    """

    errors: tuple[str, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.errors

    @classmethod
    def success(cls) -> ValidationResult:
        return cls(errors=())


class DiagnosticSeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class DiagnosticIssue:
    """One data-integrity finding about a stored workflow."""

    code: str
    message: str
    severity: DiagnosticSeverity = DiagnosticSeverity.ERROR
    transition_id: str | None = None
    status_id: str | None = None
    task_id: str | None = None


@dataclass(frozen=True)
class WorkflowDiagnostics:
    """All findings of a diagnostics pass over one workflow."""

    workflow_id: str
    issues: tuple[DiagnosticIssue, ...] = ()

    @property
    def errors(self) -> tuple[DiagnosticIssue, ...]:
        return tuple(i for i in self.issues if i.severity == DiagnosticSeverity.ERROR)

    @property
    def warnings(self) -> tuple[DiagnosticIssue, ...]:
        return tuple(i for i in self.issues if i.severity == DiagnosticSeverity.WARNING)

    @property
    def is_healthy(self) -> bool:
        return not self.errors

    def codes(self) -> tuple[str, ...]:
        return tuple(i.code for i in self.issues)


# =========================================================================
# Resolution
# =========================================================================


@dataclass(frozen=True)
class NextTransitionOption:
    """A legal next step from the current status.

    ``incomplete_tasks`` lists only required, incomplete tasks; when it is
    non-empty the option is blocked.  ``to_status`` is None when the
    destination status could not be found in the supplied status list.
    """

    transition: Transition
    to_status: Status | None
    incomplete_tasks: tuple[Task, ...] = ()
    blocked_by_tasks: bool = False


class ResolutionStatus(str, Enum):
    """Why a resolution produced the options it did."""

    NO_WORKFLOW = "no_workflow"
    TERMINAL = "terminal"
    AVAILABLE = "available"


@dataclass(frozen=True)
class TransitionResolution:
    """Options plus the distinction between "no workflow" and "end of workflow"."""

    status: ResolutionStatus
    current_status_id: str
    options: tuple[NextTransitionOption, ...] = ()

    @property
    def is_terminal(self) -> bool:
        return self.status == ResolutionStatus.TERMINAL

    def option_for(self, transition_id: str) -> NextTransitionOption | None:
        for option in self.options:
            if option.transition.id == transition_id:
                return option
        return None


@dataclass(frozen=True)
class TransitionRequirements:
    """Display-ready approval metadata for one transition."""

    requires_approval: bool
    approver_roles: tuple[str, ...] = ()
    approver_users: tuple[str, ...] = ()


# =========================================================================
# Permission
# =========================================================================


@dataclass(frozen=True)
class PermissionDecision:
    """Whether a user may execute a transition now; ``reason`` when denied."""

    allowed: bool
    reason: str | None = None


# =========================================================================
# Execution
# =========================================================================


@dataclass(frozen=True)
class AppliedTransition:
    """The new project state together with the audit entry that explains it."""

    project: Project
    history_entry: StatusHistoryEntry


@dataclass(frozen=True)
class TransitionResult:
    """Result of executing a workflow transition through the executor."""

    success: bool
    project: Project | None = None
    history_entry: StatusHistoryEntry | None = None
    outcome: str = ""
    reason: str = ""
    blocked_task_ids: tuple[str, ...] = ()
