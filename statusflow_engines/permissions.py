"""
statusflow_engines.permissions -- Who may execute a transition right now.

Rules, first match wins:

1. Blocked by required tasks: denied for everyone, admins included.
2. Admin: allowed.
3. Transition does not require approval: allowed.
4. User's role is an approver role, or the user is a named approver:
   allowed.  Otherwise denied.

Pure.  Denial is a result, never an exception.
"""

from __future__ import annotations

from statusflow_kernel.domain.dtos import PermissionDecision
from statusflow_kernel.domain.project import User
from statusflow_kernel.domain.workflow import Transition

TASKS_INCOMPLETE_REASON = "Required tasks are incomplete for this transition."
NOT_APPROVER_REASON = (
    "You do not have permission to execute this approval-required transition."
)


def can_user_execute_transition(user: User, transition: Transition) -> bool:
    """Approval-only check.  No admin bypass, no task gating."""
    if not transition.requires_approval:
        return True
    return (
        user.role.value in transition.approver_roles
        or user.id in transition.approver_user_ids
    )


def can_user_transition(
    user: User,
    transition: Transition,
    blocked_by_tasks: bool,
) -> PermissionDecision:
    if blocked_by_tasks:
        return PermissionDecision(allowed=False, reason=TASKS_INCOMPLETE_REASON)

    if user.is_admin:
        return PermissionDecision(allowed=True)

    if can_user_execute_transition(user, transition):
        return PermissionDecision(allowed=True)

    return PermissionDecision(allowed=False, reason=NOT_APPROVER_REASON)
