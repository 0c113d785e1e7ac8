"""
Tests for the permission evaluator.

Precedence: task gate, then admin, then open transition, then approver
role or user.
"""

import pytest

from statusflow_engines.permissions import (
    NOT_APPROVER_REASON,
    TASKS_INCOMPLETE_REASON,
    can_user_execute_transition,
    can_user_transition,
)
from statusflow_kernel.domain.project import User
from statusflow_kernel.domain.values import UserRole
from statusflow_kernel.domain.workflow import Transition

OPEN = Transition(id="t-open", from_status_id="a", to_status_id="b")
ADMIN_ONLY = Transition(
    id="t-admin", from_status_id="a", to_status_id="b",
    requires_approval=True, approver_roles=("admin",),
)
NAMED_APPROVER = Transition(
    id="t-named", from_status_id="a", to_status_id="b",
    requires_approval=True, approver_user_ids=("u-plain",),
)


class TestCanUserTransition:

    def test_task_gate_overrides_admin(self, admin_user):
        decision = can_user_transition(admin_user, ADMIN_ONLY, blocked_by_tasks=True)

        assert decision.allowed is False
        assert decision.reason == TASKS_INCOMPLETE_REASON

    def test_task_gate_applies_to_open_transitions(self, plain_user):
        decision = can_user_transition(plain_user, OPEN, blocked_by_tasks=True)
        assert decision.reason == TASKS_INCOMPLETE_REASON

    def test_admin_bypasses_approval(self, admin_user):
        decision = can_user_transition(admin_user, NAMED_APPROVER, blocked_by_tasks=False)

        assert decision.allowed is True
        assert decision.reason is None

    def test_open_transition_allowed(self, plain_user):
        assert can_user_transition(plain_user, OPEN, blocked_by_tasks=False).allowed

    def test_non_approver_denied(self, plain_user):
        decision = can_user_transition(plain_user, ADMIN_ONLY, blocked_by_tasks=False)

        assert decision.allowed is False
        assert decision.reason == NOT_APPROVER_REASON

    def test_named_approver_allowed(self, plain_user):
        assert can_user_transition(plain_user, NAMED_APPROVER, blocked_by_tasks=False).allowed

    def test_role_approver_allowed(self):
        reviewer = Transition(
            id="t", from_status_id="a", to_status_id="b",
            requires_approval=True, approver_roles=("user",),
        )
        user = User(id="u-x", name="X", role=UserRole.USER)
        assert can_user_transition(user, reviewer, blocked_by_tasks=False).allowed


class TestCanUserExecuteTransition:
    """Approval-only check, without admin bypass or task gating."""

    @pytest.mark.parametrize(
        "transition, expected",
        [(OPEN, True), (ADMIN_ONLY, False), (NAMED_APPROVER, True)],
    )
    def test_plain_user(self, plain_user, transition, expected):
        assert can_user_execute_transition(plain_user, transition) is expected

    def test_admin_needs_listing_here(self, admin_user):
        assert can_user_execute_transition(admin_user, ADMIN_ONLY)
        assert not can_user_execute_transition(admin_user, NAMED_APPROVER)
