"""Tests for the frozen workflow value objects."""

from dataclasses import FrozenInstanceError

import pytest

from statusflow_kernel.domain.project import User
from statusflow_kernel.domain.values import UserRole
from statusflow_kernel.domain.workflow import Status, Transition, TransitionDraft, Workflow


class TestWorkflow:

    def test_initial_status_is_first_listed(self, review_workflow):
        assert review_workflow.initial_status_id == "planning"

    def test_empty_workflow_has_no_initial_status(self):
        wf = Workflow(id="wf", name="Empty", entity_type="project")
        assert wf.initial_status_id is None

    def test_outgoing_keeps_stored_order(self):
        wf = Workflow(
            id="wf",
            name="Fan out",
            entity_type="project",
            statuses=("a", "b", "c"),
            transitions=(
                Transition(id="t2", from_status_id="a", to_status_id="c"),
                Transition(id="t1", from_status_id="a", to_status_id="b"),
            ),
        )
        assert [t.id for t in wf.outgoing("a")] == ["t2", "t1"]
        assert wf.outgoing("b") == ()

    def test_get_transition(self, review_workflow):
        assert review_workflow.get_transition("t-plan-review").to_status_id == "review"
        assert review_workflow.get_transition("missing") is None

    def test_frozen(self, review_workflow):
        with pytest.raises(FrozenInstanceError):
            review_workflow.name = "changed"


class TestTransitionDraft:

    def test_to_transition_copies_fields(self):
        draft = TransitionDraft(
            from_status_id="a",
            to_status_id="b",
            requires_approval=True,
            approver_roles=("admin",),
            approver_user_ids=("u-1",),
        )
        t = draft.to_transition("t-new")

        assert t.id == "t-new"
        assert t.edge == ("a", "b")
        assert t.requires_approval
        assert t.approver_roles == ("admin",)
        assert t.approver_user_ids == ("u-1",)


class TestStatusAndUser:

    def test_status_applies_to_entity_type(self):
        status = Status(id="s", name="Draft", entity_types=("project", "campaign"))
        assert status.applies_to("campaign")
        assert not status.applies_to("invoice")

    def test_admin_flag(self):
        assert User(id="u", name="A", role=UserRole.ADMIN).is_admin
        assert not User(id="u", name="B").is_admin

    def test_role_values_are_tags(self):
        assert UserRole("admin") is UserRole.ADMIN
        assert UserRole.USER.value == "user"
