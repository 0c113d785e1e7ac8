"""
Tests for the transition resolver.

Covers:
- Options from the current status, in stored order
- Task gating (required vs optional, complete vs incomplete)
- Silent filtering of destinations outside the workflow
- No workflow / terminal status
- Display-ready approval requirements
"""

from statusflow_engines.task_gate import InMemoryTaskRepository
from statusflow_engines.transition_resolver import (
    describe_transition_requirements,
    get_valid_next_transitions,
    resolve_next_transitions,
)
from statusflow_kernel.domain.dtos import ResolutionStatus
from statusflow_kernel.domain.task import Task
from statusflow_kernel.domain.workflow import Transition, Workflow

NO_TASKS = InMemoryTaskRepository()


class TestGetValidNextTransitions:

    def test_open_transition_from_planning(self, review_workflow, review_statuses):
        options = get_valid_next_transitions(review_workflow, "planning", review_statuses, NO_TASKS)

        assert len(options) == 1
        assert options[0].transition.id == "t-plan-review"
        assert options[0].to_status.name == "Review"
        assert options[0].blocked_by_tasks is False
        assert options[0].incomplete_tasks == ()

    def test_required_task_blocks(self, review_workflow, review_statuses, approval_task):
        tasks = InMemoryTaskRepository([approval_task])

        options = get_valid_next_transitions(review_workflow, "review", review_statuses, tasks)

        assert len(options) == 1
        assert options[0].blocked_by_tasks is True
        assert options[0].incomplete_tasks == (approval_task,)

    def test_optional_task_does_not_block(self, review_workflow, review_statuses):
        optional = Task(
            id="task-opt", name="Photos", transition_id="t-review-approved",
            assigned_user_id="u-1", is_required=False,
        )
        options = get_valid_next_transitions(
            review_workflow, "review", review_statuses, InMemoryTaskRepository([optional]),
        )
        assert options[0].blocked_by_tasks is False

    def test_completed_task_does_not_block(self, review_workflow, review_statuses, approval_task):
        done = Task(
            id=approval_task.id, name=approval_task.name,
            transition_id=approval_task.transition_id,
            assigned_user_id=approval_task.assigned_user_id,
            is_completed=True,
        )
        options = get_valid_next_transitions(
            review_workflow, "review", review_statuses, InMemoryTaskRepository([done]),
        )
        assert options[0].blocked_by_tasks is False

    def test_terminal_status_has_no_options(self, review_workflow, review_statuses):
        assert get_valid_next_transitions(review_workflow, "approved", review_statuses, NO_TASKS) == []

    def test_no_workflow(self, review_statuses):
        assert get_valid_next_transitions(None, "planning", review_statuses, NO_TASKS) == []

    def test_destination_outside_workflow_filtered(self, review_statuses):
        wf = Workflow(
            id="wf", name="Stale", entity_type="project",
            statuses=("planning", "review"),
            transitions=(
                Transition(id="t-ok", from_status_id="planning", to_status_id="review"),
                Transition(id="t-stale", from_status_id="planning", to_status_id="archived"),
            ),
        )
        options = get_valid_next_transitions(wf, "planning", review_statuses, NO_TASKS)

        assert [o.transition.id for o in options] == ["t-ok"]

    def test_unknown_status_record_yields_none(self, review_workflow):
        options = get_valid_next_transitions(review_workflow, "planning", [], NO_TASKS)

        assert options[0].to_status is None

    def test_unknown_current_status_is_terminal(self, review_workflow, review_statuses):
        assert get_valid_next_transitions(review_workflow, "nowhere", review_statuses, NO_TASKS) == []


class TestResolveNextTransitions:

    def test_no_workflow(self, review_statuses):
        resolution = resolve_next_transitions(None, "planning", review_statuses, NO_TASKS)

        assert resolution.status == ResolutionStatus.NO_WORKFLOW
        assert resolution.options == ()

    def test_terminal(self, review_workflow, review_statuses):
        resolution = resolve_next_transitions(review_workflow, "approved", review_statuses, NO_TASKS)

        assert resolution.is_terminal
        assert resolution.status == ResolutionStatus.TERMINAL

    def test_available(self, review_workflow, review_statuses):
        resolution = resolve_next_transitions(review_workflow, "planning", review_statuses, NO_TASKS)

        assert resolution.status == ResolutionStatus.AVAILABLE
        assert resolution.option_for("t-plan-review") is not None
        assert resolution.option_for("t-review-approved") is None


class TestDescribeTransitionRequirements:

    def _transition(self) -> Transition:
        return Transition(
            id="t", from_status_id="a", to_status_id="b",
            requires_approval=True,
            approver_roles=("admin",),
            approver_user_ids=("u-1", "u-2"),
        )

    def test_names_from_mapping_with_raw_fallback(self):
        req = describe_transition_requirements(self._transition(), {"u-1": "Ada"})

        assert req.requires_approval
        assert req.approver_roles == ("admin",)
        assert req.approver_users == ("Ada", "u-2")

    def test_names_from_callable(self):
        req = describe_transition_requirements(
            self._transition(), lambda uid: "Pat" if uid == "u-2" else None,
        )
        assert req.approver_users == ("u-1", "Pat")

    def test_without_lookup_ids_are_shown(self):
        req = describe_transition_requirements(self._transition())
        assert req.approver_users == ("u-1", "u-2")
