"""
Tests for TaskService.

Covers:
- Transition reference checked on create and re-point
- Task ids are never reused
- Completion and undo stamps persisted with the clock's time
- complete -> undo -> complete keeps only the latest stamps
"""

from datetime import date

import pytest

from statusflow_kernel.exceptions import (
    DuplicateTaskIdError,
    TaskNotFoundError,
    UnknownTransitionReferenceError,
    UserNotFoundError,
)
from statusflow_kernel.selectors.task_selector import TaskSelector


@pytest.fixture
def signoff(task_service, seeded_users, seeded_workflow):
    return task_service.create_task(
        "Design sign-off",
        "t-review-approved",
        "u-plain",
        description="Customer signs the drawings",
        deadline=date(2024, 2, 20),
        task_id="task-signoff",
    )


class TestCreate:

    def test_create(self, signoff, deterministic_clock):
        assert signoff.transition_id == "t-review-approved"
        assert signoff.is_required
        assert not signoff.is_completed
        assert signoff.deadline == date(2024, 2, 20)
        assert signoff.created_at == deterministic_clock.now()

    def test_unknown_transition_rejected(self, task_service, seeded_users, seeded_workflow):
        with pytest.raises(UnknownTransitionReferenceError) as exc_info:
            task_service.create_task("Ghost", "t-ghost", "u-plain", task_id="task-ghost")

        assert exc_info.value.transition_id == "t-ghost"
        assert exc_info.value.task_id == "task-ghost"

    def test_unknown_assignee_rejected(self, task_service, seeded_users, seeded_workflow):
        with pytest.raises(UserNotFoundError):
            task_service.create_task("Nobody", "t-plan-review", "u-ghost")

    def test_taken_id_rejected(self, session, task_service, signoff):
        with pytest.raises(DuplicateTaskIdError) as exc_info:
            task_service.create_task("Again", "t-plan-review", "u-plain", task_id="task-signoff")

        assert exc_info.value.task_id == "task-signoff"
        assert TaskSelector(session).get("task-signoff").name == "Design sign-off"


class TestUpdateAndDelete:

    def test_repoint_to_other_transition(self, task_service, signoff):
        updated = task_service.update_task(signoff.id, transition_id="t-plan-review", is_required=False)

        assert updated.transition_id == "t-plan-review"
        assert not updated.is_required

    def test_repoint_to_unknown_transition(self, task_service, signoff):
        with pytest.raises(UnknownTransitionReferenceError):
            task_service.update_task(signoff.id, transition_id="t-ghost")

    def test_completion_fields_not_editable(self, task_service, signoff):
        with pytest.raises(ValueError):
            task_service.update_task(signoff.id, is_completed=True)

    def test_delete(self, session, task_service, signoff):
        task_service.delete_task(signoff.id)

        assert TaskSelector(session).get(signoff.id) is None
        with pytest.raises(TaskNotFoundError):
            task_service.delete_task(signoff.id)


class TestCompletion:

    def test_mark_completed_persists_stamps(self, session, task_service, signoff, deterministic_clock):
        deterministic_clock.advance(3600)

        task_service.mark_completed(signoff.id, "u-admin")

        stored = TaskSelector(session).get(signoff.id)
        assert stored.is_completed
        assert stored.completed_by == "u-admin"
        assert stored.completed_at == deterministic_clock.now()

    def test_undo_clears_stamps(self, session, task_service, signoff):
        task_service.mark_completed(signoff.id, "u-admin")
        task_service.mark_incomplete(signoff.id)

        stored = TaskSelector(session).get(signoff.id)
        assert not stored.is_completed
        assert stored.completed_at is None
        assert stored.completed_by is None

    def test_redo_keeps_fresh_stamps(self, session, task_service, signoff, deterministic_clock):
        task_service.mark_completed(signoff.id, "u-admin")
        first_at = deterministic_clock.now()
        task_service.mark_incomplete(signoff.id)
        deterministic_clock.advance(120)
        task_service.mark_completed(signoff.id, "u-plain")

        stored = TaskSelector(session).get(signoff.id)
        assert stored.completed_by == "u-plain"
        assert stored.completed_at == deterministic_clock.now()
        assert stored.completed_at != first_at

    def test_completion_logged(self, task_service, signoff, captured_logs):
        task_service.mark_completed(signoff.id, "u-plain")

        records = [r for r in captured_logs() if r["message"] == "task_marked_completed"]
        assert records[0]["task_id"] == "task-signoff"
        assert records[0]["completed_by"] == "u-plain"
