"""
Tests for ProjectService.

Covers:
- Creation in the default workflow with the "Project created" entry
- Explicit workflow and initial status
- Persisting an applied transition with the optimistic version check
- Append-only history
"""

import pytest
from sqlalchemy import text

from statusflow_engines.transition_apply import apply_transition
from statusflow_kernel.domain.project import User
from statusflow_kernel.domain.values import UserRole
from statusflow_kernel.exceptions import (
    ImmutabilityViolationError,
    OptimisticLockError,
    ProjectNotFoundError,
    StatusNotInWorkflowError,
    UserNotFoundError,
    WorkflowNotFoundError,
)
from statusflow_kernel.models.project import ProjectModel
from statusflow_kernel.selectors.project_selector import ProjectSelector
from statusflow_kernel.selectors.workflow_selector import WorkflowSelector
from statusflow_kernel.services.project_service import PROJECT_CREATED_COMMENT

PLAIN = User(id="u-plain", name="Pat Plain", role=UserRole.USER)


def _plan_to_review(session):
    return WorkflowSelector(session).get_transition("t-plan-review")


class TestCreateProject:

    def test_defaults_to_default_workflow_and_first_status(self, seeded_project, deterministic_clock):
        assert seeded_project.workflow_id == "wf-review"
        assert seeded_project.current_status_id == "planning"
        assert seeded_project.version == 1
        assert seeded_project.created_at == deterministic_clock.now()

        (entry,) = seeded_project.status_history
        assert entry.from_status_id is None
        assert entry.to_status_id == "planning"
        assert entry.user_id == "u-plain"
        assert entry.comment == PROJECT_CREATED_COMMENT

    def test_explicit_initial_status(self, project_service, seeded_users, seeded_workflow):
        project = project_service.create_project(
            "Mid-flight", "u-plain", workflow_id="wf-review", initial_status_id="review",
        )
        assert project.current_status_id == "review"

    def test_initial_status_outside_workflow(
        self, project_service, status_service, seeded_users, seeded_workflow,
    ):
        status_service.create_status("Archived", status_id="archived")
        with pytest.raises(StatusNotInWorkflowError):
            project_service.create_project("Bad", "u-plain", initial_status_id="archived")

    def test_no_default_workflow(self, project_service, seeded_users, seeded_workflow):
        with pytest.raises(WorkflowNotFoundError):
            project_service.create_project("Launch", "u-plain", entity_type="campaign")

    def test_unknown_creator(self, project_service, seeded_workflow):
        with pytest.raises(UserNotFoundError):
            project_service.create_project("Orphan", "u-ghost")

    def test_update_bumps_version(self, project_service, seeded_project):
        updated = project_service.update_project(seeded_project.id, title="Rooftop array (phase 2)")

        assert updated.title == "Rooftop array (phase 2)"
        assert updated.version == 2

    def test_update_unknown(self, project_service):
        with pytest.raises(ProjectNotFoundError):
            project_service.update_project("nope", title="x")


class TestRecordTransition:

    def test_persists_status_and_history(self, session, project_service, seeded_project, deterministic_clock):
        deterministic_clock.advance(600)
        after, entry = apply_transition(
            seeded_project, _plan_to_review(session), PLAIN, deterministic_clock.now(),
        )

        saved = project_service.record_transition(seeded_project, after, entry)

        assert saved.current_status_id == "review"
        assert saved.version == 2
        assert saved.last_edited_at == deterministic_clock.now()
        assert [h.to_status_id for h in saved.status_history] == ["planning", "review"]
        assert ProjectSelector(session).get(seeded_project.id) == saved

    def test_stale_before_state_rejected(self, session, project_service, seeded_project, deterministic_clock):
        transition = _plan_to_review(session)
        after, entry = apply_transition(seeded_project, transition, PLAIN, deterministic_clock.now())
        project_service.record_transition(seeded_project, after, entry)

        # A second writer still holding version 1.
        again, again_entry = apply_transition(seeded_project, transition, PLAIN, deterministic_clock.now())
        with pytest.raises(OptimisticLockError) as exc_info:
            project_service.record_transition(seeded_project, again, again_entry)

        assert exc_info.value.expected_version == 1
        assert exc_info.value.actual_version == 2

    def test_concurrent_row_update_detected_at_flush(
        self, session, project_service, seeded_project, deterministic_clock,
    ):
        session.connection().execute(
            text("UPDATE projects SET version = 5 WHERE id = :id"), {"id": seeded_project.id},
        )
        after, entry = apply_transition(
            seeded_project, _plan_to_review(session), PLAIN, deterministic_clock.now(),
        )

        with pytest.raises(OptimisticLockError):
            project_service.record_transition(seeded_project, after, entry)


class TestHistoryImmutability:

    def test_history_row_cannot_be_modified(self, session, seeded_project):
        model = session.get(ProjectModel, seeded_project.id)
        model.history[0].comment = "rewritten"

        with pytest.raises(ImmutabilityViolationError):
            session.flush()

    def test_history_row_cannot_be_deleted(self, session, seeded_project):
        model = session.get(ProjectModel, seeded_project.id)
        session.delete(model.history[0])

        with pytest.raises(ImmutabilityViolationError):
            session.flush()
