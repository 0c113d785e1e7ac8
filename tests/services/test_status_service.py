"""
Tests for StatusService.

Covers:
- Create / update round trip
- Referential integrity on delete (workflow membership, current status,
  status history)
"""

import pytest

from statusflow_kernel.exceptions import StatusInUseError, StatusNotFoundError
from statusflow_kernel.selectors.status_selector import StatusSelector


class TestCreateAndUpdate:

    def test_create(self, status_service, deterministic_clock):
        status = status_service.create_status(
            "Design Review", color="#ff9800", description="Technical review",
            entity_types=["project"], status_id="design-review",
        )

        assert status.id == "design-review"
        assert status.entity_types == ("project",)
        assert status.created_at == deterministic_clock.now()

    def test_generated_id(self, status_service):
        assert status_service.create_status("Anything").id

    def test_update(self, session, status_service, deterministic_clock):
        status_service.create_status("Draft", status_id="draft")
        deterministic_clock.advance(60)

        updated = status_service.update_status("draft", name="Drafting", entity_types=["campaign"])

        assert updated.name == "Drafting"
        assert updated.entity_types == ("campaign",)
        assert updated.updated_at == deterministic_clock.now()
        assert StatusSelector(session).get("draft").name == "Drafting"

    def test_update_rejects_unknown_field(self, status_service):
        status_service.create_status("Draft", status_id="draft")
        with pytest.raises(ValueError, match="id"):
            status_service.update_status("draft", id="other")

    def test_update_unknown_status(self, status_service):
        with pytest.raises(StatusNotFoundError):
            status_service.update_status("nope", name="x")


class TestDelete:

    def test_unreferenced_status_deleted(self, session, status_service):
        status_service.create_status("Scratch", status_id="scratch")
        status_service.delete_status("scratch")

        assert StatusSelector(session).get("scratch") is None

    def test_workflow_member_cannot_be_deleted(self, status_service, seeded_workflow):
        with pytest.raises(StatusInUseError) as exc_info:
            status_service.delete_status("review")

        assert exc_info.value.workflow_ids == ("wf-review",)
        assert exc_info.value.code == "STATUS_IN_USE"

    def test_current_status_of_project_cannot_be_deleted(self, status_service, seeded_project):
        with pytest.raises(StatusInUseError) as exc_info:
            status_service.delete_status("planning")

        assert exc_info.value.project_ids == ("p-rooftop",)

    def test_delete_rejection_logged(self, status_service, seeded_workflow, captured_logs):
        with pytest.raises(StatusInUseError):
            status_service.delete_status("approved")

        rejected = [r for r in captured_logs() if r["message"] == "status_delete_rejected"]
        assert rejected and rejected[0]["status_id"] == "approved"

    def test_delete_unknown(self, status_service):
        with pytest.raises(StatusNotFoundError):
            status_service.delete_status("nope")
