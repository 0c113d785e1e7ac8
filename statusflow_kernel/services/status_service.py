"""
Service layer for Status operations.

Statuses are shared across workflows, so deletion is guarded: a status that
any workflow lists, any transition touches, or any project currently holds
or once held cannot be removed.
"""

from __future__ import annotations

from collections.abc import Iterable

from statusflow_kernel.db.base import new_id
from statusflow_kernel.domain.workflow import Status
from statusflow_kernel.exceptions import StatusInUseError, StatusNotFoundError
from statusflow_kernel.logging_config import get_logger
from statusflow_kernel.models.status import StatusModel
from statusflow_kernel.selectors.project_selector import ProjectSelector
from statusflow_kernel.selectors.workflow_selector import WorkflowSelector
from statusflow_kernel.services.base import BaseService

logger = get_logger("services.status")

_EDITABLE_FIELDS = frozenset({"name", "color", "description", "entity_types"})


class StatusService(BaseService[StatusModel]):
    """Create, edit and delete statuses.  Returns Status DTOs."""

    def _get_by_id(self, status_id: str) -> StatusModel:
        model = self.session.get(StatusModel, status_id)
        if model is None:
            raise StatusNotFoundError(status_id)
        return model

    def create_status(
        self,
        name: str,
        *,
        color: str = "#9E9E9E",
        description: str = "",
        entity_types: Iterable[str] = (),
        status_id: str | None = None,
    ) -> Status:
        now = self.clock.now()
        model = StatusModel(
            id=status_id or new_id(),
            name=name,
            color=color,
            description=description,
            entity_types=tuple(entity_types),
            created_at=now,
            updated_at=now,
        )
        self.session.add(model)
        self.session.flush()
        logger.info("status_created", extra={"status_id": model.id, "status_name": name})
        return model.to_dto()

    def update_status(self, status_id: str, **changes: object) -> Status:
        """
        Edit name, color, description or entity_types.

        Raises:
            StatusNotFoundError: If the status doesn't exist.
            ValueError: If ``changes`` names a field that cannot be edited.
        """
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update status fields: {sorted(unknown)}")

        model = self._get_by_id(status_id)
        for key, value in changes.items():
            if key == "entity_types":
                value = tuple(value)  # type: ignore[arg-type]
            setattr(model, key, value)
        model.updated_at = self.clock.now()
        self.session.flush()
        return model.to_dto()

    def delete_status(self, status_id: str) -> None:
        """
        Delete an unreferenced status.

        Raises:
            StatusNotFoundError: If the status doesn't exist.
            StatusInUseError: If any workflow or project references it.
        """
        model = self._get_by_id(status_id)

        workflow_ids = WorkflowSelector(self.session).ids_using_status(status_id)
        project_ids = ProjectSelector(self.session).ids_referencing_status(status_id)
        if workflow_ids or project_ids:
            logger.warning(
                "status_delete_rejected",
                extra={
                    "status_id": status_id,
                    "workflow_ids": workflow_ids,
                    "project_ids": project_ids,
                },
            )
            raise StatusInUseError(
                status_id,
                workflow_ids=tuple(workflow_ids),
                project_ids=tuple(project_ids),
            )

        self.session.delete(model)
        self.session.flush()
        logger.info("status_deleted", extra={"status_id": status_id})
