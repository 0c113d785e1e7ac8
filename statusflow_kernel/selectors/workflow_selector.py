"""
WorkflowSelector -- read access to workflows and their transitions.

Workflows are returned as complete frozen ``Workflow`` values (ordered
statuses plus transitions) so that the pure engines never touch the ORM.
"""

from __future__ import annotations

from sqlalchemy import or_, select

from statusflow_kernel.domain.workflow import Transition, Workflow
from statusflow_kernel.models.workflow import (
    TransitionModel,
    WorkflowModel,
    WorkflowStatusModel,
)
from statusflow_kernel.selectors.base import BaseSelector


class WorkflowSelector(BaseSelector[WorkflowModel]):

    def get(self, workflow_id: str) -> Workflow | None:
        model = self.session.get(WorkflowModel, workflow_id)
        return model.to_dto() if model is not None else None

    def list_all(self, entity_type: str | None = None) -> list[Workflow]:
        stmt = select(WorkflowModel).order_by(WorkflowModel.name, WorkflowModel.id)
        if entity_type is not None:
            stmt = stmt.where(WorkflowModel.entity_type == entity_type)
        return [m.to_dto() for m in self.session.scalars(stmt)]

    def get_default(self, entity_type: str) -> Workflow | None:
        """The default workflow for ``entity_type``, if one is marked."""
        stmt = select(WorkflowModel).where(
            WorkflowModel.entity_type == entity_type,
            WorkflowModel.is_default.is_(True),
        )
        model = self.session.scalars(stmt).first()
        return model.to_dto() if model is not None else None

    def get_transition(self, transition_id: str) -> Transition | None:
        model = self.session.get(TransitionModel, transition_id)
        return model.to_dto() if model is not None else None

    def workflow_id_for_transition(self, transition_id: str) -> str | None:
        stmt = select(TransitionModel.workflow_id).where(TransitionModel.id == transition_id)
        return self.session.scalars(stmt).first()

    def ids_using_status(self, status_id: str) -> list[str]:
        """Workflows that list ``status_id`` or have an edge touching it."""
        member = select(WorkflowStatusModel.workflow_id).where(
            WorkflowStatusModel.status_id == status_id,
        )
        edge = select(TransitionModel.workflow_id).where(
            or_(
                TransitionModel.from_status_id == status_id,
                TransitionModel.to_status_id == status_id,
            )
        )
        ids = set(self.session.scalars(member)) | set(self.session.scalars(edge))
        return sorted(ids)
