"""ProjectSelector -- read access to projects and their history."""

from __future__ import annotations

from sqlalchemy import or_, select

from statusflow_kernel.domain.project import Project
from statusflow_kernel.models.project import ProjectModel, StatusHistoryModel
from statusflow_kernel.selectors.base import BaseSelector


class ProjectSelector(BaseSelector[ProjectModel]):

    def get(self, project_id: str) -> Project | None:
        model = self.session.get(ProjectModel, project_id)
        return model.to_dto() if model is not None else None

    def list_all(self) -> list[Project]:
        stmt = select(ProjectModel).order_by(ProjectModel.created_at, ProjectModel.id)
        return [m.to_dto() for m in self.session.scalars(stmt)]

    def list_by_workflow(self, workflow_id: str) -> list[Project]:
        stmt = (
            select(ProjectModel)
            .where(ProjectModel.workflow_id == workflow_id)
            .order_by(ProjectModel.created_at, ProjectModel.id)
        )
        return [m.to_dto() for m in self.session.scalars(stmt)]

    def list_by_status(self, status_id: str) -> list[Project]:
        stmt = (
            select(ProjectModel)
            .where(ProjectModel.current_status_id == status_id)
            .order_by(ProjectModel.created_at, ProjectModel.id)
        )
        return [m.to_dto() for m in self.session.scalars(stmt)]

    def ids_referencing_status(self, status_id: str) -> list[str]:
        """Projects whose current status or any history entry names ``status_id``."""
        current = select(ProjectModel.id).where(ProjectModel.current_status_id == status_id)
        historical = select(StatusHistoryModel.project_id).where(
            or_(
                StatusHistoryModel.from_status_id == status_id,
                StatusHistoryModel.to_status_id == status_id,
            )
        )
        ids = set(self.session.scalars(current)) | set(self.session.scalars(historical))
        return sorted(ids)
