"""
Module: statusflow_kernel.models.project
Responsibility: ORM persistence for projects and their append-only status
    history.
Architecture position: Kernel > Models.  May import from db/base.py and
    exceptions only.

Invariants enforced:
    - Optimistic concurrency: ``version`` is the mapper's version_id_col with
      application-assigned values.  Every UPDATE carries
      ``WHERE version = <loaded version>``; a concurrent writer makes the
      flush fail with StaleDataError, which ProjectService maps to
      OptimisticLockError.
    - History is append-only: ORM before_update / before_delete listeners
      on StatusHistoryModel raise ImmutabilityViolationError.
    - History order is explicit (``position``), not inferred from timestamps.

Failure modes:
    - StaleDataError on a lost update (converted by the service layer).
    - ImmutabilityViolationError on any attempt to change a history row.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, Integer, String, Text, UniqueConstraint, event
from sqlalchemy.orm import Mapped, mapped_column, relationship

from statusflow_kernel.db.base import Base, JSONList, TrackedBase
from statusflow_kernel.exceptions import ImmutabilityViolationError
from statusflow_kernel.logging_config import get_logger

if TYPE_CHECKING:
    from statusflow_kernel.domain.project import Project, StatusHistoryEntry

logger = get_logger("models.project")


class ProjectModel(TrackedBase):
    """Persistent project with a live pointer into its workflow."""

    __tablename__ = "projects"

    __table_args__ = (
        Index("idx_projects_workflow", "workflow_id"),
        Index("idx_projects_current_status", "current_status_id"),
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    creator_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("users.id"), nullable=False,
    )
    current_status_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("statuses.id"), nullable=False,
    )
    workflow_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("workflows.id"), nullable=False,
    )
    last_edited_at: Mapped[datetime | None] = mapped_column(nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    history: Mapped[list[StatusHistoryModel]] = relationship(
        "StatusHistoryModel",
        back_populates="project",
        order_by="StatusHistoryModel.position",
        cascade="save-update, merge",
        lazy="selectin",
    )

    __mapper_args__ = {
        "version_id_col": version,
        "version_id_generator": False,
    }

    def __repr__(self) -> str:
        return f"<Project {self.id}: {self.title} @ {self.current_status_id} v{self.version}>"

    def to_dto(self) -> Project:
        """Convert ORM model to frozen domain DTO."""
        from statusflow_kernel.domain.project import Project as ProjectDTO

        return ProjectDTO(
            id=self.id,
            title=self.title,
            description=self.description or "",
            creator_id=self.creator_id,
            current_status_id=self.current_status_id,
            workflow_id=self.workflow_id,
            status_history=tuple(h.to_dto() for h in self.history),
            created_at=self.created_at,
            last_edited_at=self.last_edited_at,
            version=self.version,
        )

    @classmethod
    def from_dto(cls, dto: Project) -> ProjectModel:
        """Create ORM model (with history) from domain DTO."""
        model = cls(
            id=dto.id,
            title=dto.title,
            description=dto.description,
            creator_id=dto.creator_id,
            current_status_id=dto.current_status_id,
            workflow_id=dto.workflow_id,
            last_edited_at=dto.last_edited_at,
            version=dto.version,
        )
        model.history = [
            StatusHistoryModel.from_dto(entry, position=position)
            for position, entry in enumerate(dto.status_history)
        ]
        if dto.created_at is not None:
            model.created_at = dto.created_at
        return model


class StatusHistoryModel(Base):
    """One executed status change.  Append-only.

    Contract:
        Rows are inserted with their project and never modified or deleted.
    """

    __tablename__ = "status_history"

    __table_args__ = (
        UniqueConstraint("project_id", "position", name="uq_status_history_position"),
        Index("idx_status_history_to_status", "to_status_id"),
        Index("idx_status_history_from_status", "from_status_id"),
    )

    project_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("projects.id"), nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    from_status_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("statuses.id"), nullable=True,
    )
    to_status_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("statuses.id"), nullable=False,
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(nullable=False)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    tasks_completed: Mapped[tuple[str, ...]] = mapped_column(JSONList, nullable=False, default=())
    approved_by: Mapped[str | None] = mapped_column(String(64), nullable=True)

    project: Mapped[ProjectModel] = relationship(
        "ProjectModel",
        back_populates="history",
    )

    def __repr__(self) -> str:
        return (
            f"<StatusHistory {self.id} project={self.project_id} "
            f"{self.from_status_id} -> {self.to_status_id}>"
        )

    def to_dto(self) -> StatusHistoryEntry:
        """Convert ORM model to frozen domain DTO."""
        from statusflow_kernel.domain.project import StatusHistoryEntry as EntryDTO

        return EntryDTO(
            id=self.id,
            from_status_id=self.from_status_id,
            to_status_id=self.to_status_id,
            user_id=self.user_id,
            timestamp=self.timestamp,
            comment=self.comment,
            tasks_completed=tuple(self.tasks_completed or ()),
            approved_by=self.approved_by,
        )

    @classmethod
    def from_dto(cls, dto: StatusHistoryEntry, position: int) -> StatusHistoryModel:
        """Create ORM model from domain DTO."""
        return cls(
            id=dto.id,
            position=position,
            from_status_id=dto.from_status_id,
            to_status_id=dto.to_status_id,
            user_id=dto.user_id,
            timestamp=dto.timestamp,
            comment=dto.comment,
            tasks_completed=dto.tasks_completed,
            approved_by=dto.approved_by,
        )


# =============================================================================
# ORM-Level Immutability for History (Append-Only)
# =============================================================================


@event.listens_for(StatusHistoryModel, "before_update")
def prevent_history_update(mapper, connection, target):
    """Prevent updates to status history records."""
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "StatusHistoryEntry",
            "entity_id": str(target.id),
            "operation": "UPDATE",
        },
    )
    raise ImmutabilityViolationError(
        entity_type="StatusHistoryEntry",
        entity_id=str(target.id),
        reason="Status history entries are immutable -- cannot modify",
    )


@event.listens_for(StatusHistoryModel, "before_delete")
def prevent_history_delete(mapper, connection, target):
    """Prevent deletion of status history records."""
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "StatusHistoryEntry",
            "entity_id": str(target.id),
            "operation": "DELETE",
        },
    )
    raise ImmutabilityViolationError(
        entity_type="StatusHistoryEntry",
        entity_id=str(target.id),
        reason="Status history entries are immutable -- cannot delete",
    )
