"""
Module: statusflow_kernel.models.task
Responsibility: ORM persistence for tasks gating transitions.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - completed_at and completed_by are set or cleared together with
      is_completed; TaskService writes all three from one domain Task.
    - transition_id carries no foreign key: a task may outlive the edge it
      once gated.  TaskService checks the reference on create, and
      graph_validation.find_orphan_tasks reports the leftovers.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from statusflow_kernel.db.base import TrackedBase

if TYPE_CHECKING:
    from statusflow_kernel.domain.task import Task


class TaskModel(TrackedBase):
    """Persistent task."""

    __tablename__ = "tasks"

    __table_args__ = (
        Index("idx_tasks_transition", "transition_id", "is_completed"),
        Index("idx_tasks_assignee", "assigned_user_id"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    transition_id: Mapped[str] = mapped_column(String(64), nullable=False)
    assigned_user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("users.id"), nullable=False,
    )
    deadline: Mapped[date | None] = mapped_column(nullable=True)
    is_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    completed_at: Mapped[datetime | None] = mapped_column(nullable=True)
    completed_by: Mapped[str | None] = mapped_column(String(64), nullable=True)

    def __repr__(self) -> str:
        state = "done" if self.is_completed else "open"
        return f"<Task {self.id}: {self.name} [{state}] gates {self.transition_id}>"

    def to_dto(self) -> Task:
        """Convert ORM model to frozen domain DTO."""
        from statusflow_kernel.domain.task import Task as TaskDTO

        return TaskDTO(
            id=self.id,
            name=self.name,
            description=self.description or "",
            transition_id=self.transition_id,
            assigned_user_id=self.assigned_user_id,
            deadline=self.deadline,
            is_required=self.is_required,
            is_completed=self.is_completed,
            completed_at=self.completed_at,
            completed_by=self.completed_by,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_dto(cls, dto: Task) -> TaskModel:
        """Create ORM model from domain DTO."""
        model = cls(id=dto.id)
        model.apply_dto(dto)
        if dto.created_at is not None:
            model.created_at = dto.created_at
        return model

    def apply_dto(self, dto: Task) -> None:
        """Copy every mutable field from ``dto``."""
        self.name = dto.name
        self.description = dto.description
        self.transition_id = dto.transition_id
        self.assigned_user_id = dto.assigned_user_id
        self.deadline = dto.deadline
        self.is_required = dto.is_required
        self.is_completed = dto.is_completed
        self.completed_at = dto.completed_at
        self.completed_by = dto.completed_by
        if dto.updated_at is not None:
            self.updated_at = dto.updated_at
