"""
Module: statusflow_kernel.models.status
Responsibility: ORM persistence for statuses, the shared node vocabulary of
    every workflow.
Architecture position: Kernel > Models.  May import from db/base.py only
    (domain types are imported lazily inside to_dto/from_dto).

Invariants enforced:
    - A status referenced by a workflow, a transition or a project (current
      or historical) is never deleted.  Foreign keys hold the line in the
      database; StatusService reports it first as StatusInUseError.

Failure modes:
    - IntegrityError on deleting a referenced status through raw ORM calls.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from statusflow_kernel.db.base import JSONList, TrackedBase

if TYPE_CHECKING:
    from statusflow_kernel.domain.workflow import Status


class StatusModel(TrackedBase):
    """Persistent status label."""

    __tablename__ = "statuses"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    color: Mapped[str] = mapped_column(String(16), nullable=False, default="#9E9E9E")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    entity_types: Mapped[tuple[str, ...]] = mapped_column(JSONList, nullable=False, default=())

    def __repr__(self) -> str:
        return f"<Status {self.id}: {self.name}>"

    def to_dto(self) -> Status:
        """Convert ORM model to frozen domain DTO."""
        from statusflow_kernel.domain.workflow import Status as StatusDTO

        return StatusDTO(
            id=self.id,
            name=self.name,
            color=self.color,
            description=self.description or "",
            entity_types=tuple(self.entity_types or ()),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_dto(cls, dto: Status) -> StatusModel:
        """Create ORM model from domain DTO."""
        model = cls(
            id=dto.id,
            name=dto.name,
            color=dto.color,
            description=dto.description,
            entity_types=dto.entity_types,
        )
        if dto.created_at is not None:
            model.created_at = dto.created_at
        if dto.updated_at is not None:
            model.updated_at = dto.updated_at
        return model
