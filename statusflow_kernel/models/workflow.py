"""
Module: statusflow_kernel.models.workflow
Responsibility: ORM persistence for workflows, their ordered status
    membership, and their transitions.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - One transition per (workflow, from, to) edge: uq_transitions_edge.
    - No self loops: ck_transitions_not_self_loop.
    - At most one default workflow per entity type: partial unique index
      uq_workflows_default_entity_type (PostgreSQL and SQLite).
    - A status appears at most once in a workflow: uq_workflow_statuses.
    - Cycle and start/end rules are graph properties; they are checked by
      statusflow_engines.graph_validation before anything reaches here.

Failure modes:
    - IntegrityError when a write bypasses WorkflowService and breaks one of
      the constraints above.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from statusflow_kernel.db.base import Base, JSONList, TrackedBase

if TYPE_CHECKING:
    from statusflow_kernel.domain.workflow import Transition, Workflow


class WorkflowModel(TrackedBase):
    """Persistent workflow definition.

    Contract:
        ``status_links`` and ``transitions`` are loaded eagerly and in stored
        order; ``to_dto`` preserves that order.
    """

    __tablename__ = "workflows"

    __table_args__ = (
        Index(
            "uq_workflows_default_entity_type",
            "entity_type",
            unique=True,
            postgresql_where=text("is_default"),
            sqlite_where=text("is_default = 1"),
        ),
        Index("idx_workflows_entity_type", "entity_type"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    status_links: Mapped[list[WorkflowStatusModel]] = relationship(
        "WorkflowStatusModel",
        back_populates="workflow",
        order_by="WorkflowStatusModel.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    transitions: Mapped[list[TransitionModel]] = relationship(
        "TransitionModel",
        back_populates="workflow",
        order_by="TransitionModel.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Workflow {self.id}: {self.name} ({self.entity_type})>"

    @property
    def status_ids(self) -> tuple[str, ...]:
        return tuple(link.status_id for link in self.status_links)

    def to_dto(self) -> Workflow:
        """Convert ORM model to frozen domain DTO."""
        from statusflow_kernel.domain.workflow import Workflow as WorkflowDTO

        return WorkflowDTO(
            id=self.id,
            name=self.name,
            description=self.description or "",
            entity_type=self.entity_type,
            statuses=self.status_ids,
            transitions=tuple(t.to_dto() for t in self.transitions),
            is_default=self.is_default,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_dto(cls, dto: Workflow) -> WorkflowModel:
        """Create ORM model (with links and transitions) from domain DTO."""
        model = cls(
            id=dto.id,
            name=dto.name,
            description=dto.description,
            entity_type=dto.entity_type,
            is_default=dto.is_default,
        )
        model.status_links = [
            WorkflowStatusModel(status_id=status_id, position=position)
            for position, status_id in enumerate(dto.statuses)
        ]
        model.transitions = [
            TransitionModel.from_dto(t, position=position)
            for position, t in enumerate(dto.transitions)
        ]
        if dto.created_at is not None:
            model.created_at = dto.created_at
        if dto.updated_at is not None:
            model.updated_at = dto.updated_at
        return model


class WorkflowStatusModel(Base):
    """Ordered membership of a status in a workflow."""

    __tablename__ = "workflow_statuses"

    __table_args__ = (
        UniqueConstraint("workflow_id", "status_id", name="uq_workflow_statuses"),
        Index("idx_workflow_statuses_status", "status_id"),
    )

    workflow_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("workflows.id", ondelete="CASCADE"),
        nullable=False,
    )
    status_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("statuses.id"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    workflow: Mapped[WorkflowModel] = relationship(
        "WorkflowModel",
        back_populates="status_links",
    )

    def __repr__(self) -> str:
        return f"<WorkflowStatus {self.workflow_id}[{self.position}]={self.status_id}>"


class TransitionModel(Base):
    """Persistent workflow edge.

    Guarantees:
        - uq_transitions_edge: no duplicate (from, to) per workflow.
        - ck_transitions_not_self_loop: from != to.
    """

    __tablename__ = "transitions"

    __table_args__ = (
        UniqueConstraint(
            "workflow_id", "from_status_id", "to_status_id",
            name="uq_transitions_edge",
        ),
        CheckConstraint(
            "from_status_id <> to_status_id",
            name="ck_transitions_not_self_loop",
        ),
        Index("idx_transitions_from_status", "from_status_id"),
        Index("idx_transitions_to_status", "to_status_id"),
    )

    workflow_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("workflows.id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    from_status_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("statuses.id"), nullable=False,
    )
    to_status_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("statuses.id"), nullable=False,
    )
    requires_approval: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    approver_roles: Mapped[tuple[str, ...]] = mapped_column(JSONList, nullable=False, default=())
    approver_user_ids: Mapped[tuple[str, ...]] = mapped_column(JSONList, nullable=False, default=())
    conditions: Mapped[tuple[str, ...]] = mapped_column(JSONList, nullable=False, default=())

    workflow: Mapped[WorkflowModel] = relationship(
        "WorkflowModel",
        back_populates="transitions",
    )

    def __repr__(self) -> str:
        return f"<Transition {self.id}: {self.from_status_id} -> {self.to_status_id}>"

    def to_dto(self) -> Transition:
        """Convert ORM model to frozen domain DTO."""
        from statusflow_kernel.domain.workflow import Transition as TransitionDTO

        return TransitionDTO(
            id=self.id,
            from_status_id=self.from_status_id,
            to_status_id=self.to_status_id,
            requires_approval=self.requires_approval,
            approver_roles=tuple(self.approver_roles or ()),
            approver_user_ids=tuple(self.approver_user_ids or ()),
            conditions=tuple(self.conditions or ()),
        )

    @classmethod
    def from_dto(cls, dto: Transition, position: int = 0) -> TransitionModel:
        """Create ORM model from domain DTO."""
        return cls(
            id=dto.id,
            position=position,
            from_status_id=dto.from_status_id,
            to_status_id=dto.to_status_id,
            requires_approval=dto.requires_approval,
            approver_roles=dto.approver_roles,
            approver_user_ids=dto.approver_user_ids,
            conditions=dto.conditions,
        )

    def apply_dto(self, dto: Transition) -> None:
        """Overwrite the editable fields from ``dto`` (id and position stay)."""
        self.from_status_id = dto.from_status_id
        self.to_status_id = dto.to_status_id
        self.requires_approval = dto.requires_approval
        self.approver_roles = dto.approver_roles
        self.approver_user_ids = dto.approver_user_ids
        self.conditions = dto.conditions
