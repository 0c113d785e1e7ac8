"""
Workflow catalog compiler (``statusflow_config.compiler``).

Responsibility
--------------
Turns a validated ``WorkflowConfigurationSet`` into a frozen
``CompiledWorkflowCatalog`` of kernel domain objects (``Status``, ``User``,
``Workflow``).  The compiled catalog is the only configuration artifact the
rest of the system sees.

Invariants enforced
-------------------
* The compiled catalog carries the source checksum unchanged.
* Compilation is deterministic: the same source set always yields equal
  catalogs, in source order.
"""

from __future__ import annotations

from dataclasses import dataclass

from statusflow_config.schema import (
    StatusDef,
    TransitionDef,
    UserDef,
    WorkflowConfigurationSet,
    WorkflowDef,
)
from statusflow_kernel.domain.project import User
from statusflow_kernel.domain.values import (
    StatusId,
    TransitionId,
    UserId,
    UserRole,
    WorkflowId,
)
from statusflow_kernel.domain.workflow import Status, Transition, Workflow


@dataclass(frozen=True)
class CompiledWorkflowCatalog:
    """
    The sole runtime configuration artifact.

    Holds domain objects ready for ``seed_catalog`` or for direct use by
    the pure engines.
    """

    config_id: str
    version: int
    name: str
    checksum: str
    statuses: tuple[Status, ...] = ()
    users: tuple[User, ...] = ()
    workflows: tuple[Workflow, ...] = ()

    def get_status(self, status_id: str) -> Status | None:
        return next((s for s in self.statuses if s.id == status_id), None)

    def get_workflow(self, workflow_id: str) -> Workflow | None:
        return next((w for w in self.workflows if w.id == workflow_id), None)

    def default_workflow(self, entity_type: str = "project") -> Workflow | None:
        """The workflow marked default for ``entity_type``, if any."""
        return next(
            (w for w in self.workflows if w.is_default and w.entity_type == entity_type),
            None,
        )


def status_from_def(status: StatusDef) -> Status:
    return Status(
        id=StatusId(status.id),
        name=status.name,
        color=status.color,
        description=status.description,
        entity_types=status.entity_types,
    )


def user_from_def(user: UserDef) -> User:
    return User(
        id=UserId(user.id),
        name=user.name,
        email=user.email,
        role=UserRole(user.role),
    )


def transition_from_def(transition: TransitionDef) -> Transition:
    return Transition(
        id=TransitionId(transition.id),
        from_status_id=StatusId(transition.from_status),
        to_status_id=StatusId(transition.to_status),
        requires_approval=transition.requires_approval,
        approver_roles=transition.approver_roles,
        approver_user_ids=tuple(UserId(u) for u in transition.approver_users),
        conditions=transition.conditions,
    )


def workflow_from_def(workflow: WorkflowDef) -> Workflow:
    return Workflow(
        id=WorkflowId(workflow.id),
        name=workflow.name,
        entity_type=workflow.entity_type,
        statuses=tuple(StatusId(s) for s in workflow.statuses),
        transitions=tuple(transition_from_def(t) for t in workflow.transitions),
        description=workflow.description,
        is_default=workflow.is_default,
    )


def compile_catalog(config: WorkflowConfigurationSet) -> CompiledWorkflowCatalog:
    """
    Compile a configuration set into a ``CompiledWorkflowCatalog``.

    Preconditions:
        - ``config`` has passed ``validate_configuration``.  An unknown user
          role raises ``ValueError`` from ``UserRole``.
    """
    return CompiledWorkflowCatalog(
        config_id=config.config_id,
        version=config.version,
        name=config.name,
        checksum=config.checksum,
        statuses=tuple(status_from_def(s) for s in config.statuses),
        users=tuple(user_from_def(u) for u in config.users),
        workflows=tuple(workflow_from_def(w) for w in config.workflows),
    )
