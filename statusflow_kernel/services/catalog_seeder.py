"""
Catalog Seeder - Loads a compiled workflow catalog into the database.

Takes the frozen statuses, users and workflows produced by
``statusflow_config.get_active_config()`` and writes them through the
regular services, so every workflow passes the same graph validation as an
interactive edit.  Rows whose id already exists are left untouched, which
makes seeding safe to repeat.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from sqlalchemy.orm import Session

from statusflow_kernel.domain.clock import Clock
from statusflow_kernel.domain.project import User
from statusflow_kernel.domain.workflow import Status, Workflow
from statusflow_kernel.logging_config import get_logger
from statusflow_kernel.models.status import StatusModel
from statusflow_kernel.models.user import UserModel
from statusflow_kernel.models.workflow import WorkflowModel
from statusflow_kernel.services.status_service import StatusService
from statusflow_kernel.services.user_service import UserService
from statusflow_kernel.services.workflow_service import WorkflowService

logger = get_logger("services.catalog_seeder")


class WorkflowCatalog(Protocol):
    """What the seeder needs from a compiled catalog."""

    statuses: Sequence[Status]
    users: Sequence[User]
    workflows: Sequence[Workflow]


@dataclass(frozen=True)
class SeedResult:
    """Ids written by one seeding run, plus the ids that already existed."""

    status_ids: tuple[str, ...] = ()
    user_ids: tuple[str, ...] = ()
    workflow_ids: tuple[str, ...] = ()
    skipped_ids: tuple[str, ...] = ()


def seed_catalog(
    session: Session,
    catalog: WorkflowCatalog,
    clock: Clock | None = None,
) -> SeedResult:
    """
    Write ``catalog`` into the database (flush only).

    Order: statuses, users, then workflows, so every reference resolves.

    Raises:
        InvalidWorkflowDefinitionError / StatusNotInWorkflowError: A
            catalog workflow fails validation.
    """
    statuses = StatusService(session, clock)
    users = UserService(session, clock)
    workflows = WorkflowService(session, clock)

    status_ids: list[str] = []
    user_ids: list[str] = []
    workflow_ids: list[str] = []
    skipped: list[str] = []

    for status in catalog.statuses:
        if session.get(StatusModel, status.id) is not None:
            skipped.append(status.id)
            continue
        statuses.create_status(
            status.name,
            color=status.color,
            description=status.description,
            entity_types=status.entity_types,
            status_id=status.id,
        )
        status_ids.append(status.id)

    for user in catalog.users:
        if session.get(UserModel, user.id) is not None:
            skipped.append(user.id)
            continue
        users.create_user(user.name, email=user.email, role=user.role, user_id=user.id)
        user_ids.append(user.id)

    for workflow in catalog.workflows:
        if session.get(WorkflowModel, workflow.id) is not None:
            skipped.append(workflow.id)
            continue
        workflows.create_workflow(
            workflow.name,
            workflow.entity_type,
            workflow.statuses,
            workflow.transitions,
            description=workflow.description,
            is_default=workflow.is_default,
            workflow_id=workflow.id,
        )
        workflow_ids.append(workflow.id)

    logger.info(
        "catalog_seeded",
        extra={
            "status_count": len(status_ids),
            "user_count": len(user_ids),
            "workflow_count": len(workflow_ids),
            "skipped_count": len(skipped),
        },
    )
    return SeedResult(
        status_ids=tuple(status_ids),
        user_ids=tuple(user_ids),
        workflow_ids=tuple(workflow_ids),
        skipped_ids=tuple(skipped),
    )
