"""
ProjectService -- write side of projects and their status history.

Responsibility:
    Create projects in a workflow (with the initial "Project created" history
    entry) and persist transitions produced by
    ``statusflow_engines.transition_apply.apply_transition``.

Architecture position:
    Kernel > Services.  Never decides whether a transition is legal; that is
    the resolver's and permission evaluator's job, coordinated by
    statusflow_services.WorkflowExecutor.

Invariants enforced:
    - The current-status pointer and the new history entry are written in
      the same flush.
    - Optimistic concurrency: the stored version must equal the version the
      transition was applied to.  Lost updates surface as
      OptimisticLockError (the mapper's version check backs this at flush).
    - History entries are only appended, with consecutive positions.

Failure modes:
    - UserNotFoundError, WorkflowNotFoundError, ProjectNotFoundError.
    - StatusNotInWorkflowError: initial status outside the workflow.
    - InvalidWorkflowDefinitionError: the workflow has no statuses.
    - OptimisticLockError: another writer moved the project first.
"""

from __future__ import annotations

from sqlalchemy.orm.exc import StaleDataError

from statusflow_kernel.db.base import new_id
from statusflow_kernel.domain.project import Project, StatusHistoryEntry
from statusflow_kernel.domain.values import PROJECT_ENTITY_TYPE
from statusflow_kernel.exceptions import (
    InvalidWorkflowDefinitionError,
    OptimisticLockError,
    ProjectNotFoundError,
    StatusNotInWorkflowError,
    UserNotFoundError,
    WorkflowNotFoundError,
)
from statusflow_kernel.logging_config import get_logger
from statusflow_kernel.models.project import ProjectModel, StatusHistoryModel
from statusflow_kernel.models.user import UserModel
from statusflow_kernel.models.workflow import WorkflowModel
from statusflow_kernel.selectors.workflow_selector import WorkflowSelector
from statusflow_kernel.services.base import BaseService

logger = get_logger("services.project")

PROJECT_CREATED_COMMENT = "Project created"


class ProjectService(BaseService[ProjectModel]):
    """Create projects and record their status changes."""

    def _get_by_id(self, project_id: str) -> ProjectModel:
        model = self.session.get(ProjectModel, project_id)
        if model is None:
            raise ProjectNotFoundError(project_id)
        return model

    def create_project(
        self,
        title: str,
        creator_id: str,
        *,
        workflow_id: str | None = None,
        entity_type: str = PROJECT_ENTITY_TYPE,
        initial_status_id: str | None = None,
        description: str = "",
        project_id: str | None = None,
    ) -> Project:
        """
        Create a project and its first history entry.

        Without ``workflow_id`` the default workflow of ``entity_type`` is
        used.  Without ``initial_status_id`` the workflow's first status is
        used.

        Raises:
            UserNotFoundError: The creator does not exist.
            WorkflowNotFoundError: No such workflow, or no default for the
                entity type.
            StatusNotInWorkflowError: ``initial_status_id`` is not a member.
            InvalidWorkflowDefinitionError: The workflow has no statuses.
        """
        if self.session.get(UserModel, creator_id) is None:
            raise UserNotFoundError(creator_id)

        if workflow_id is not None:
            wf_model = self.session.get(WorkflowModel, workflow_id)
            if wf_model is None:
                raise WorkflowNotFoundError(workflow_id)
            workflow = wf_model.to_dto()
        else:
            workflow = WorkflowSelector(self.session).get_default(entity_type)
            if workflow is None:
                raise WorkflowNotFoundError(f"<default for {entity_type}>")

        status_id = initial_status_id or workflow.initial_status_id
        if status_id is None:
            raise InvalidWorkflowDefinitionError(workflow.id, ["Workflow has no statuses"])
        if status_id not in workflow.status_set:
            raise StatusNotInWorkflowError(status_id, workflow.id)

        now = self.clock.now()
        entry = StatusHistoryEntry(
            id=new_id(),
            from_status_id=None,
            to_status_id=status_id,
            user_id=creator_id,
            timestamp=now,
            comment=PROJECT_CREATED_COMMENT,
        )
        dto = Project(
            id=project_id or new_id(),
            title=title,
            description=description,
            creator_id=creator_id,
            current_status_id=status_id,
            workflow_id=workflow.id,
            status_history=(entry,),
            created_at=now,
            last_edited_at=now,
            version=1,
        )
        model = ProjectModel.from_dto(dto)
        model.updated_at = now
        self.session.add(model)
        self.session.flush()
        logger.info(
            "project_created",
            extra={
                "project_id": model.id,
                "workflow_id": workflow.id,
                "status_id": status_id,
                "creator_id": creator_id,
            },
        )
        return model.to_dto()

    def update_project(
        self,
        project_id: str,
        *,
        title: str | None = None,
        description: str | None = None,
    ) -> Project:
        """Edit title or description.  Status changes go through record_transition."""
        model = self._get_by_id(project_id)
        now = self.clock.now()
        if title is not None:
            model.title = title
        if description is not None:
            model.description = description
        model.last_edited_at = now
        model.updated_at = now
        model.version = model.version + 1
        self._flush_versioned(model, expected_version=model.version - 1)
        return model.to_dto()

    def record_transition(
        self,
        before: Project,
        after: Project,
        entry: StatusHistoryEntry,
    ) -> Project:
        """
        Persist the result of ``apply_transition``.

        Args:
            before: The project state the transition was applied to.
            after: The new project state returned by apply_transition.
            entry: The history entry returned with it.

        Raises:
            ProjectNotFoundError: The project does not exist.
            OptimisticLockError: The stored version is no longer
                ``before.version``.
        """
        model = self._get_by_id(before.id)
        if model.version != before.version:
            raise OptimisticLockError(
                "Project", before.id,
                expected_version=before.version,
                actual_version=model.version,
            )

        model.current_status_id = after.current_status_id
        model.last_edited_at = after.last_edited_at
        model.updated_at = entry.timestamp
        model.version = after.version
        model.history.append(
            StatusHistoryModel.from_dto(entry, position=len(model.history))
        )
        self._flush_versioned(model, expected_version=before.version)

        logger.info(
            "project_status_changed",
            extra={
                "project_id": model.id,
                "from_status_id": entry.from_status_id,
                "to_status_id": entry.to_status_id,
                "version": model.version,
            },
        )
        return model.to_dto()

    def _flush_versioned(self, model: ProjectModel, expected_version: int) -> None:
        try:
            self.session.flush()
        except StaleDataError as exc:
            logger.warning(
                "project_version_conflict",
                extra={"project_id": model.id, "expected_version": expected_version},
            )
            raise OptimisticLockError(
                "Project", model.id, expected_version=expected_version,
            ) from exc
