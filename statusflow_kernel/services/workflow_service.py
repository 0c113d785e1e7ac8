"""
WorkflowService -- write side of workflow definitions.

Responsibility:
    Persist workflows, their status membership and their transitions, with
    every transition add or edit gated by the pure graph validator.

Architecture position:
    Kernel > Services.  Calls statusflow_engines.graph_validation; returns
    frozen Workflow / Transition DTOs.

Invariants enforced:
    - No transition is saved unless validate_transition_against_workflow
      returns no errors for the full proposed transition set.
    - Transition endpoints are members of the workflow's status set.
    - At most one default workflow per entity type: set_default clears the
      previous default in the same flush sequence, and a partial unique
      index backs it up.

Failure modes:
    - WorkflowNotFoundError, TransitionNotFoundError, StatusNotFoundError.
    - StatusNotInWorkflowError: an endpoint is not a member of the workflow.
    - InvalidWorkflowDefinitionError: the validator reported violations;
      ``errors`` carries its messages.
    - StatusInUseError: removing a status still used by the workflow.
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select

from statusflow_engines.graph_validation import (
    diagnose_workflow,
    validate_transition_against_workflow,
    validate_workflow_graph,
)
from statusflow_kernel.db.base import new_id
from statusflow_kernel.domain.dtos import WorkflowDiagnostics
from statusflow_kernel.domain.values import PROJECT_ENTITY_TYPE
from statusflow_kernel.domain.workflow import Transition, TransitionDraft, Workflow
from statusflow_kernel.exceptions import (
    DuplicateTransitionIdError,
    InvalidWorkflowDefinitionError,
    StatusInUseError,
    StatusNotFoundError,
    StatusNotInWorkflowError,
    TransitionNotFoundError,
    WorkflowNotFoundError,
)
from statusflow_kernel.logging_config import get_logger
from statusflow_kernel.models.project import ProjectModel
from statusflow_kernel.models.status import StatusModel
from statusflow_kernel.models.workflow import (
    TransitionModel,
    WorkflowModel,
    WorkflowStatusModel,
)
from statusflow_kernel.selectors.task_selector import TaskSelector
from statusflow_kernel.services.base import BaseService

logger = get_logger("services.workflow")


class WorkflowService(BaseService[WorkflowModel]):
    """Create and edit workflows.  All writes flush; none commit."""

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _get_by_id(self, workflow_id: str) -> WorkflowModel:
        model = self.session.get(WorkflowModel, workflow_id)
        if model is None:
            raise WorkflowNotFoundError(workflow_id)
        return model

    def _get_transition(self, model: WorkflowModel, transition_id: str) -> TransitionModel:
        for t in model.transitions:
            if t.id == transition_id:
                return t
        raise TransitionNotFoundError(transition_id, workflow_id=model.id)

    def _require_unused_transition_id(self, transition_id: str, workflow_id: str) -> None:
        if self.session.get(TransitionModel, transition_id) is not None:
            raise DuplicateTransitionIdError(transition_id, workflow_id=workflow_id)

    def _require_statuses_exist(self, status_ids: Iterable[str]) -> None:
        for status_id in status_ids:
            if self.session.get(StatusModel, status_id) is None:
                raise StatusNotFoundError(status_id)

    def _require_members(self, model: WorkflowModel, candidate: Transition) -> None:
        members = set(model.status_ids)
        for endpoint in (candidate.from_status_id, candidate.to_status_id):
            if endpoint not in members:
                raise StatusNotInWorkflowError(endpoint, model.id)

    def _touch(self, model: WorkflowModel) -> None:
        model.updated_at = self.clock.now()

    # ------------------------------------------------------------------
    # Workflows
    # ------------------------------------------------------------------

    def create_workflow(
        self,
        name: str,
        entity_type: str = PROJECT_ENTITY_TYPE,
        statuses: Iterable[str] = (),
        transitions: Iterable[Transition] = (),
        *,
        description: str = "",
        is_default: bool = False,
        workflow_id: str | None = None,
    ) -> Workflow:
        """
        Create a workflow with its ordered statuses and initial transitions.

        A workflow may start with statuses only; the graph checks run once
        transitions are supplied.

        Raises:
            StatusNotFoundError: A listed status does not exist.
            DuplicateTransitionIdError: Two transitions share an id, or an
                id is already taken.
            StatusNotInWorkflowError: A transition endpoint is not listed.
            InvalidWorkflowDefinitionError: The transition graph is invalid.
        """
        status_ids = tuple(statuses)
        now = self.clock.now()
        dto = Workflow(
            id=workflow_id or new_id(),
            name=name,
            entity_type=entity_type,
            statuses=status_ids,
            transitions=tuple(transitions),
            description=description,
            is_default=is_default,
            created_at=now,
            updated_at=now,
        )

        self._require_statuses_exist(status_ids)
        members = set(status_ids)
        seen_ids: set[str] = set()
        for t in dto.transitions:
            if t.id in seen_ids:
                raise DuplicateTransitionIdError(t.id, workflow_id=dto.id)
            seen_ids.add(t.id)
            self._require_unused_transition_id(t.id, dto.id)
            for endpoint in (t.from_status_id, t.to_status_id):
                if endpoint not in members:
                    raise StatusNotInWorkflowError(endpoint, dto.id)

        if dto.transitions:
            result = validate_workflow_graph(dto)
            if not result.valid:
                logger.warning(
                    "workflow_rejected",
                    extra={"workflow_id": dto.id, "errors": list(result.errors)},
                )
                raise InvalidWorkflowDefinitionError(dto.id, result.errors)

        if is_default:
            self._clear_defaults(entity_type, keep_id=None)

        model = WorkflowModel.from_dto(dto)
        self.session.add(model)
        self.session.flush()
        logger.info(
            "workflow_created",
            extra={
                "workflow_id": model.id,
                "entity_type": entity_type,
                "status_count": len(status_ids),
                "transition_count": len(dto.transitions),
                "is_default": is_default,
            },
        )
        return model.to_dto()

    def update_workflow(
        self,
        workflow_id: str,
        *,
        name: str | None = None,
        description: str | None = None,
    ) -> Workflow:
        model = self._get_by_id(workflow_id)
        if name is not None:
            model.name = name
        if description is not None:
            model.description = description
        self._touch(model)
        self.session.flush()
        return model.to_dto()

    def diagnose(self, workflow_id: str) -> WorkflowDiagnostics:
        """Run the diagnostics pass over the stored workflow."""
        return diagnose_workflow(self._get_by_id(workflow_id).to_dto())

    # ------------------------------------------------------------------
    # Status membership
    # ------------------------------------------------------------------

    def add_status(self, workflow_id: str, status_id: str) -> Workflow:
        """Append ``status_id`` to the workflow's ordered status list (idempotent)."""
        model = self._get_by_id(workflow_id)
        self._require_statuses_exist([status_id])
        if status_id not in model.status_ids:
            position = max((link.position for link in model.status_links), default=-1) + 1
            model.status_links.append(
                WorkflowStatusModel(status_id=status_id, position=position)
            )
            self._touch(model)
            self.session.flush()
        return model.to_dto()

    def remove_status(self, workflow_id: str, status_id: str) -> Workflow:
        """
        Remove ``status_id`` from the workflow.

        Raises:
            StatusNotInWorkflowError: The status is not a member.
            StatusInUseError: A transition touches it or a project of this
                workflow currently holds it.
        """
        model = self._get_by_id(workflow_id)
        link = next((l for l in model.status_links if l.status_id == status_id), None)
        if link is None:
            raise StatusNotInWorkflowError(status_id, workflow_id)

        touching = any(status_id in (t.from_status_id, t.to_status_id) for t in model.transitions)
        project_ids = tuple(self.session.scalars(
            select(ProjectModel.id).where(
                ProjectModel.workflow_id == workflow_id,
                ProjectModel.current_status_id == status_id,
            )
        ))
        if touching or project_ids:
            raise StatusInUseError(
                status_id,
                workflow_ids=(workflow_id,) if touching else (),
                project_ids=project_ids,
            )

        model.status_links.remove(link)
        self._touch(model)
        self.session.flush()
        return model.to_dto()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _validate_or_raise(
        self,
        model: WorkflowModel,
        proposed: list[Transition],
        candidate: Transition,
        editing_id: str | None,
    ) -> None:
        result = validate_transition_against_workflow(
            model.to_dto(), proposed, candidate, editing_id,
        )
        if not result.valid:
            logger.warning(
                "transition_rejected",
                extra={
                    "workflow_id": model.id,
                    "transition_id": candidate.id,
                    "editing_id": editing_id,
                    "errors": list(result.errors),
                },
            )
            raise InvalidWorkflowDefinitionError(model.id, result.errors)

    def add_transition(
        self,
        workflow_id: str,
        draft: TransitionDraft,
        *,
        transition_id: str | None = None,
    ) -> Transition:
        """
        Validate and append a new transition.

        Raises:
            DuplicateTransitionIdError: ``transition_id`` is already taken.
            StatusNotInWorkflowError: An endpoint is not a member.
            InvalidWorkflowDefinitionError: The validator rejected the change.
        """
        model = self._get_by_id(workflow_id)
        candidate = draft.to_transition(transition_id or new_id())
        self._require_unused_transition_id(candidate.id, workflow_id)
        self._require_members(model, candidate)

        proposed = [t.to_dto() for t in model.transitions] + [candidate]
        self._validate_or_raise(model, proposed, candidate, editing_id=None)

        position = max((t.position for t in model.transitions), default=-1) + 1
        model.transitions.append(TransitionModel.from_dto(candidate, position=position))
        self._touch(model)
        self.session.flush()
        logger.info(
            "transition_added",
            extra={
                "workflow_id": workflow_id,
                "transition_id": candidate.id,
                "from_status_id": candidate.from_status_id,
                "to_status_id": candidate.to_status_id,
                "requires_approval": candidate.requires_approval,
            },
        )
        return candidate

    def update_transition(
        self,
        workflow_id: str,
        transition_id: str,
        draft: TransitionDraft,
    ) -> Transition:
        """
        Validate and replace the fields of an existing transition.

        The transition keeps its id, so tasks attached to it stay attached.

        Raises:
            TransitionNotFoundError: No such transition in this workflow.
            StatusNotInWorkflowError: An endpoint is not a member.
            InvalidWorkflowDefinitionError: The validator rejected the change.
        """
        model = self._get_by_id(workflow_id)
        target = self._get_transition(model, transition_id)
        candidate = draft.to_transition(transition_id)
        self._require_members(model, candidate)

        proposed = [
            candidate if t.id == transition_id else t.to_dto()
            for t in model.transitions
        ]
        self._validate_or_raise(model, proposed, candidate, editing_id=transition_id)

        target.apply_dto(candidate)
        self._touch(model)
        self.session.flush()
        logger.info(
            "transition_updated",
            extra={"workflow_id": workflow_id, "transition_id": transition_id},
        )
        return candidate

    def remove_transition(self, workflow_id: str, transition_id: str) -> None:
        """
        Delete a transition.

        Tasks attached to it are left in place; they no longer gate anything
        and show up in ``find_orphan_tasks``.
        """
        model = self._get_by_id(workflow_id)
        target = self._get_transition(model, transition_id)
        model.transitions.remove(target)
        self._touch(model)
        self.session.flush()

        orphaned = TaskSelector(self.session).by_transition(transition_id)
        logger.info(
            "transition_removed",
            extra={
                "workflow_id": workflow_id,
                "transition_id": transition_id,
                "orphaned_task_count": len(orphaned),
            },
        )
        if orphaned:
            logger.warning(
                "tasks_orphaned",
                extra={
                    "transition_id": transition_id,
                    "task_ids": [t.id for t in orphaned],
                },
            )

    # ------------------------------------------------------------------
    # Default workflow
    # ------------------------------------------------------------------

    def _clear_defaults(self, entity_type: str, keep_id: str | None) -> list[str]:
        stmt = select(WorkflowModel).where(
            WorkflowModel.entity_type == entity_type,
            WorkflowModel.is_default.is_(True),
        )
        cleared: list[str] = []
        for other in self.session.scalars(stmt):
            if other.id == keep_id:
                continue
            other.is_default = False
            self._touch(other)
            cleared.append(other.id)
        # Flush before the new default is set so the partial unique index
        # never sees two defaults.
        self.session.flush()
        return cleared

    def set_default(self, workflow_id: str) -> Workflow:
        """Make ``workflow_id`` the default for its entity type."""
        model = self._get_by_id(workflow_id)
        cleared = self._clear_defaults(model.entity_type, keep_id=model.id)
        if not model.is_default:
            model.is_default = True
            self._touch(model)
            self.session.flush()
        logger.info(
            "default_workflow_changed",
            extra={
                "workflow_id": workflow_id,
                "entity_type": model.entity_type,
                "previous_default_ids": cleared,
            },
        )
        return model.to_dto()

    def clear_default(self, workflow_id: str) -> Workflow:
        model = self._get_by_id(workflow_id)
        if model.is_default:
            model.is_default = False
            self._touch(model)
            self.session.flush()
            logger.info(
                "default_workflow_cleared",
                extra={"workflow_id": workflow_id, "entity_type": model.entity_type},
            )
        return model.to_dto()
