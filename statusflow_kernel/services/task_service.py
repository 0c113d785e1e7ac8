"""
Service layer for Task operations.

Tasks gate transitions.  The foreign key from a task to its transition is
checked here at creation and on re-pointing, not by the database, because a
task is allowed to outlive the edge it once gated.

Completion and undo go through the pure domain helpers
(``mark_task_completed`` / ``mark_task_incomplete``) so the flag and both
stamps always move together.  Undo is unrestricted: who may reopen a task
is a caller policy.
"""

from __future__ import annotations

from datetime import date

from statusflow_kernel.db.base import new_id
from statusflow_kernel.domain.task import Task, mark_task_completed, mark_task_incomplete
from statusflow_kernel.exceptions import (
    DuplicateTaskIdError,
    TaskNotFoundError,
    UnknownTransitionReferenceError,
    UserNotFoundError,
)
from statusflow_kernel.logging_config import get_logger
from statusflow_kernel.models.task import TaskModel
from statusflow_kernel.models.user import UserModel
from statusflow_kernel.models.workflow import TransitionModel
from statusflow_kernel.services.base import BaseService

logger = get_logger("services.task")

_EDITABLE_FIELDS = frozenset({
    "name",
    "description",
    "transition_id",
    "assigned_user_id",
    "deadline",
    "is_required",
})


class TaskService(BaseService[TaskModel]):
    """Create, edit, complete and reopen tasks.  Returns Task DTOs."""

    def _get_by_id(self, task_id: str) -> TaskModel:
        model = self.session.get(TaskModel, task_id)
        if model is None:
            raise TaskNotFoundError(task_id)
        return model

    def _require_transition(self, task_id: str, transition_id: str) -> None:
        if self.session.get(TransitionModel, transition_id) is None:
            raise UnknownTransitionReferenceError(task_id, transition_id)

    def _require_user(self, user_id: str) -> None:
        if self.session.get(UserModel, user_id) is None:
            raise UserNotFoundError(user_id)

    def create_task(
        self,
        name: str,
        transition_id: str,
        assigned_user_id: str,
        *,
        description: str = "",
        deadline: date | None = None,
        is_required: bool = True,
        task_id: str | None = None,
    ) -> Task:
        """
        Create a task gating ``transition_id``.

        Raises:
            DuplicateTaskIdError: ``task_id`` is already taken.
            UnknownTransitionReferenceError: No workflow defines the transition.
            UserNotFoundError: The assignee does not exist.
        """
        task_id = task_id or new_id()
        if self.session.get(TaskModel, task_id) is not None:
            raise DuplicateTaskIdError(task_id)
        self._require_transition(task_id, transition_id)
        self._require_user(assigned_user_id)

        now = self.clock.now()
        dto = Task(
            id=task_id,
            name=name,
            description=description,
            transition_id=transition_id,
            assigned_user_id=assigned_user_id,
            deadline=deadline,
            is_required=is_required,
            created_at=now,
            updated_at=now,
        )
        model = TaskModel.from_dto(dto)
        self.session.add(model)
        self.session.flush()
        logger.info(
            "task_created",
            extra={
                "task_id": task_id,
                "transition_id": transition_id,
                "assigned_user_id": assigned_user_id,
                "is_required": is_required,
            },
        )
        return model.to_dto()

    def update_task(self, task_id: str, **changes: object) -> Task:
        """
        Edit task fields other than the completion state.

        Raises:
            TaskNotFoundError: If the task doesn't exist.
            ValueError: If ``changes`` names a field that cannot be edited.
            UnknownTransitionReferenceError / UserNotFoundError: On a bad
                re-point of ``transition_id`` / ``assigned_user_id``.
        """
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update task fields: {sorted(unknown)}")

        model = self._get_by_id(task_id)
        if "transition_id" in changes:
            self._require_transition(task_id, str(changes["transition_id"]))
        if "assigned_user_id" in changes:
            self._require_user(str(changes["assigned_user_id"]))

        for key, value in changes.items():
            setattr(model, key, value)
        model.updated_at = self.clock.now()
        self.session.flush()
        return model.to_dto()

    def delete_task(self, task_id: str) -> None:
        model = self._get_by_id(task_id)
        self.session.delete(model)
        self.session.flush()
        logger.info("task_deleted", extra={"task_id": task_id})

    def mark_completed(self, task_id: str, actor_id: str) -> Task:
        """Complete the task, stamping ``actor_id`` and the clock's now."""
        model = self._get_by_id(task_id)
        updated = mark_task_completed(model.to_dto(), actor_id, self.clock.now())
        model.apply_dto(updated)
        self.session.flush()
        logger.info(
            "task_marked_completed",
            extra={
                "task_id": task_id,
                "transition_id": updated.transition_id,
                "completed_by": actor_id,
            },
        )
        return updated

    def mark_incomplete(self, task_id: str) -> Task:
        """Reopen the task and clear both completion stamps."""
        model = self._get_by_id(task_id)
        updated = mark_task_incomplete(model.to_dto(), self.clock.now())
        model.apply_dto(updated)
        self.session.flush()
        logger.info(
            "task_marked_incomplete",
            extra={"task_id": task_id, "transition_id": updated.transition_id},
        )
        return updated
