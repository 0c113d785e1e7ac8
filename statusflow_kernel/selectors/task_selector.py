"""
TaskSelector -- read access to tasks.

Implements ``statusflow_engines.task_gate.TaskRepository`` so the resolver
can gate transitions directly against the database within the caller's
session.
"""

from __future__ import annotations

from sqlalchemy import select

from statusflow_kernel.domain.task import Task
from statusflow_kernel.models.task import TaskModel
from statusflow_kernel.selectors.base import BaseSelector


class TaskSelector(BaseSelector[TaskModel]):

    def get(self, task_id: str) -> Task | None:
        model = self.session.get(TaskModel, task_id)
        return model.to_dto() if model is not None else None

    def list_all(self) -> list[Task]:
        stmt = select(TaskModel).order_by(TaskModel.created_at, TaskModel.id)
        return [m.to_dto() for m in self.session.scalars(stmt)]

    def by_transition(self, transition_id: str) -> list[Task]:
        stmt = (
            select(TaskModel)
            .where(TaskModel.transition_id == transition_id)
            .order_by(TaskModel.created_at, TaskModel.id)
        )
        return [m.to_dto() for m in self.session.scalars(stmt)]

    def get_incomplete_by_transition_id(self, transition_id: str) -> list[Task]:
        stmt = (
            select(TaskModel)
            .where(
                TaskModel.transition_id == transition_id,
                TaskModel.is_completed.is_(False),
            )
            .order_by(TaskModel.created_at, TaskModel.id)
        )
        return [m.to_dto() for m in self.session.scalars(stmt)]

    def completed_ids_for_transition(self, transition_id: str) -> list[str]:
        stmt = (
            select(TaskModel.id)
            .where(
                TaskModel.transition_id == transition_id,
                TaskModel.is_completed.is_(True),
            )
            .order_by(TaskModel.completed_at, TaskModel.id)
        )
        return list(self.session.scalars(stmt))

    def by_assignee(self, user_id: str, *, include_completed: bool = True) -> list[Task]:
        stmt = select(TaskModel).where(TaskModel.assigned_user_id == user_id)
        if not include_completed:
            stmt = stmt.where(TaskModel.is_completed.is_(False))
        stmt = stmt.order_by(TaskModel.deadline, TaskModel.id)
        return [m.to_dto() for m in self.session.scalars(stmt)]
