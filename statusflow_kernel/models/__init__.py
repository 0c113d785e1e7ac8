"""SQLAlchemy ORM models.  Importing this package registers every table."""

from statusflow_kernel.models.project import ProjectModel, StatusHistoryModel
from statusflow_kernel.models.status import StatusModel
from statusflow_kernel.models.task import TaskModel
from statusflow_kernel.models.user import UserModel
from statusflow_kernel.models.workflow import (
    TransitionModel,
    WorkflowModel,
    WorkflowStatusModel,
)

__all__ = [
    "StatusModel",
    "WorkflowModel",
    "WorkflowStatusModel",
    "TransitionModel",
    "TaskModel",
    "UserModel",
    "ProjectModel",
    "StatusHistoryModel",
]
