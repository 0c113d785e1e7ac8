"""Read-only selectors.  Every selector returns frozen domain DTOs."""

from statusflow_kernel.selectors.base import BaseSelector
from statusflow_kernel.selectors.project_selector import ProjectSelector
from statusflow_kernel.selectors.status_selector import StatusSelector
from statusflow_kernel.selectors.task_selector import TaskSelector
from statusflow_kernel.selectors.user_selector import UserSelector
from statusflow_kernel.selectors.workflow_selector import WorkflowSelector

__all__ = [
    "BaseSelector",
    "ProjectSelector",
    "StatusSelector",
    "TaskSelector",
    "UserSelector",
    "WorkflowSelector",
]
