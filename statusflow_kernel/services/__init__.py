"""Services for the statusflow kernel (write side)."""

from statusflow_kernel.services.catalog_seeder import SeedResult, seed_catalog
from statusflow_kernel.services.project_service import PROJECT_CREATED_COMMENT, ProjectService
from statusflow_kernel.services.status_service import StatusService
from statusflow_kernel.services.task_service import TaskService
from statusflow_kernel.services.user_service import UserService
from statusflow_kernel.services.workflow_service import WorkflowService

__all__ = [
    "PROJECT_CREATED_COMMENT",
    "ProjectService",
    "SeedResult",
    "StatusService",
    "TaskService",
    "UserService",
    "WorkflowService",
    "seed_catalog",
]
