"""
Identifier and role value types.

Every entity id is a distinct ``NewType`` over ``str`` so that a task id
cannot be passed where a transition id is expected.  The aliases cost
nothing at run time; foreign keys are validated at the persistence
boundary (services), never inside the pure engines.
"""

from __future__ import annotations

from enum import Enum
from typing import NewType

StatusId = NewType("StatusId", str)
TransitionId = NewType("TransitionId", str)
TaskId = NewType("TaskId", str)
WorkflowId = NewType("WorkflowId", str)
ProjectId = NewType("ProjectId", str)
UserId = NewType("UserId", str)
HistoryEntryId = NewType("HistoryEntryId", str)


class UserRole(str, Enum):
    """Application roles.  Values double as approver role tags."""

    ADMIN = "admin"
    USER = "user"


# Entity-type tags a status or workflow may be scoped to.
PROJECT_ENTITY_TYPE = "project"
