"""
Typed Exception Hierarchy for the statusflow kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

The pure engines never raise for validation, resolution, or permission
outcomes -- those come back as result objects.  Exceptions exist only at the
persistence and execution boundary, where a caller asked for something that
cannot happen (unknown id, referenced status, stale project version).

Every exception:
  1. Has a TYPED class (catch by type, not message)
  2. Has a class-level CODE attribute (machine-readable, API-safe)
  3. Carries structured DATA as attributes (not just a message string)

Example:
    try:
        executor.execute_transition(project_id, transition_id, actor_id)
    except TransitionNotPermittedError as e:
        respond(code=e.code, reason=e.reason)
    except OptimisticLockError:
        reload_and_retry()

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    StatusflowError (base)
    |
    +-- StatusError
    |   +-- StatusNotFoundError
    |   +-- StatusInUseError
    |
    +-- WorkflowError
    |   +-- WorkflowNotFoundError
    |   +-- TransitionNotFoundError
    |   +-- InvalidWorkflowDefinitionError
    |   +-- StatusNotInWorkflowError
    |   +-- DuplicateTransitionIdError
    |
    +-- TaskError
    |   +-- TaskNotFoundError
    |   +-- UnknownTransitionReferenceError
    |   +-- DuplicateTaskIdError
    |
    +-- ProjectError
    |   +-- ProjectNotFoundError
    |
    +-- UserError
    |   +-- UserNotFoundError
    |
    +-- TransitionExecutionError
    |   +-- TransitionMismatchError
    |   +-- TransitionNotAvailableError
    |   +-- TransitionNotPermittedError
    |
    +-- ConcurrencyError
    |   +-- OptimisticLockError
    |
    +-- ImmutabilityError
        +-- ImmutabilityViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                          | When Raised
----------------|-------------------------------|-----------------------------------
Status          | STATUS_NOT_FOUND              | Status id doesn't exist
                | STATUS_IN_USE                 | Delete of a referenced status
----------------|-------------------------------|-----------------------------------
Workflow        | WORKFLOW_NOT_FOUND            | Workflow id doesn't exist
                | TRANSITION_NOT_FOUND          | Transition id not in workflow
                | INVALID_WORKFLOW_DEFINITION   | Validator reported violations
                | STATUS_NOT_IN_WORKFLOW        | Status is not a workflow member
----------------|-------------------------------|-----------------------------------
Task            | TASK_NOT_FOUND                | Task id doesn't exist
                | UNKNOWN_TRANSITION_REFERENCE  | Task points at missing transition
----------------|-------------------------------|-----------------------------------
Project         | PROJECT_NOT_FOUND             | Project id doesn't exist
User            | USER_NOT_FOUND                | User id doesn't exist
----------------|-------------------------------|-----------------------------------
Execution       | TRANSITION_MISMATCH           | Transition doesn't leave current
                | TRANSITION_NOT_AVAILABLE      | Not a legal next transition
                | TRANSITION_NOT_PERMITTED      | Permission evaluator denied
----------------|-------------------------------|-----------------------------------
Concurrency     | OPTIMISTIC_LOCK_CONFLICT      | Project changed since it was read
Immutability    | IMMUTABILITY_VIOLATION        | History entry update/delete
"""

from __future__ import annotations


class StatusflowError(Exception):
    """
    Base exception for all statusflow errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "STATUSFLOW_ERROR"


# Status-related exceptions


class StatusError(StatusflowError):
    """Base exception for status-related errors."""

    code: str = "STATUS_ERROR"


class StatusNotFoundError(StatusError):
    """Status with given ID was not found."""

    code: str = "STATUS_NOT_FOUND"

    def __init__(self, status_id: str):
        self.status_id = status_id
        super().__init__(f"Status not found: {status_id}")


class StatusInUseError(StatusError):
    """
    Status cannot be deleted while a workflow or project references it.

    References are counted across workflow membership, project current
    status, and project status history (from and to sides).
    """

    code: str = "STATUS_IN_USE"

    def __init__(
        self,
        status_id: str,
        workflow_ids: tuple[str, ...] = (),
        project_ids: tuple[str, ...] = (),
    ):
        self.status_id = status_id
        self.workflow_ids = workflow_ids
        self.project_ids = project_ids
        super().__init__(
            f"Status {status_id} is in use by {len(workflow_ids)} workflow(s) "
            f"and {len(project_ids)} project(s)"
        )


# Workflow-related exceptions


class WorkflowError(StatusflowError):
    """Base exception for workflow-related errors."""

    code: str = "WORKFLOW_ERROR"


class WorkflowNotFoundError(WorkflowError):
    """Workflow with given ID was not found."""

    code: str = "WORKFLOW_NOT_FOUND"

    def __init__(self, workflow_id: str):
        self.workflow_id = workflow_id
        super().__init__(f"Workflow not found: {workflow_id}")


class TransitionNotFoundError(WorkflowError):
    """Transition with given ID was not found."""

    code: str = "TRANSITION_NOT_FOUND"

    def __init__(self, transition_id: str, workflow_id: str | None = None):
        self.transition_id = transition_id
        self.workflow_id = workflow_id
        where = f" in workflow {workflow_id}" if workflow_id else ""
        super().__init__(f"Transition not found: {transition_id}{where}")


class InvalidWorkflowDefinitionError(WorkflowError):
    """
    A proposed workflow change failed structural validation.

    ``errors`` holds the validator's human-readable messages in check order.
    """

    code: str = "INVALID_WORKFLOW_DEFINITION"

    def __init__(self, workflow_id: str, errors: list[str] | tuple[str, ...]):
        self.workflow_id = workflow_id
        self.errors = tuple(errors)
        super().__init__(
            f"Invalid definition for workflow {workflow_id}: " + "; ".join(self.errors)
        )


class StatusNotInWorkflowError(WorkflowError):
    """Status is not a member of the workflow's status set."""

    code: str = "STATUS_NOT_IN_WORKFLOW"

    def __init__(self, status_id: str, workflow_id: str):
        self.status_id = status_id
        self.workflow_id = workflow_id
        super().__init__(f"Status {status_id} is not part of workflow {workflow_id}")


class DuplicateTransitionIdError(WorkflowError):
    """A new transition was given an id that is already taken."""

    code: str = "DUPLICATE_TRANSITION_ID"

    def __init__(self, transition_id: str, workflow_id: str | None = None):
        self.transition_id = transition_id
        self.workflow_id = workflow_id
        super().__init__(f"Transition id already in use: {transition_id}")


# Task-related exceptions


class TaskError(StatusflowError):
    """Base exception for task-related errors."""

    code: str = "TASK_ERROR"


class TaskNotFoundError(TaskError):
    """Task with given ID was not found."""

    code: str = "TASK_NOT_FOUND"

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task not found: {task_id}")


class UnknownTransitionReferenceError(TaskError):
    """Task references a transition id that no workflow defines."""

    code: str = "UNKNOWN_TRANSITION_REFERENCE"

    def __init__(self, task_id: str, transition_id: str):
        self.task_id = task_id
        self.transition_id = transition_id
        super().__init__(
            f"Task {task_id} references unknown transition {transition_id}"
        )


class DuplicateTaskIdError(TaskError):
    """A new task was given an id that is already taken."""

    code: str = "DUPLICATE_TASK_ID"

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task id already in use: {task_id}")


# Project-related exceptions


class ProjectError(StatusflowError):
    """Base exception for project-related errors."""

    code: str = "PROJECT_ERROR"


class ProjectNotFoundError(ProjectError):
    """Project with given ID was not found."""

    code: str = "PROJECT_NOT_FOUND"

    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__(f"Project not found: {project_id}")


# User-related exceptions


class UserError(StatusflowError):
    """Base exception for user-related errors."""

    code: str = "USER_ERROR"


class UserNotFoundError(UserError):
    """User with given ID was not found."""

    code: str = "USER_NOT_FOUND"

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User not found: {user_id}")


# Transition execution exceptions


class TransitionExecutionError(StatusflowError):
    """Base exception for failures while executing a transition."""

    code: str = "TRANSITION_EXECUTION_ERROR"


class TransitionMismatchError(TransitionExecutionError):
    """The transition does not start at the project's current status."""

    code: str = "TRANSITION_MISMATCH"

    def __init__(self, project_id: str, transition_id: str, current_status_id: str):
        self.project_id = project_id
        self.transition_id = transition_id
        self.current_status_id = current_status_id
        super().__init__(
            f"Transition {transition_id} does not leave status "
            f"{current_status_id} of project {project_id}"
        )


class TransitionNotAvailableError(TransitionExecutionError):
    """The transition is not among the legal next transitions."""

    code: str = "TRANSITION_NOT_AVAILABLE"

    def __init__(self, project_id: str, transition_id: str):
        self.project_id = project_id
        self.transition_id = transition_id
        super().__init__(
            f"Transition {transition_id} is not available for project {project_id}"
        )


class TransitionNotPermittedError(TransitionExecutionError):
    """The permission evaluator denied the transition for this user."""

    code: str = "TRANSITION_NOT_PERMITTED"

    def __init__(self, project_id: str, transition_id: str, user_id: str, reason: str):
        self.project_id = project_id
        self.transition_id = transition_id
        self.user_id = user_id
        self.reason = reason
        super().__init__(reason)


# Concurrency-related exceptions


class ConcurrencyError(StatusflowError):
    """Base exception for concurrency-related errors."""

    code: str = "CONCURRENCY_ERROR"


class OptimisticLockError(ConcurrencyError):
    """Optimistic locking conflict detected."""

    code: str = "OPTIMISTIC_LOCK_CONFLICT"

    def __init__(
        self,
        entity_type: str,
        entity_id: str,
        expected_version: int | None = None,
        actual_version: int | None = None,
    ):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Optimistic lock conflict on {entity_type} {entity_id}: "
            "entity was modified by another transaction"
        )


# Immutability-related exceptions


class ImmutabilityError(StatusflowError):
    """Base exception for immutability-related errors."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """
    Attempted to modify or delete an immutable record.

    Status history entries are append-only.
    """

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )
