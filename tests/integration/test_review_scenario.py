"""
End-to-end: Planning -> Review -> Approved.

The same scenario runs twice: once through the pure engines with in-memory
tasks, once through the services and WorkflowExecutor against the database.

1. A regular user moves the project from Planning to Review.
2. Review -> Approved requires admin approval and is gated by a required
   sign-off task.
3. The admin is blocked until the task is completed.
4. The regular user is refused even after the task is done.
5. The admin approves; the history holds three entries.
"""

from statusflow_engines.permissions import (
    NOT_APPROVER_REASON,
    TASKS_INCOMPLETE_REASON,
    can_user_transition,
)
from statusflow_engines.task_gate import InMemoryTaskRepository
from statusflow_engines.transition_apply import apply_transition
from statusflow_engines.transition_resolver import resolve_next_transitions
from statusflow_kernel.domain.project import Project
from statusflow_kernel.domain.task import mark_task_completed
from statusflow_services.workflow_executor import (
    OUTCOME_BLOCKED,
    OUTCOME_NOT_PERMITTED,
    WorkflowExecutor,
)


def test_review_scenario_with_pure_engines(
    review_workflow, review_statuses, admin_user, plain_user, approval_task, deterministic_clock,
):
    project = Project(
        id="p-1", title="Rooftop array", current_status_id="planning",
        workflow_id=review_workflow.id, creator_id=plain_user.id,
    )
    tasks = InMemoryTaskRepository([approval_task])

    (to_review,) = resolve_next_transitions(
        review_workflow, "planning", review_statuses, tasks,
    ).options
    assert can_user_transition(plain_user, to_review.transition, to_review.blocked_by_tasks).allowed
    project, _ = apply_transition(project, to_review.transition, plain_user, deterministic_clock.now())

    (to_approved,) = resolve_next_transitions(
        review_workflow, project.current_status_id, review_statuses, tasks,
    ).options
    assert to_approved.blocked_by_tasks
    blocked = can_user_transition(admin_user, to_approved.transition, to_approved.blocked_by_tasks)
    assert blocked.reason == TASKS_INCOMPLETE_REASON

    deterministic_clock.advance(3600)
    tasks = InMemoryTaskRepository(
        [mark_task_completed(approval_task, plain_user.id, deterministic_clock.now())]
    )
    (to_approved,) = resolve_next_transitions(
        review_workflow, project.current_status_id, review_statuses, tasks,
    ).options
    assert not to_approved.blocked_by_tasks

    refused = can_user_transition(plain_user, to_approved.transition, False)
    assert refused.reason == NOT_APPROVER_REASON
    assert can_user_transition(admin_user, to_approved.transition, False).allowed

    project, entry = apply_transition(
        project, to_approved.transition, admin_user, deterministic_clock.now(),
        tasks_completed=(approval_task.id,),
    )

    assert project.current_status_id == "approved"
    assert project.version == 3
    assert entry.approved_by == admin_user.id
    assert [h.to_status_id for h in project.status_history] == ["review", "approved"]


def test_review_scenario_through_executor(
    session, seeded_project, task_service, deterministic_clock,
):
    executor = WorkflowExecutor(session, clock=deterministic_clock)
    task_service.create_task("Design sign-off", "t-review-approved", "u-plain", task_id="task-signoff")

    assert executor.execute_transition(seeded_project.id, "t-plan-review", "u-plain").success

    blocked = executor.execute_transition(seeded_project.id, "t-review-approved", "u-admin")
    assert blocked.outcome == OUTCOME_BLOCKED

    deterministic_clock.advance(3600)
    task_service.mark_completed("task-signoff", "u-plain")

    refused = executor.execute_transition(seeded_project.id, "t-review-approved", "u-plain")
    assert refused.outcome == OUTCOME_NOT_PERMITTED

    approved = executor.execute_transition(
        seeded_project.id, "t-review-approved", "u-admin", comment="Looks good",
    )

    assert approved.success
    history = approved.project.status_history
    assert [h.to_status_id for h in history] == ["planning", "review", "approved"]
    assert [h.user_id for h in history] == ["u-plain", "u-plain", "u-admin"]
    assert history[-1].approved_by == "u-admin"
    assert history[-1].tasks_completed == ("task-signoff",)
    assert approved.project.version == 3
    assert executor.available_transitions(seeded_project.id).options == ()
