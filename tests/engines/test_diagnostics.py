"""Tests for the workflow diagnostics pass and orphan task detection."""

from statusflow_engines.graph_validation import diagnose_workflow, find_orphan_tasks
from statusflow_kernel.domain.dtos import DiagnosticSeverity
from statusflow_kernel.domain.task import Task
from statusflow_kernel.domain.workflow import Transition, Workflow


def _t(tid, src, dst, **kwargs) -> Transition:
    return Transition(id=tid, from_status_id=src, to_status_id=dst, **kwargs)


def _wf(statuses, transitions) -> Workflow:
    return Workflow(
        id="wf-diag",
        name="Diagnosed",
        entity_type="project",
        statuses=tuple(statuses),
        transitions=tuple(transitions),
    )


class TestDiagnoseWorkflow:

    def test_healthy_workflow_has_no_issues(self, review_workflow):
        diagnostics = diagnose_workflow(review_workflow)

        assert diagnostics.is_healthy
        assert diagnostics.issues == ()
        assert diagnostics.workflow_id == "wf-review"

    def test_dangling_transition_reported(self):
        diagnostics = diagnose_workflow(_wf(("A", "B"), [_t("t1", "A", "B"), _t("t2", "B", "Z")]))

        dangling = [i for i in diagnostics.errors if i.code == "DANGLING_TRANSITION"]
        assert len(dangling) == 1
        assert dangling[0].transition_id == "t2"
        assert dangling[0].status_id == "Z"

    def test_self_loop_reported_with_cycle(self):
        diagnostics = diagnose_workflow(_wf(("A", "B"), [_t("t1", "A", "B"), _t("t2", "B", "B")]))

        assert "SELF_LOOP" in diagnostics.codes()
        assert "CYCLE" in diagnostics.codes()

    def test_duplicate_id_and_edge(self):
        diagnostics = diagnose_workflow(_wf(("A", "B"), [_t("t1", "A", "B"), _t("t1", "A", "B")]))

        assert "DUPLICATE_TRANSITION_ID" in diagnostics.codes()
        assert "DUPLICATE_EDGE" in diagnostics.codes()

    def test_missing_approvers(self):
        diagnostics = diagnose_workflow(
            _wf(("A", "B"), [_t("t1", "A", "B", requires_approval=True)])
        )
        assert diagnostics.codes() == ("MISSING_APPROVERS",)

    def test_missing_start_or_end(self):
        diagnostics = diagnose_workflow(_wf(("A", "B"), []))

        assert "MISSING_START_OR_END" in diagnostics.codes()

    def test_isolated_status_is_a_warning(self):
        diagnostics = diagnose_workflow(_wf(("A", "B", "C"), [_t("t1", "A", "B")]))

        assert diagnostics.is_healthy
        assert [w.code for w in diagnostics.warnings] == ["ISOLATED_STATUS"]
        assert diagnostics.warnings[0].severity == DiagnosticSeverity.WARNING
        assert diagnostics.warnings[0].status_id == "C"


class TestFindOrphanTasks:

    def test_reports_tasks_of_removed_transitions(self, review_workflow, approval_task):
        stray = Task(id="task-stray", name="Stray", transition_id="t-gone", assigned_user_id="u-1")

        orphans = find_orphan_tasks([review_workflow], [approval_task, stray])

        assert orphans == (stray,)

    def test_no_workflows_orphans_everything(self, approval_task):
        assert find_orphan_tasks([], [approval_task]) == (approval_task,)
