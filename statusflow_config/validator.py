"""
Configuration validator (``statusflow_config.validator``).

Responsibility
--------------
Build-time validation of a ``WorkflowConfigurationSet`` before it is
compiled.  Collects every problem instead of stopping at the first, so an
administrator can fix a catalog in one pass.

Checks
------
* Ids are unique per kind; transition ids are unique across workflows.
* Workflow statuses name catalog statuses; approver users name catalog
  users; user roles are known roles.
* At most one default workflow per entity type.
* Each workflow is free of structural diagnostics errors (duplicate
  edges, dangling endpoints, self loops, cycles, missing start/end,
  approval without approvers).
* Statuses used by a workflow list its entity type (warning only).
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

from statusflow_config.compiler import workflow_from_def
from statusflow_config.schema import WorkflowConfigurationSet
from statusflow_engines.graph_validation import diagnose_workflow
from statusflow_kernel.domain.values import UserRole

_KNOWN_ROLES = frozenset(r.value for r in UserRole)


@dataclass
class ConfigValidationResult:
    """
    Result of configuration validation.

    Contract
    --------
    * ``is_valid`` returns ``True`` only when ``errors`` is empty.
    * Warnings do not block compilation but should be reviewed.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def _check_unique(result: ConfigValidationResult, kind: str, ids: list[str]) -> None:
    for item_id, count in sorted(Counter(ids).items()):
        if count > 1:
            result.add_error(f"Duplicate {kind} id '{item_id}' ({count} definitions)")


def validate_configuration(config: WorkflowConfigurationSet) -> ConfigValidationResult:
    """
    Validate a configuration set.

    Postconditions:
        - Returns a ``ConfigValidationResult``; never raises for content
          problems.
    """
    result = ConfigValidationResult()

    status_ids = {s.id for s in config.statuses}
    user_ids = {u.id for u in config.users}
    statuses_by_id = {s.id: s for s in config.statuses}

    _check_unique(result, "status", [s.id for s in config.statuses])
    _check_unique(result, "user", [u.id for u in config.users])
    _check_unique(result, "workflow", [w.id for w in config.workflows])
    _check_unique(
        result,
        "transition",
        [t.id for w in config.workflows for t in w.transitions],
    )

    for user in config.users:
        if user.role not in _KNOWN_ROLES:
            result.add_error(
                f"User '{user.id}' has unknown role '{user.role}' "
                f"(expected one of {sorted(_KNOWN_ROLES)})"
            )

    defaults = Counter(w.entity_type for w in config.workflows if w.is_default)
    for entity_type, count in sorted(defaults.items()):
        if count > 1:
            result.add_error(
                f"{count} workflows are marked default for entity type '{entity_type}'"
            )

    for workflow in config.workflows:
        prefix = f"Workflow '{workflow.id}'"

        for status_id in workflow.statuses:
            if status_id not in status_ids:
                result.add_error(f"{prefix} references unknown status '{status_id}'")
                continue
            status = statuses_by_id[status_id]
            if status.entity_types and workflow.entity_type not in status.entity_types:
                result.add_warning(
                    f"{prefix}: status '{status_id}' is not scoped to "
                    f"entity type '{workflow.entity_type}'"
                )

        for transition in workflow.transitions:
            for user_id in transition.approver_users:
                if user_id not in user_ids:
                    result.add_error(
                        f"{prefix}: transition '{transition.id}' names unknown "
                        f"approver user '{user_id}'"
                    )
            for role in transition.approver_roles:
                if role not in _KNOWN_ROLES:
                    result.add_warning(
                        f"{prefix}: transition '{transition.id}' names unknown "
                        f"approver role '{role}'"
                    )

        diagnostics = diagnose_workflow(workflow_from_def(workflow))
        for issue in diagnostics.errors:
            result.add_error(f"{prefix}: [{issue.code}] {issue.message}")
        for issue in diagnostics.warnings:
            result.add_warning(f"{prefix}: [{issue.code}] {issue.message}")

    return result
