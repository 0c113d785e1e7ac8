"""
Tests for the YAML configuration pipeline.

Covers:
- The shipped default set loads, validates and compiles
- Deterministic checksums
- Validator findings (duplicates, dangling references, defaults, graph errors)
- Assembly failures
- Database URL resolution
"""

import textwrap
from pathlib import Path

import pytest

from statusflow_config import (
    DEFAULT_DATABASE_URL,
    AssemblyError,
    get_active_config,
    get_database_url,
)
from statusflow_config.assembler import assemble_from_directory
from statusflow_config.loader import load_yaml_file, parse_transition, parse_workflow
from statusflow_config.validator import validate_configuration
from statusflow_kernel.domain.values import UserRole


def _write_set(root: Path, *, statuses: str, workflows: str, users: str = "users: []\n") -> Path:
    set_dir = root / "custom"
    set_dir.mkdir()
    (set_dir / "root.yaml").write_text("config_id: custom\nversion: 3\nname: Custom\n")
    (set_dir / "statuses.yaml").write_text(textwrap.dedent(statuses))
    (set_dir / "users.yaml").write_text(textwrap.dedent(users))
    (set_dir / "workflows.yaml").write_text(textwrap.dedent(workflows))
    return set_dir


STATUSES = """\
statuses:
  - id: open
    name: Open
    entity_types: [project]
  - id: closed
    name: Closed
    entity_types: [project]
"""


class TestDefaultSet:

    def test_loads_and_compiles(self):
        catalog = get_active_config()

        assert catalog.config_id == "default"
        assert len(catalog.statuses) == 5
        assert len(catalog.workflows) == 2
        assert catalog.default_workflow("project").id == "workflow-standard"
        assert catalog.get_status("status-planning").name == "Planning"

    def test_transitions_compiled_to_domain(self):
        workflow = get_active_config().get_workflow("workflow-standard")
        final = workflow.get_transition("trans-ready-completed")

        assert final.requires_approval
        assert final.approver_roles == ("admin",)
        assert final.approver_user_ids == ("user-manager",)

    def test_users_compiled_with_roles(self):
        catalog = get_active_config()
        roles = {u.id: u.role for u in catalog.users}
        assert roles["user-admin"] is UserRole.ADMIN

    def test_checksum_is_deterministic(self):
        assert get_active_config().checksum == get_active_config().checksum
        assert len(get_active_config().checksum) == 64

    def test_emits_config_trace(self, captured_logs):
        catalog = get_active_config()

        traces = [r for r in captured_logs() if r["message"] == "STATUSFLOW_CONFIG_TRACE"]
        assert traces[0]["checksum"] == catalog.checksum
        assert traces[0]["workflow_count"] == 2

    def test_missing_set(self):
        with pytest.raises(FileNotFoundError):
            get_active_config("no-such-set")


class TestCustomSets:

    def test_valid_custom_set(self, tmp_path):
        _write_set(
            tmp_path,
            statuses=STATUSES,
            workflows="""\
            workflows:
              - id: wf
                name: Simple
                is_default: true
                statuses: [open, closed]
                transitions:
                  - {id: t-close, from: open, to: closed}
            """,
        )
        catalog = get_active_config("custom", config_dir=tmp_path)

        assert catalog.version == 3
        assert catalog.default_workflow().transitions[0].edge == ("open", "closed")

    def test_cycle_fails_validation(self, tmp_path):
        _write_set(
            tmp_path,
            statuses=STATUSES,
            workflows="""\
            workflows:
              - id: wf
                name: Loop
                statuses: [open, closed]
                transitions:
                  - {id: t-a, from: open, to: closed}
                  - {id: t-b, from: closed, to: open}
            """,
        )
        with pytest.raises(ValueError, match="CYCLE"):
            get_active_config("custom", config_dir=tmp_path)

    def test_validator_collects_every_problem(self, tmp_path):
        set_dir = _write_set(
            tmp_path,
            statuses=STATUSES + "  - {id: open, name: Again}\n",
            users="users:\n  - {id: u-1, name: One, role: superuser}\n",
            workflows="""\
            workflows:
              - id: wf-a
                name: A
                is_default: true
                statuses: [open, ghost]
                transitions:
                  - id: t-1
                    from: open
                    to: ghost
                    requires_approval: true
                    approver_users: [u-missing]
              - id: wf-b
                name: B
                is_default: true
                statuses: [open, closed]
                transitions:
                  - {id: t-1, from: open, to: closed}
            """,
        )
        result = validate_configuration(assemble_from_directory(set_dir))
        text = "\n".join(result.errors)

        assert not result.is_valid
        assert "Duplicate status id 'open'" in text
        assert "Duplicate transition id 't-1'" in text
        assert "unknown role 'superuser'" in text
        assert "2 workflows are marked default" in text
        assert "unknown status 'ghost'" in text
        assert "unknown approver user 'u-missing'" in text

    def test_entity_type_mismatch_is_warning(self, tmp_path):
        set_dir = _write_set(
            tmp_path,
            statuses=STATUSES,
            workflows="""\
            workflows:
              - id: wf
                name: Campaign
                entity_type: campaign
                statuses: [open, closed]
                transitions:
                  - {id: t-close, from: open, to: closed}
            """,
        )
        result = validate_configuration(assemble_from_directory(set_dir))

        assert result.is_valid
        assert len(result.warnings) == 2

    def test_missing_root_yaml(self, tmp_path):
        (tmp_path / "broken").mkdir()
        with pytest.raises(AssemblyError):
            assemble_from_directory(tmp_path / "broken")

    def test_malformed_fragment(self, tmp_path):
        set_dir = _write_set(
            tmp_path,
            statuses="statuses:\n  - {name: No id}\n",
            workflows="workflows: []\n",
        )
        with pytest.raises(AssemblyError):
            assemble_from_directory(set_dir)


class TestLoader:

    def test_empty_yaml_is_empty_dict(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_yaml_file(path) == {}

    def test_parse_transition_defaults(self):
        t = parse_transition({"id": "t", "from": "a", "to": "b"})

        assert not t.requires_approval
        assert t.approver_roles == ()
        assert t.conditions == ()

    def test_scalar_list_field_rejected(self):
        with pytest.raises(ValueError):
            parse_workflow({"id": "wf", "name": "W", "statuses": "open"})


class TestDatabaseUrl:

    def test_default(self, monkeypatch):
        monkeypatch.delenv("STATUSFLOW_DATABASE_URL", raising=False)
        assert get_database_url() == DEFAULT_DATABASE_URL

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("STATUSFLOW_DATABASE_URL", "postgresql://u:p@db/statusflow")
        assert get_database_url() == "postgresql://u:p@db/statusflow"
