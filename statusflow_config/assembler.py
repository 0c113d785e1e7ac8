"""
statusflow_config.assembler -- composes YAML fragments into one ConfigurationSet.

Responsibility:
    Administrators edit small YAML fragments.  This module composes them
    into a single ``WorkflowConfigurationSet``.  Runtime only ever sees the
    final ``CompiledWorkflowCatalog``; this module is build/test tooling.

Fragment structure::

    sets/default/
    +-- root.yaml        # Identity: config_id, version, name
    +-- statuses.yaml    # Shared status catalog
    +-- users.yaml       # Users (approvers, assignees)
    +-- workflows.yaml   # Workflows with their transitions

Invariants enforced:
    - ``root.yaml`` must exist in every fragment directory.
    - A deterministic SHA-256 checksum is computed over all assembled data.
    - All parsed structures are immutable frozen dataclasses.

Failure modes:
    - ``AssemblyError`` -- fragment directory or ``root.yaml`` missing, or
      a mandatory field absent.
    - ``yaml.YAMLError`` (propagated from loader) -- invalid YAML syntax.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from statusflow_config.loader import (
    compute_checksum,
    load_yaml_file,
    parse_status,
    parse_user,
    parse_workflow,
)
from statusflow_config.schema import WorkflowConfigurationSet
from statusflow_kernel.exceptions import StatusflowError


class AssemblyError(StatusflowError):
    """Error during fragment assembly."""

    code: str = "ASSEMBLY_FAILED"


def _load_list(fragment_dir: Path, filename: str, key: str) -> list[dict[str, Any]]:
    path = fragment_dir / filename
    if not path.exists():
        return []
    return load_yaml_file(path).get(key, []) or []


def assemble_from_directory(fragment_dir: Path) -> WorkflowConfigurationSet:
    """Compose fragments from a directory into one ConfigurationSet.

    Args:
        fragment_dir: Path to the fragment directory (e.g.,
            ``statusflow_config/sets/default/``).

    Returns:
        Assembled ``WorkflowConfigurationSet`` with a deterministic checksum.

    Raises:
        AssemblyError: If required fragments are missing or malformed.
    """
    if not fragment_dir.is_dir():
        raise AssemblyError(f"Fragment directory not found: {fragment_dir}")

    root_path = fragment_dir / "root.yaml"
    if not root_path.exists():
        raise AssemblyError(f"root.yaml not found in {fragment_dir}")
    root_data = load_yaml_file(root_path)

    raw_statuses = _load_list(fragment_dir, "statuses.yaml", "statuses")
    raw_users = _load_list(fragment_dir, "users.yaml", "users")
    raw_workflows = _load_list(fragment_dir, "workflows.yaml", "workflows")

    try:
        config_id = str(root_data["config_id"])
        statuses = tuple(parse_status(s) for s in raw_statuses)
        users = tuple(parse_user(u) for u in raw_users)
        workflows = tuple(parse_workflow(w) for w in raw_workflows)
    except (KeyError, ValueError) as exc:
        raise AssemblyError(f"Malformed fragment in {fragment_dir}: {exc!r}") from exc

    checksum = compute_checksum({
        "root": root_data,
        "statuses": raw_statuses,
        "users": raw_users,
        "workflows": raw_workflows,
    })

    return WorkflowConfigurationSet(
        config_id=config_id,
        version=int(root_data.get("version", 1)),
        name=root_data.get("name", config_id),
        description=root_data.get("description", "") or "",
        statuses=statuses,
        users=users,
        workflows=workflows,
        checksum=checksum,
    )
