"""
Configuration Loader (``statusflow_config.loader``).

Responsibility
--------------
Loads individual YAML fragment files and parses them into typed
``statusflow_config.schema`` dataclass instances.  This is **build/test
tooling only** -- no service or executor should call this directly.  The
single public entry point for runtime config is
``statusflow_config.get_active_config()``.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  The loader is consumed by
``statusflow_config.assembler`` during configuration set assembly.  It has
no dependency on kernel services or engines.

Invariants enforced
-------------------
* Parse errors raise ``ValueError`` or ``KeyError``; required fields
  (``id``, ``name``, transition endpoints) never get silent defaults.
* Every parsed object is a frozen dataclass from ``schema.py``.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys in parsed dict  -> ``KeyError`` propagates.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from statusflow_config.schema import StatusDef, TransitionDef, UserDef, WorkflowDef
from statusflow_kernel.utils.hashing import hash_payload


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Postconditions:
        - Returns a ``dict`` (possibly empty if the YAML is empty).
    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _str_tuple(value: Any, field_name: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ValueError(f"{field_name} must be a list, got {value!r}")
    return tuple(str(v) for v in value)


def parse_status(data: dict[str, Any]) -> StatusDef:
    """Parse a StatusDef from a dict."""
    return StatusDef(
        id=str(data["id"]),
        name=data["name"],
        color=data.get("color", "#9E9E9E"),
        description=data.get("description", "") or "",
        entity_types=_str_tuple(data.get("entity_types"), "entity_types"),
    )


def parse_user(data: dict[str, Any]) -> UserDef:
    """Parse a UserDef from a dict."""
    return UserDef(
        id=str(data["id"]),
        name=data["name"],
        email=data.get("email", "") or "",
        role=str(data.get("role", "user")),
    )


def parse_transition(data: dict[str, Any]) -> TransitionDef:
    """
    Parse a ``TransitionDef`` from a dict.

    Raises:
        KeyError: if ``id``, ``from`` or ``to`` is missing.
    """
    return TransitionDef(
        id=str(data["id"]),
        from_status=str(data["from"]),
        to_status=str(data["to"]),
        requires_approval=bool(data.get("requires_approval", False)),
        approver_roles=_str_tuple(data.get("approver_roles"), "approver_roles"),
        approver_users=_str_tuple(data.get("approver_users"), "approver_users"),
        conditions=_str_tuple(data.get("conditions"), "conditions"),
    )


def parse_workflow(data: dict[str, Any]) -> WorkflowDef:
    """
    Parse a ``WorkflowDef`` from a dict.

    Preconditions:
        - ``data`` must contain at minimum ``id`` and ``name``.
    Raises:
        KeyError: if required keys are missing.
        ValueError: if a list field is given as a scalar.
    """
    return WorkflowDef(
        id=str(data["id"]),
        name=data["name"],
        entity_type=data.get("entity_type", "project"),
        statuses=_str_tuple(data.get("statuses"), "statuses"),
        transitions=tuple(parse_transition(t) for t in data.get("transitions", []) or []),
        description=data.get("description", "") or "",
        is_default=bool(data.get("is_default", False)),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Postconditions:
        - Identical ``data`` always produces identical checksums
          (deterministic), independent of key order.
    """
    return hash_payload(data)
