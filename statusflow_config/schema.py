"""
WorkflowConfigurationSet schema.

Defines the human-authored, reviewable source artifact for workflow
configuration.  YAML fragments are parsed into these types by the loader,
composed by the assembler, and compiled into a CompiledWorkflowCatalog by
the compiler.

Key distinction:
  WorkflowConfigurationSet = source artifact (human-authored, versioned)
  CompiledWorkflowCatalog  = runtime artifact (validated domain objects)
"""

from __future__ import annotations

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Statuses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StatusDef:
    """A status as written in ``statuses.yaml``."""

    id: str
    name: str
    color: str = "#9E9E9E"
    description: str = ""
    entity_types: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UserDef:
    """A user as written in ``users.yaml``.  ``role`` is the raw role tag."""

    id: str
    name: str
    email: str = ""
    role: str = "user"


# ---------------------------------------------------------------------------
# Workflows
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TransitionDef:
    """One edge of a workflow, keyed by status ids."""

    id: str
    from_status: str
    to_status: str
    requires_approval: bool = False
    approver_roles: tuple[str, ...] = ()
    approver_users: tuple[str, ...] = ()
    conditions: tuple[str, ...] = ()


@dataclass(frozen=True)
class WorkflowDef:
    """A workflow template: ordered status ids plus transitions."""

    id: str
    name: str
    entity_type: str = "project"
    statuses: tuple[str, ...] = ()
    transitions: tuple[TransitionDef, ...] = ()
    description: str = ""
    is_default: bool = False


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WorkflowConfigurationSet:
    """
    The complete source artifact for one named configuration set.

    Identity:
        config_id + version uniquely identifies a configuration set.
        checksum is SHA-256 of the canonical serialization of the fragments.
    """

    config_id: str
    version: int
    name: str
    description: str = ""
    statuses: tuple[StatusDef, ...] = ()
    users: tuple[UserDef, ...] = ()
    workflows: tuple[WorkflowDef, ...] = ()
    checksum: str = ""
