"""
Canonical workflow types (``statusflow_kernel.domain.workflow``).

Responsibility
--------------
Pure value objects for workflow state machines: ``Status`` (a node),
``Transition`` (a directed, optionally approval-gated edge) and
``Workflow`` (an ordered status set plus its transitions, scoped to one
entity type).

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  No imports
from ``db/``, ``models/``, ``services/``, ``selectors/``, or outer layers.

Invariants (checked by ``statusflow_engines.graph_validation``, not here)
-------------------------------------------------------------------------
* ``from_status_id != to_status_id``.
* At most one transition per ``(from_status_id, to_status_id)`` pair.
* Transition endpoints are members of ``Workflow.statuses``.
* The transition graph is acyclic.
* With more than one status there is a start and an end status.
* When ``requires_approval=True``, ``approver_roles`` or
  ``approver_user_ids`` is non-empty.

Constructors accept invalid graphs on purpose: stored data may be stale,
and the resolver and validator must stay total over it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from statusflow_kernel.domain.values import (
    StatusId,
    TransitionId,
    UserId,
    WorkflowId,
)


@dataclass(frozen=True)
class Status:
    """A named, colored state label usable by one or more entity types."""

    id: StatusId
    name: str
    color: str = "#9E9E9E"
    description: str = ""
    entity_types: tuple[str, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def applies_to(self, entity_type: str) -> bool:
        return entity_type in self.entity_types


@dataclass(frozen=True)
class Transition:
    """A directed edge between two statuses of one workflow.

    Contract: frozen.  Tasks gating this transition reference it through
    ``Task.transition_id``; they are not embedded here.  ``conditions`` is
    reserved and never evaluated.
    """

    id: TransitionId
    from_status_id: StatusId
    to_status_id: StatusId
    requires_approval: bool = False
    approver_roles: tuple[str, ...] = ()
    approver_user_ids: tuple[UserId, ...] = ()
    conditions: tuple[str, ...] = ()

    @property
    def edge(self) -> tuple[StatusId, StatusId]:
        return (self.from_status_id, self.to_status_id)


@dataclass(frozen=True)
class Workflow:
    """A state machine template for one entity type.

    Contract: frozen.  ``statuses`` keeps the administrator's ordering; the
    first entry is the conventional starting status for new entities.
    """

    id: WorkflowId
    name: str
    entity_type: str
    statuses: tuple[StatusId, ...] = ()
    transitions: tuple[Transition, ...] = ()
    description: str = ""
    is_default: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def status_set(self) -> frozenset[StatusId]:
        return frozenset(self.statuses)

    def get_transition(self, transition_id: str) -> Transition | None:
        """Return the transition with this id, or None."""
        for transition in self.transitions:
            if transition.id == transition_id:
                return transition
        return None

    def outgoing(self, status_id: str) -> tuple[Transition, ...]:
        """Transitions leaving ``status_id``, in stored order."""
        return tuple(t for t in self.transitions if t.from_status_id == status_id)

    @property
    def initial_status_id(self) -> StatusId | None:
        return self.statuses[0] if self.statuses else None


@dataclass(frozen=True)
class TransitionDraft:
    """Editable transition fields before an id is assigned.

    Used by ``WorkflowService.add_transition`` so callers need not invent
    ids for new edges.
    """

    from_status_id: StatusId
    to_status_id: StatusId
    requires_approval: bool = False
    approver_roles: tuple[str, ...] = ()
    approver_user_ids: tuple[UserId, ...] = ()
    conditions: tuple[str, ...] = ()

    def to_transition(self, transition_id: TransitionId) -> Transition:
        return Transition(
            id=transition_id,
            from_status_id=self.from_status_id,
            to_status_id=self.to_status_id,
            requires_approval=self.requires_approval,
            approver_roles=self.approver_roles,
            approver_user_ids=self.approver_user_ids,
            conditions=self.conditions,
        )
