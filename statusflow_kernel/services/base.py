"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Provides the common constructor and session-handling contract for
    every write-side service in the kernel layer.  Concrete services
    receive a SQLAlchemy ``Session`` and use ``session.flush()`` --
    never ``session.commit()``.

Architecture position:
    Kernel > Services -- imperative shell around the pure engines.
    Services own the persistence boundary: foreign-key checks, referential
    integrity and the optimistic version check live here, never in engines.

Invariants enforced:
    - Transaction boundaries: services flush within the caller's
      transaction and never commit or rollback themselves.  The caller
      (WorkflowExecutor, session_scope(), or the test harness) owns
      commit/rollback.
    - Time comes from the injected Clock, so tests are deterministic.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from statusflow_kernel.db.base import Base
from statusflow_kernel.domain.clock import Clock, SystemClock

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for all kernel services.

    Contract:
        Accepts a SQLAlchemy ``Session`` from the caller and uses
        ``session.flush()`` to persist changes within the active
        transaction.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
        - Does NOT provide query-only methods -- those belong in
          ``statusflow_kernel/selectors/``.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        self.session = session
        self.clock = clock or SystemClock()
