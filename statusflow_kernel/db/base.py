"""
Module: statusflow_kernel.db.base
Responsibility: Declarative base classes for all SQLAlchemy ORM models.  Provides
    the string primary key convention, portable column types (timezone-safe
    datetimes and JSON-backed tuples), and the TrackedBase mixin for audit
    timestamps.
Architecture position: Kernel > DB.  This is the lowest-level import target
    within the kernel.  ALL model files import from here.  This module MUST NOT
    import from models/, services/, selectors/, domain/, or outer layers.

Invariants enforced:
    - String primary keys: ids are caller-supplied strings (configuration
      catalogs use readable ids such as ``st-planning``); a uuid4 string is
      generated when none is given.
    - Timestamps are timezone-aware on the way out, on every backend.
      SQLite drops tzinfo on storage; UTCDateTime restores UTC.
    - Tuple fields (approver roles, entity types, ...) round trip through a
      JSON column as tuples.

Failure modes:
    - IntegrityError on duplicate primary key.
"""

from datetime import UTC, date, datetime
from typing import ClassVar
from uuid import uuid4

from sqlalchemy import JSON, Date, DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


def new_id() -> str:
    """A fresh uuid4 string id."""
    return str(uuid4())


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware datetime stored portably.

    Contract:
        Aware values are normalized to UTC before storage.  Naive values
        read back (SQLite) are tagged as UTC.

    Guarantees:
        - process_result_value never returns a naive datetime.
        - cache_ok=True enables SQLAlchemy statement caching.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            return value.astimezone(UTC)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class JSONList(TypeDecorator):
    """
    Ordered list of scalars stored as JSON, surfaced as a tuple.

    Contract:
        Binds any iterable (tuple, list) as a JSON array; None binds as [].
        Loads as a tuple so DTO fields can be filled without conversion.
    """

    impl = JSON
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return []
        return list(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return ()
        return tuple(value)


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Contract:
        Every ORM model inherits from Base (or TrackedBase) and gets a string
        primary key plus a type_annotation_map that keeps column types
        consistent across the schema.

    Guarantees:
        - id is a String(64); defaults to a uuid4 string.
        - datetime maps to UTCDateTime, date to Date.
    """

    type_annotation_map: ClassVar[dict] = {
        datetime: UTCDateTime(),
        date: Date(),
        str: String(255),
    }

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        default=new_id,
    )


class TrackedBase(Base):
    """
    Abstract base with audit timestamps.

    Contract:
        Services set created_at/updated_at from the injected Clock.  When a
        service does not, the database fills them in.

    Guarantees:
        - created_at is set on INSERT and never changes.
        - updated_at is set on INSERT and refreshed on every UPDATE that
          does not set it explicitly.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
