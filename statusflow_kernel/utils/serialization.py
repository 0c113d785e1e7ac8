"""
JSON serialization for domain records.

Dates cross the wire as ISO-8601 strings and come back as ``datetime`` /
``date``; tuples travel as JSON arrays and come back as tuples; enums travel
by value.  Field types are read from the dataclass annotations, so any
frozen domain record (Status, Workflow, Task, Project, ...) round trips
without a per-type codec.

    text = to_json(project)
    again = from_json(Project, text)
    assert again == project
"""

from __future__ import annotations

import dataclasses
import json
import types
import typing
from datetime import date, datetime
from enum import Enum
from functools import cache
from typing import Any, TypeVar

T = TypeVar("T")


def to_primitive(value: Any) -> Any:
    """Recursively convert a domain value to JSON-compatible primitives."""
    if isinstance(value, Enum):
        return value.value
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            f.name: to_primitive(getattr(value, f.name))
            for f in dataclasses.fields(value)
        }
    if isinstance(value, dict):
        return {str(k): to_primitive(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_primitive(v) for v in value]
    raise TypeError(f"Cannot serialize {type(value).__name__}")


def to_json(obj: Any, *, indent: int | None = None) -> str:
    """Serialize a domain record (or a list of them) to JSON text."""
    return json.dumps(to_primitive(obj), indent=indent, ensure_ascii=False)


@cache
def _type_hints(cls: type) -> dict[str, Any]:
    return typing.get_type_hints(cls)


def _restore(tp: Any, value: Any) -> Any:
    if value is None:
        return None

    supertype = getattr(tp, "__supertype__", None)
    if supertype is not None:
        return _restore(supertype, value)

    origin = typing.get_origin(tp)
    args = typing.get_args(tp)

    if origin is typing.Union or origin is types.UnionType:
        non_none = [a for a in args if a is not type(None)]
        return _restore(non_none[0], value) if non_none else value

    if origin is tuple:
        item_type = args[0] if args else Any
        return tuple(_restore(item_type, v) for v in value)

    if origin is list:
        item_type = args[0] if args else Any
        return [_restore(item_type, v) for v in value]

    if tp is datetime:
        return value if isinstance(value, datetime) else datetime.fromisoformat(value)
    if tp is date:
        return value if isinstance(value, date) else date.fromisoformat(value)

    if isinstance(tp, type):
        if issubclass(tp, Enum):
            return tp(value)
        if dataclasses.is_dataclass(tp):
            return from_dict(tp, value)

    return value


def from_dict(cls: type[T], data: dict[str, Any]) -> T:
    """Build ``cls`` from primitives produced by ``to_primitive``.

    Keys that are not init fields of ``cls`` are ignored; missing keys fall
    back to the field defaults.
    """
    hints = _type_hints(cls)
    kwargs = {
        f.name: _restore(hints[f.name], data[f.name])
        for f in dataclasses.fields(cls)
        if f.init and f.name in data
    }
    return cls(**kwargs)


def from_json(cls: type[T], text: str) -> T:
    """Parse JSON text produced by ``to_json`` back into ``cls``."""
    return from_dict(cls, json.loads(text))
