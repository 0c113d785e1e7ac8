"""
Canonical JSON and SHA-256 digests.

Config checksums and engine input fingerprints both hash a canonical JSON
rendering: sorted keys, no whitespace, dataclasses expanded field by field,
enums by value, dates as ISO-8601, sets sorted.  Equal content always
yields the same digest.
"""

import dataclasses
import hashlib
import json
from datetime import date, datetime
from enum import Enum
from typing import Any


def _canonical_default(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, (set, frozenset)):
        return sorted(obj, key=canonicalize_json)
    raise TypeError(f"Cannot canonicalize {type(obj).__name__}")


def canonicalize_json(data: Any) -> str:
    """Canonical JSON text for ``data``.

    Raises:
        TypeError: For values with no canonical form.
    """
    return json.dumps(
        data,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=_canonical_default,
    )


def hash_payload(payload: Any) -> str:
    """Hex SHA-256 (64 characters) of the canonical JSON of ``payload``."""
    return hashlib.sha256(canonicalize_json(payload).encode("utf-8")).hexdigest()
