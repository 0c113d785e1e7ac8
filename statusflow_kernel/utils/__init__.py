"""Utility modules for the statusflow kernel."""

from statusflow_kernel.utils.hashing import canonicalize_json, hash_payload
from statusflow_kernel.utils.serialization import (
    from_dict,
    from_json,
    to_json,
    to_primitive,
)

__all__ = [
    "canonicalize_json",
    "hash_payload",
    "from_dict",
    "from_json",
    "to_json",
    "to_primitive",
]
