"""
statusflow_engines.tracer -- ``@traced_engine`` for the pure engines.

Each call of a decorated engine emits one debug-level
``STATUSFLOW_ENGINE_TRACE`` record with the engine's name and version, a
fingerprint of the inputs named in ``fingerprint_fields`` and the call's
duration.  The decorator reads arguments and logs; it never alters inputs
or results, so engines stay pure.  With DEBUG off for
``statusflow.engines.tracer`` the engine is called directly and no
fingerprint is computed.

The fingerprint is the first 16 hex characters of the SHA-256 of the
canonical JSON of the selected arguments (see
``statusflow_kernel.utils.hashing``).  Two calls with equal inputs share a
fingerprint, which makes repeated evaluations easy to spot in the log.

    @traced_engine("transition_resolver", "1.0",
                   fingerprint_fields=("workflow", "current_status_id"))
    def get_valid_next_transitions(workflow, current_status_id, statuses, tasks):
        ...
"""

from __future__ import annotations

import functools
import inspect
import logging
import time
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from statusflow_kernel.logging_config import get_logger
from statusflow_kernel.utils.hashing import hash_payload

logger = get_logger("engines.tracer")

TRACE_TYPE_ENGINE = "STATUSFLOW_ENGINE_TRACE"
FINGERPRINT_LENGTH = 16

F = TypeVar("F", bound=Callable[..., Any])


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: Mapping[str, Any],
) -> str:
    """Fingerprint of the named arguments.  Absent names count as ``None``."""
    selected = {name: arguments.get(name) for name in fingerprint_fields}
    return hash_payload(selected)[:FINGERPRINT_LENGTH]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable[[F], F]:
    """Wrap a pure engine so each call is traced.

    ``fingerprint_fields`` names parameters, positional or keyword, whose
    values feed the fingerprint.
    """

    def decorator(func: F) -> F:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            if not logger.isEnabledFor(logging.DEBUG):
                return func(*args, **kwargs)

            fingerprint = ""
            if fingerprint_fields:
                bound = signature.bind_partial(*args, **kwargs)
                fingerprint = compute_input_fingerprint(fingerprint_fields, bound.arguments)

            started = time.monotonic()
            result = func(*args, **kwargs)

            logger.debug(
                TRACE_TYPE_ENGINE,
                extra={
                    "trace_type": TRACE_TYPE_ENGINE,
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": fingerprint,
                    "duration_ms": round((time.monotonic() - started) * 1000, 2),
                    "function": func.__qualname__,
                },
            )
            return result

        return wrapper  # type: ignore[return-value]

    return decorator
