"""
statusflow_config -- single public entrypoint for workflow configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()`` (the workflow catalog) and
    ``get_database_url()`` (the persistence target).  No other component
    may read configuration files or environment variables directly.  YAML
    loading is internal tooling and never exposed to callers.

Architecture position:
    Configuration -- YAML-driven catalog pipeline, load-time validation.
    This package sits above ``statusflow_kernel`` and
    ``statusflow_engines``.  The kernel MUST NEVER import from
    ``statusflow_config``; ``seed_catalog`` accepts any object shaped like
    a ``CompiledWorkflowCatalog``.

Invariants enforced:
    - Single entrypoint: all runtime config flows through this module.
    - Load-time validation: a catalog must pass ``validate_configuration``
      (including every workflow's structural diagnostics) before it is
      compiled.
    - Deterministic compilation: the same YAML fragments always produce
      the same ``CompiledWorkflowCatalog`` checksum.

Failure modes:
    - ``FileNotFoundError`` -- the requested configuration set is missing.
    - ``AssemblyError`` -- ``root.yaml`` missing or a fragment malformed.
    - ``ValueError`` -- validation failures (all errors listed).

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``STATUSFLOW_CONFIG_TRACE`` log entry with the config id, version,
    checksum and catalog sizes.
"""

from __future__ import annotations

import os
from pathlib import Path

from statusflow_config.assembler import AssemblyError, assemble_from_directory
from statusflow_config.compiler import CompiledWorkflowCatalog, compile_catalog
from statusflow_config.validator import ConfigValidationResult, validate_configuration
from statusflow_kernel.logging_config import get_logger

_logger = get_logger("config")

# Default configuration sets directory
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"

DATABASE_URL_ENV = "STATUSFLOW_DATABASE_URL"
DEFAULT_DATABASE_URL = "sqlite:///statusflow.db"


def get_active_config(
    set_name: str = "default",
    config_dir: Path | None = None,
) -> CompiledWorkflowCatalog:
    """The ONLY public catalog entrypoint.

    Args:
        set_name: Name of the configuration set (a subdirectory of the
            sets directory).
        config_dir: Override path to the configuration sets directory.
            Defaults to statusflow_config/sets/.

    Returns:
        CompiledWorkflowCatalog -- the sole runtime artifact.

    Raises:
        FileNotFoundError: If the configuration set does not exist.
        AssemblyError: If fragments are missing or malformed.
        ValueError: If configuration validation fails.
    """
    sets_dir = config_dir or _DEFAULT_CONFIG_DIR
    fragment_dir = sets_dir / set_name
    if not fragment_dir.is_dir():
        raise FileNotFoundError(f"Configuration set not found: {fragment_dir}")

    config_set = assemble_from_directory(fragment_dir)

    validation = validate_configuration(config_set)
    if not validation.is_valid:
        raise ValueError(
            "Configuration validation failed:\n"
            + "\n".join(f"  - {e}" for e in validation.errors)
        )
    for warning in validation.warnings:
        _logger.warning("config_validation_warning", extra={"detail": warning})

    catalog = compile_catalog(config_set)

    assert catalog.checksum == config_set.checksum, (
        f"Checksum drift: compiled={catalog.checksum!r} != source={config_set.checksum!r}"
    )

    _logger.info(
        "STATUSFLOW_CONFIG_TRACE",
        extra={
            "trace_type": "STATUSFLOW_CONFIG_TRACE",
            "config_set_id": catalog.config_id,
            "config_set_version": catalog.version,
            "config_set_name": set_name,
            "checksum": catalog.checksum,
            "status_count": len(catalog.statuses),
            "user_count": len(catalog.users),
            "workflow_count": len(catalog.workflows),
        },
    )
    return catalog


def get_database_url() -> str:
    """Database URL from ``STATUSFLOW_DATABASE_URL``, else a local SQLite file."""
    return os.environ.get(DATABASE_URL_ENV) or DEFAULT_DATABASE_URL


__all__ = [
    "AssemblyError",
    "CompiledWorkflowCatalog",
    "ConfigValidationResult",
    "DEFAULT_DATABASE_URL",
    "get_active_config",
    "get_database_url",
    "validate_configuration",
]
