"""
budget_config -- single public entrypoint for budget settings.

Responsibility:
    Provides the ONLY way to obtain settings at runtime through
    ``get_active_config()``.  Services receive the returned
    ``BudgetSettings`` and never read configuration files themselves.

Architecture position:
    Configuration -- YAML-driven settings.  Sits above ``budget_kernel``
    and ``budget_engines`` and below ``budget_modules``.  Engines MUST NEVER
    import from ``budget_config``.

Failure modes:
    - ``FileNotFoundError`` -- the settings file does not exist.
    - ``yaml.YAMLError`` -- the file is not valid YAML.
    - ``KeyError`` / ``ValueError`` -- missing or invalid settings.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``BUDGET_CONFIG_TRACE`` log entry with the config_id, version and
    checksum of the settings in force.
"""

from __future__ import annotations

import logging
from pathlib import Path

from budget_config.loader import compute_checksum, load_settings, parse_settings
from budget_config.schema import AllocationSettings, BudgetSettings, LaborSettings

_logger = logging.getLogger("budget_kernel.config")

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(config_path: Path | str | None = None) -> BudgetSettings:
    """The ONLY public configuration entrypoint.

    Args:
        config_path: Override path to a settings YAML file.
            Defaults to budget_config/sets/default.yaml.

    Returns:
        Frozen ``BudgetSettings``.

    Raises:
        FileNotFoundError: If the settings file does not exist.
        ValueError: If a setting is invalid.
        KeyError: If a required setting is missing.
    """
    path = Path(config_path) if config_path is not None else _DEFAULT_CONFIG_PATH
    settings = load_settings(path)

    _logger.info(
        "BUDGET_CONFIG_TRACE",
        extra={
            "trace_type": "BUDGET_CONFIG_TRACE",
            "config_id": settings.config_id,
            "config_version": settings.version,
            "checksum": settings.checksum,
            "currency": settings.currency,
            "source": str(path),
        },
    )
    return settings


__all__ = [
    "AllocationSettings",
    "BudgetSettings",
    "LaborSettings",
    "compute_checksum",
    "get_active_config",
    "parse_settings",
]
