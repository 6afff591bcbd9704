"""
Settings loader (``budget_config.loader``).

Responsibility
--------------
Loads a settings YAML file and parses it into the frozen dataclasses of
``budget_config.schema``.  Runtime callers go through
``budget_config.get_active_config()`` instead of calling this directly.

Invariants enforced
-------------------
* Required keys (``config_id``, ``version``) raise ``KeyError`` when
  missing; no silent defaults for them.
* Numeric settings are parsed to ``Decimal``; invalid values raise
  ``ValueError``.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the raw
  settings for identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Invalid values  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from budget_config.schema import AllocationSettings, BudgetSettings, LaborSettings
from budget_engines.distribution import DistributionType
from budget_kernel.domain.numeric import to_decimal


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {path} must contain a mapping")
    return data


def parse_decimal(value: Any, key: str) -> Decimal:
    """Parse a settings value to Decimal, naming the key on failure."""
    try:
        return to_decimal(value)
    except ValueError as exc:
        raise ValueError(f"Invalid decimal for '{key}': {value!r}") from exc


def parse_allocation_settings(data: dict[str, Any]) -> AllocationSettings:
    defaults = AllocationSettings()
    sum_tolerance = parse_decimal(
        data.get("sum_tolerance", defaults.sum_tolerance), "allocation.sum_tolerance"
    )
    match_tolerance = parse_decimal(
        data.get("profile_match_tolerance", defaults.profile_match_tolerance),
        "allocation.profile_match_tolerance",
    )
    if sum_tolerance < 0 or match_tolerance < 0:
        raise ValueError("Allocation tolerances must be non-negative")
    return AllocationSettings(
        sum_tolerance=sum_tolerance,
        profile_match_tolerance=match_tolerance,
        default_distribution=DistributionType(
            data.get("default_distribution", defaults.default_distribution.value)
        ),
    )


def parse_labor_settings(data: dict[str, Any]) -> LaborSettings:
    defaults = LaborSettings()
    min_quantity = int(data.get("min_quantity", defaults.min_quantity))
    if min_quantity < 1:
        raise ValueError(f"labor.min_quantity must be >= 1, got {min_quantity}")
    return LaborSettings(
        min_quantity=min_quantity,
        max_charge_percentage=parse_decimal(
            data.get("max_charge_percentage", defaults.max_charge_percentage),
            "labor.max_charge_percentage",
        ),
    )


def parse_settings(data: dict[str, Any]) -> BudgetSettings:
    """
    Parse a raw settings mapping into ``BudgetSettings``.

    Postconditions:
        - ``checksum`` is ``compute_checksum(data)``.
    Raises:
        KeyError: if ``config_id`` or ``version`` is missing.
        ValueError: on invalid values.
    """
    decimal_places = int(data.get("decimal_places", 2))
    if decimal_places < 0:
        raise ValueError(f"decimal_places must be >= 0, got {decimal_places}")
    return BudgetSettings(
        config_id=str(data["config_id"]),
        version=int(data["version"]),
        currency=str(data.get("currency", "BRL")),
        currency_symbol=str(data.get("currency_symbol", "R$")),
        decimal_places=decimal_places,
        allocation=parse_allocation_settings(data.get("allocation") or {}),
        labor=parse_labor_settings(data.get("labor") or {}),
        checksum=compute_checksum(data),
    )


def load_settings(path: Path) -> BudgetSettings:
    """Load and parse a settings file."""
    return parse_settings(load_yaml_file(path))


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Postconditions:
        - Identical ``data`` always produces identical checksums
          (keys are sorted).
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
