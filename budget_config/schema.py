"""
Budget settings schema.

Typed, frozen view of a settings YAML file.  The loader parses raw YAML
into these types; services receive a ``BudgetSettings`` and never read
files themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from budget_engines.distribution import DistributionType


@dataclass(frozen=True)
class AllocationSettings:
    """Rules for budget allocations."""

    sum_tolerance: Decimal = Decimal("0.01")
    profile_match_tolerance: Decimal = Decimal("1")
    default_distribution: DistributionType = DistributionType.EQUAL


@dataclass(frozen=True)
class LaborSettings:
    """Rules for labor budgets."""

    min_quantity: int = 1
    max_charge_percentage: Decimal = Decimal("100")


@dataclass(frozen=True)
class BudgetSettings:
    """Runtime settings shared by the budget modules."""

    config_id: str
    version: int
    currency: str = "BRL"
    currency_symbol: str = "R$"
    decimal_places: int = 2
    allocation: AllocationSettings = field(default_factory=AllocationSettings)
    labor: LaborSettings = field(default_factory=LaborSettings)
    checksum: str = ""
