"""
Labor Budget Domain Models (``budget_modules.labor.models``).

Responsibility
--------------
Frozen dataclass value objects for labor budgets -- a position's salary,
benefits, statutory charges and headcount for one cost center and fiscal
year -- plus the parsers that turn raw form mappings into the engine's
benefit and charge variants.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All monetary fields use ``Decimal`` -- NEVER ``float``.
* ``total_cost`` is derived by ``LaborCostCalculator``; it is never taken
  from input.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from budget_engines.labor_cost import (
    Benefit,
    BenefitType,
    FixedBenefit,
    LaborCharge,
    PercentageBenefit,
    monthly_cost_per_employee,
)
from budget_kernel.domain.numeric import MONTHS_PER_YEAR, to_decimal


class LaborStatusFilter(str, Enum):
    """Status choices when filtering labor budgets."""

    ALL = "all"
    ACTIVE = "active"
    INACTIVE = "inactive"


ALL = "all"


@dataclass(frozen=True)
class LaborBudget:
    """A budgeted position and its annual cost."""

    id: UUID
    position: str
    department: str
    base_salary: Decimal
    benefits: tuple[Benefit, ...]
    charges: tuple[LaborCharge, ...]
    quantity: int
    total_cost: Decimal
    cost_center_id: str
    fiscal_year_id: str
    is_active: bool = True
    notes: str | None = None
    created_by_id: UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def monthly_cost_per_employee(self) -> Decimal:
        return monthly_cost_per_employee(self.total_cost, self.quantity)


@dataclass(frozen=True)
class LaborBudgetFormData:
    """Input for creating a labor budget."""

    position: str
    department: str
    base_salary: Decimal
    quantity: int
    cost_center_id: str
    fiscal_year_id: str
    benefits: tuple[Benefit, ...] = ()
    charges: tuple[LaborCharge, ...] = ()
    is_active: bool = True
    notes: str | None = None


@dataclass(frozen=True)
class LaborBudgetUpdate:
    """Partial update; ``None`` leaves a field unchanged."""

    position: str | None = None
    department: str | None = None
    base_salary: Decimal | None = None
    quantity: int | None = None
    cost_center_id: str | None = None
    fiscal_year_id: str | None = None
    benefits: tuple[Benefit, ...] | None = None
    charges: tuple[LaborCharge, ...] | None = None
    is_active: bool | None = None
    notes: str | None = None

    @property
    def changes_cost(self) -> bool:
        return any(
            value is not None
            for value in (self.base_salary, self.quantity, self.benefits, self.charges)
        )


def parse_benefit(raw: Mapping[str, Any]) -> Benefit:
    """
    Build a benefit variant from a form mapping.

    Keys: ``name``, ``value``, ``type`` (``fixed`` | ``percentage``,
    default fixed), ``months`` and ``is_monthly``.  Fixed benefits default
    to twelve monthly payments, percentage benefits to one yearly payment.

    Raises:
        ValueError: on an unknown type or a non-numeric value.
    """
    benefit_type = BenefitType(raw.get("type", BenefitType.FIXED.value))
    name = str(raw.get("name") or "")
    value = to_decimal(raw.get("value", 0))

    if benefit_type is BenefitType.FIXED:
        return FixedBenefit(
            name=name,
            value=value,
            months=int(raw.get("months", MONTHS_PER_YEAR)),
            is_monthly=bool(raw.get("is_monthly", True)),
        )
    return PercentageBenefit(
        name=name,
        value=value,
        months=int(raw.get("months", 1)),
        is_monthly=bool(raw.get("is_monthly", False)),
    )


def parse_charge(raw: Mapping[str, Any]) -> LaborCharge:
    """
    Build a charge from a form mapping.

    Keys: ``name``, ``percentage`` and ``base_includes_benefits``.

    Raises:
        ValueError: on a non-numeric percentage.
    """
    return LaborCharge(
        name=str(raw.get("name") or ""),
        percentage=to_decimal(raw.get("percentage", 0)),
        base_includes_benefits=bool(raw.get("base_includes_benefits", False)),
    )


def benefit_as_dict(benefit: Benefit) -> dict[str, Any]:
    """Inverse of ``parse_benefit``; Decimals as strings."""
    return {
        "name": benefit.name,
        "type": benefit.type.value,
        "value": str(benefit.value),
        "months": benefit.months,
        "is_monthly": benefit.is_monthly,
    }


def charge_as_dict(charge: LaborCharge) -> dict[str, Any]:
    """Inverse of ``parse_charge``; Decimals as strings."""
    return {
        "name": charge.name,
        "percentage": str(charge.percentage),
        "base_includes_benefits": charge.base_includes_benefits,
    }
