"""
Budget Allocation Domain Models (``budget_modules.allocation.models``).

Responsibility
--------------
Frozen dataclass value objects for budget allocations: the stored
allocation with its twelve months, the form input that creates one, and
the partial update that edits one.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Consumed by
``BudgetAllocationService`` and returned to callers.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All monetary fields use ``Decimal`` -- NEVER ``float``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from budget_engines.distribution import (
    DistributionType,
    MonthlyAllocation,
    planned_total,
)
from budget_kernel.domain.numeric import ZERO, sum_decimals

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def resolve_fiscal_year(fiscal_year_id: str, fallback: int) -> int:
    """
    Calendar year encoded in a fiscal-year id.

    The year is the leading integer after the first ``-``
    (``"FY-2024"`` -> 2024, ``"FY-2025-Q1"`` -> 2025).  Anything else,
    including a zero year, returns ``fallback``.
    """
    parts = (fiscal_year_id or "").split("-")
    if len(parts) < 2:
        return fallback
    match = _LEADING_INT.match(parts[1])
    if match is None:
        return fallback
    return int(match.group(1)) or fallback


@dataclass(frozen=True)
class BudgetAllocation:
    """An annual budget spread over twelve monthly allocations."""

    id: UUID
    budget_item_id: str
    fiscal_year_id: str
    cost_center_id: str
    total_amount: Decimal
    distribution_type: DistributionType
    allocations: tuple[MonthlyAllocation, ...]
    notes: str | None = None
    created_by_id: UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def planned_total(self) -> Decimal:
        return planned_total(self.allocations)

    @property
    def actual_total(self) -> Decimal:
        return sum_decimals(a.actual_amount or ZERO for a in self.allocations)

    @property
    def planned_amounts(self) -> tuple[Decimal, ...]:
        return tuple(a.planned_amount for a in self.allocations)

    @property
    def percentages(self) -> tuple[Decimal, ...]:
        return tuple(a.percentage for a in self.allocations)

    def month(self, month: int) -> MonthlyAllocation | None:
        """Allocation of ``month`` (1..12), or None if absent."""
        return next((a for a in self.allocations if a.month == month), None)


@dataclass(frozen=True)
class AllocationFormData:
    """
    Input for creating an allocation.

    ``planned_amounts`` are the twelve monthly amounts of a custom
    distribution.  ``profile_name`` picks a named profile under the
    seasonal strategy.  A ``None`` distribution type means the configured
    default.
    """

    budget_item_id: str
    fiscal_year_id: str
    cost_center_id: str
    total_amount: Decimal
    distribution_type: DistributionType | None = None
    planned_amounts: tuple[Decimal, ...] | None = None
    profile_name: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class AllocationUpdate:
    """Partial update; ``None`` leaves a field unchanged."""

    budget_item_id: str | None = None
    fiscal_year_id: str | None = None
    cost_center_id: str | None = None
    total_amount: Decimal | None = None
    distribution_type: DistributionType | None = None
    planned_amounts: tuple[Decimal, ...] | None = None
    profile_name: str | None = None
    notes: str | None = None
