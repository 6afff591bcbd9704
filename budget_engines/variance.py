"""
budget_engines.variance -- Planned vs. actual variance for monthly allocations.

Responsibility:
    Compare planned and actual amounts per realized month, aggregate many
    allocation sets into per-month and annual totals, and summarise the
    execution of a single allocation.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Consumes ``MonthlyAllocation`` from ``budget_engines.distribution``;
    filtering of which allocations to aggregate is done by the caller.

Invariants enforced:
    - Month variance is ``actual - planned``; annual variance is
      ``planned - actual`` (budget remaining), as each report presents it.
    - Division-by-zero safe: every percentage is 0 when its base is 0.
    - Unrealized months (no actual) contribute 0 to actual totals and
      produce no month variance.
    - Purity: identical inputs produce identical outputs.

Failure modes:
    - None beyond malformed inputs (e.g. ``MonthlyAllocation`` with an
      out-of-range month cannot be constructed).

Usage:
    from budget_engines.variance import VarianceCalculator

    calculator = VarianceCalculator()
    totals = calculator.monthly_totals([a.allocations for a in allocations])
    annual = calculator.yearly_totals(totals)
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from budget_engines.distribution import MonthlyAllocation
from budget_engines.tracer import traced_engine
from budget_kernel.domain.numeric import (
    MONTHS_PER_YEAR,
    ZERO,
    Numeric,
    safe_percentage,
    sum_decimals,
    to_decimal,
)
from budget_kernel.logging_config import get_logger

logger = get_logger("engines.variance")


@dataclass(frozen=True)
class MonthVariance:
    """Planned vs. actual for one realized month."""

    month: int
    year: int
    planned: Decimal
    actual: Decimal
    variance: Decimal  # actual - planned
    variance_percentage: Decimal

    @property
    def is_over_budget(self) -> bool:
        """True when more was spent than planned."""
        return self.variance > ZERO


@dataclass(frozen=True)
class MonthlyTotal:
    """Planned and actual totals of one month across allocations."""

    month: int
    planned: Decimal
    actual: Decimal


@dataclass(frozen=True)
class YearlyTotals:
    """Annual totals; ``variance`` is the unspent budget (planned - actual)."""

    planned: Decimal
    actual: Decimal
    variance: Decimal
    variance_percentage: Decimal


@dataclass(frozen=True)
class ExecutionSummary:
    """Execution of a single allocation against its annual total."""

    total_amount: Decimal
    total_actual: Decimal
    variance: Decimal  # total_amount - total_actual
    variance_percentage: Decimal
    realized_months: int


class VarianceCalculator:
    """
    Pure function calculator for allocation variances.

    Contract:
        No I/O, no database access, fully deterministic.
    Guarantees:
        - ``monthly_totals`` always returns 12 entries, months 1..12.
        - Reading actuals never changes planned amounts or percentages.
    Non-goals:
        - Does not choose which allocations to aggregate (fiscal year and
          cost center filtering belongs to the caller).
    """

    def month_variance(self, allocation: MonthlyAllocation) -> MonthVariance | None:
        """
        Variance of one month, or None when no actual has been recorded.

        Formula: variance = actual - planned;
        variance_percentage = variance / planned * 100 (0 when planned is 0).
        """
        if allocation.actual_amount is None:
            return None
        variance = allocation.actual_amount - allocation.planned_amount
        return MonthVariance(
            month=allocation.month,
            year=allocation.year,
            planned=allocation.planned_amount,
            actual=allocation.actual_amount,
            variance=variance,
            variance_percentage=safe_percentage(variance, allocation.planned_amount),
        )

    def month_variances(
        self,
        allocations: Sequence[MonthlyAllocation],
    ) -> tuple[MonthVariance, ...]:
        """Variances of every realized month, in input order."""
        return tuple(
            v for v in (self.month_variance(a) for a in allocations) if v is not None
        )

    @traced_engine("variance", "1.0")
    def monthly_totals(
        self,
        allocation_sets: Iterable[Sequence[MonthlyAllocation]],
    ) -> tuple[MonthlyTotal, ...]:
        """Sum planned and actual per calendar month across allocation sets."""
        planned = [ZERO] * MONTHS_PER_YEAR
        actual = [ZERO] * MONTHS_PER_YEAR
        set_count = 0

        for allocations in allocation_sets:
            set_count += 1
            for month_alloc in allocations:
                index = month_alloc.month - 1
                planned[index] += month_alloc.planned_amount
                actual[index] += month_alloc.actual_amount or ZERO

        logger.info("monthly_totals_calculated", extra={
            "allocation_count": set_count,
            "planned_total": str(sum_decimals(planned)),
            "actual_total": str(sum_decimals(actual)),
        })

        return tuple(
            MonthlyTotal(month=i + 1, planned=planned[i], actual=actual[i])
            for i in range(MONTHS_PER_YEAR)
        )

    def yearly_totals(self, monthly_totals: Sequence[MonthlyTotal]) -> YearlyTotals:
        """
        Annual totals from per-month totals.

        Formula: variance = planned - actual;
        variance_percentage = variance / planned * 100 (0 when planned is 0).
        """
        planned = sum_decimals(m.planned for m in monthly_totals)
        actual = sum_decimals(m.actual for m in monthly_totals)
        variance = planned - actual
        return YearlyTotals(
            planned=planned,
            actual=actual,
            variance=variance,
            variance_percentage=safe_percentage(variance, planned),
        )

    def execution_summary(
        self,
        total_amount: Numeric,
        allocations: Sequence[MonthlyAllocation],
    ) -> ExecutionSummary:
        """How much of one allocation's annual total has been executed."""
        total = to_decimal(total_amount)
        total_actual = sum_decimals(a.actual_amount or ZERO for a in allocations)
        variance = total - total_actual
        return ExecutionSummary(
            total_amount=total,
            total_actual=total_actual,
            variance=variance,
            variance_percentage=safe_percentage(variance, total),
            realized_months=sum(1 for a in allocations if a.is_realized),
        )
