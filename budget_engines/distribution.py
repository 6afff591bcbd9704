"""
Module: budget_engines.distribution
Responsibility:
    Convert an annual budget total into twelve monthly planned amounts under
    a distribution strategy (equal, seasonal, weighted, custom), and infer
    which named profile an existing set of monthly percentages came from.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import budget_kernel.domain, budget_kernel.exceptions and
    sibling engine modules.

Invariants enforced:
    - Conservation: for every non-custom strategy the twelve planned amounts
      sum to the total (exactly, in Decimal; profiles sum to 100).
    - Percentages of a non-custom result are the profile values; percentages
      of a custom result are ``planned / sum(planned) * 100`` and all zero
      when the sum is zero.
    - Regeneration keeps recorded actuals: ``actual_amount`` and ``notes`` of
      a previous allocation are carried to the same month/year.
    - Purity: no clock access, no I/O; identical inputs give identical output.

Failure modes:
    - ValueError on an unknown strategy string.
    - ValueError when custom values are given but are not exactly 12.
    - UnknownProfileError when a seasonal sub-profile name is unregistered.
    - The engine performs NO business validation: a custom set whose sum
      differs from the total is returned as-is; the caller validates.

Usage:
    from budget_engines.distribution import AllocationDistributor, DistributionType

    distributor = AllocationDistributor()
    months = distributor.distribute(
        total_amount=Decimal("120000"),
        strategy=DistributionType.EQUAL,
        fiscal_year=2024,
    )
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from types import MappingProxyType

from budget_engines.profiles import (
    DEFAULT_MATCH_TOLERANCE,
    SEASONAL,
    UNIFORM,
    YEAR_END_HEAVY,
    DistributionProfile,
    get_profile,
    identify_profile,
)
from budget_engines.tracer import traced_engine
from budget_kernel.domain.numeric import (
    MONTHS_PER_YEAR,
    Numeric,
    percent_of,
    safe_percentage,
    sum_decimals,
    to_decimal,
)
from budget_kernel.logging_config import get_logger

logger = get_logger("engines.distribution")


class DistributionType(str, Enum):
    """How an annual total is spread over the months."""

    EQUAL = "equal"  # uniform profile
    SEASONAL = "seasonal"  # seasonal profile or a chosen named profile
    WEIGHTED = "weighted"  # year-end-heavy profile
    CUSTOM = "custom"  # caller-supplied monthly amounts


STRATEGY_PROFILES: Mapping[DistributionType, str] = MappingProxyType({
    DistributionType.EQUAL: UNIFORM,
    DistributionType.SEASONAL: SEASONAL,
    DistributionType.WEIGHTED: YEAR_END_HEAVY,
})


@dataclass(frozen=True)
class MonthlyAllocation:
    """
    Planned (and, once executed, actual) amount for one month.

    Guarantees:
        - ``month`` is in 1..12.
    Non-goals:
        - ``actual_amount`` never influences ``planned_amount`` or
          ``percentage``.
    """

    month: int
    year: int
    planned_amount: Decimal
    percentage: Decimal
    actual_amount: Decimal | None = None
    notes: str | None = None

    def __post_init__(self) -> None:
        if not 1 <= self.month <= MONTHS_PER_YEAR:
            raise ValueError(f"Month must be 1..12, got {self.month}")

    @property
    def is_realized(self) -> bool:
        """True once an actual amount has been recorded."""
        return self.actual_amount is not None

    def with_actual(self, actual_amount: Numeric | None) -> MonthlyAllocation:
        """Copy with ``actual_amount`` replaced; planned values untouched."""
        return dataclasses.replace(
            self,
            actual_amount=None if actual_amount is None else to_decimal(actual_amount),
        )


def planned_total(allocations: Sequence[MonthlyAllocation]) -> Decimal:
    """Sum of planned amounts."""
    return sum_decimals(a.planned_amount for a in allocations)


def percentage_total(allocations: Sequence[MonthlyAllocation]) -> Decimal:
    """Sum of monthly percentages."""
    return sum_decimals(a.percentage for a in allocations)


class AllocationDistributor:
    """
    Spread annual totals over twelve months.

    Contract:
        Pure functions.  No I/O, no database access, no clock.
    Guarantees:
        - Always returns 12 records, months 1..12 in order, all stamped with
          ``fiscal_year``.
        - No rounding: planned amounts are exact Decimal products of the
          total and the profile percentage.
    Non-goals:
        - Does not validate that custom amounts add up to the total.
        - Does not persist results.
    """

    @traced_engine(
        "distribution",
        "1.0",
        fingerprint_fields=("total_amount", "strategy", "fiscal_year", "profile_name"),
    )
    def distribute(
        self,
        total_amount: Numeric,
        strategy: DistributionType | str,
        fiscal_year: int,
        custom_values: Sequence[Numeric] | None = None,
        profile_name: str | None = None,
        previous: Sequence[MonthlyAllocation] | None = None,
    ) -> tuple[MonthlyAllocation, ...]:
        """
        Produce the twelve monthly allocations for ``total_amount``.

        Args:
            total_amount: Annual planned value.
            strategy: Distribution type (enum or its string value).
            fiscal_year: Year stamped on every month.
            custom_values: Twelve planned amounts for ``custom``; when absent
                or empty, ``custom`` falls back to ``equal``.
            profile_name: Named profile chosen under ``seasonal``; ignored
                by the other strategies.
            previous: Allocations being regenerated; their actuals and notes
                are kept for the same month/year.

        Returns:
            Tuple of 12 MonthlyAllocation records.
        """
        total = to_decimal(total_amount)
        strategy = DistributionType(strategy)
        carried = _carry_over(previous)

        if strategy is DistributionType.CUSTOM and custom_values:
            result = self._distribute_custom(custom_values, fiscal_year, carried)
            logger.info("allocation_distributed", extra={
                "strategy": strategy.value,
                "profile": None,
                "fiscal_year": fiscal_year,
                "total_amount": str(total),
                "planned_total": str(planned_total(result)),
                "carried_actuals": sum(1 for a in result if a.is_realized),
            })
            return result

        if strategy is DistributionType.CUSTOM:
            logger.info("allocation_custom_fallback_to_equal", extra={
                "fiscal_year": fiscal_year,
                "total_amount": str(total),
            })
            strategy = DistributionType.EQUAL

        profile = self.resolve_profile(strategy, profile_name)
        result = self._distribute_profile(total, profile, fiscal_year, carried)

        logger.info("allocation_distributed", extra={
            "strategy": strategy.value,
            "profile": profile.name,
            "fiscal_year": fiscal_year,
            "total_amount": str(total),
            "planned_total": str(planned_total(result)),
            "carried_actuals": sum(1 for a in result if a.is_realized),
        })
        return result

    def resolve_profile(
        self,
        strategy: DistributionType | str,
        profile_name: str | None = None,
    ) -> DistributionProfile:
        """
        Profile a non-custom strategy applies.

        ``profile_name`` only overrides the default under ``seasonal``.
        """
        strategy = DistributionType(strategy)
        if strategy is DistributionType.CUSTOM:
            raise ValueError("Custom distribution has no profile")
        if strategy is DistributionType.SEASONAL and profile_name:
            return get_profile(profile_name)
        if profile_name:
            logger.debug("allocation_profile_ignored", extra={
                "strategy": strategy.value,
                "profile_name": profile_name,
            })
        return get_profile(STRATEGY_PROFILES[strategy])

    def identify_profile(
        self,
        percentages: Sequence[Numeric],
        tolerance: Decimal = DEFAULT_MATCH_TOLERANCE,
    ) -> str:
        """Named profile that produced ``percentages``, or ``"custom"``."""
        name = identify_profile([to_decimal(p) for p in percentages], tolerance)
        logger.debug("allocation_profile_identified", extra={
            "profile": name,
            "tolerance": str(tolerance),
        })
        return name

    def _distribute_profile(
        self,
        total: Decimal,
        profile: DistributionProfile,
        fiscal_year: int,
        carried: dict[tuple[int, int], MonthlyAllocation],
    ) -> tuple[MonthlyAllocation, ...]:
        """planned[i] = total * profile[i] / 100; percentage[i] = profile[i]."""
        return tuple(
            _with_carried(
                MonthlyAllocation(
                    month=month,
                    year=fiscal_year,
                    planned_amount=percent_of(total, percentage),
                    percentage=percentage,
                ),
                carried,
            )
            for month, percentage in enumerate(profile.percentages, start=1)
        )

    def _distribute_custom(
        self,
        custom_values: Sequence[Numeric],
        fiscal_year: int,
        carried: dict[tuple[int, int], MonthlyAllocation],
    ) -> tuple[MonthlyAllocation, ...]:
        """Keep the caller's amounts; recompute percentages of their sum."""
        if len(custom_values) != MONTHS_PER_YEAR:
            raise ValueError(
                f"Custom distribution needs {MONTHS_PER_YEAR} monthly amounts, "
                f"got {len(custom_values)}"
            )
        amounts = [to_decimal(v) for v in custom_values]
        custom_total = sum_decimals(amounts)
        return tuple(
            _with_carried(
                MonthlyAllocation(
                    month=month,
                    year=fiscal_year,
                    planned_amount=amount,
                    percentage=safe_percentage(amount, custom_total),
                ),
                carried,
            )
            for month, amount in enumerate(amounts, start=1)
        )


def _carry_over(
    previous: Sequence[MonthlyAllocation] | None,
) -> dict[tuple[int, int], MonthlyAllocation]:
    if not previous:
        return {}
    return {(a.month, a.year): a for a in previous}


def _with_carried(
    allocation: MonthlyAllocation,
    carried: dict[tuple[int, int], MonthlyAllocation],
) -> MonthlyAllocation:
    prior = carried.get((allocation.month, allocation.year))
    if prior is None:
        return allocation
    return dataclasses.replace(
        allocation,
        actual_amount=prior.actual_amount,
        notes=prior.notes,
    )
