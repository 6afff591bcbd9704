"""
Module: budget_engines.profiles
Responsibility:
    The fixed table of named monthly distribution profiles (twelve
    percentages each, summing to 100) and reverse inference of the profile
    that produced a given set of monthly percentages.

Architecture position:
    Engines -- pure reference data, zero I/O.  Consumed by
    ``budget_engines.distribution``.

Invariants enforced:
    - Every profile has exactly 12 percentages summing to exactly 100
      (checked at construction, i.e. at import time).
    - The table is a read-only mapping built once at import; there is no
      runtime registration.
    - Profile iteration order is the table order below; ``identify_profile``
      returns the first full match.

Failure modes:
    - ValueError at import if a profile is malformed.
    - UnknownProfileError from ``get_profile`` for an unregistered name.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType

from budget_kernel.domain.numeric import (
    HUNDRED,
    MONTHS_PER_YEAR,
    sum_decimals,
    to_decimal,
)
from budget_kernel.exceptions import UnknownProfileError

UNIFORM = "uniform"
FIRST_HALF_HEAVY = "first-half-heavy"
SECOND_HALF_HEAVY = "second-half-heavy"
QUARTER_END_HEAVY = "quarter-end-heavy"
YEAR_END_HEAVY = "year-end-heavy"
SEASONAL = "seasonal"

# Returned by identify_profile when nothing matches.
CUSTOM = "custom"

DEFAULT_MATCH_TOLERANCE = Decimal("1")


@dataclass(frozen=True)
class DistributionProfile:
    """
    A named, ordered sequence of 12 monthly percentages.

    Guarantees:
        - ``len(percentages) == 12`` and ``sum(percentages) == 100``.
    """

    name: str
    label: str
    percentages: tuple[Decimal, ...]

    def __post_init__(self) -> None:
        if len(self.percentages) != MONTHS_PER_YEAR:
            raise ValueError(
                f"Profile {self.name!r} has {len(self.percentages)} months, "
                f"expected {MONTHS_PER_YEAR}"
            )
        total = sum_decimals(self.percentages)
        if total != HUNDRED:
            raise ValueError(f"Profile {self.name!r} sums to {total}, expected 100")

    def percentage_for(self, month: int) -> Decimal:
        """Percentage for a 1-based month."""
        if not 1 <= month <= MONTHS_PER_YEAR:
            raise ValueError(f"Month must be 1..12, got {month}")
        return self.percentages[month - 1]

    def matches(
        self,
        percentages: Sequence[Decimal],
        tolerance: Decimal = DEFAULT_MATCH_TOLERANCE,
    ) -> bool:
        """True when every month is strictly within ``tolerance`` points."""
        if len(percentages) != MONTHS_PER_YEAR:
            return False
        return all(
            abs(to_decimal(actual) - expected) < tolerance
            for actual, expected in zip(percentages, self.percentages)
        )


def _profile(name: str, label: str, values: str) -> DistributionProfile:
    return DistributionProfile(
        name=name,
        label=label,
        percentages=tuple(Decimal(v) for v in values.split()),
    )


DISTRIBUTION_PROFILES: Mapping[str, DistributionProfile] = MappingProxyType({
    p.name: p
    for p in (
        # Month 12 absorbs the remainder of 100 - 11 * 8.33.
        _profile(UNIFORM, "Uniform",
                 "8.33 8.33 8.33 8.33 8.33 8.33 8.33 8.33 8.33 8.33 8.33 8.37"),
        _profile(FIRST_HALF_HEAVY, "First half heavy",
                 "12 12 12 12 12 12 6 6 4 4 4 4"),
        _profile(SECOND_HALF_HEAVY, "Second half heavy",
                 "4 4 4 4 6 6 12 12 12 12 12 12"),
        _profile(QUARTER_END_HEAVY, "Quarter end peaks",
                 "5 5 15 5 5 15 5 5 15 5 5 15"),
        _profile(YEAR_END_HEAVY, "Year end heavy",
                 "5 5 5 5 5 5 5 5 10 10 15 25"),
        _profile(SEASONAL, "Seasonal",
                 "5 5 8 10 12 15 15 10 8 5 5 2"),
    )
})


def profile_names() -> tuple[str, ...]:
    """Registered profile names in table order."""
    return tuple(DISTRIBUTION_PROFILES)


def get_profile(name: str) -> DistributionProfile:
    """
    Look up a profile by name.

    Raises:
        UnknownProfileError: if ``name`` is not in the table.
    """
    try:
        return DISTRIBUTION_PROFILES[name]
    except KeyError:
        raise UnknownProfileError(name, profile_names()) from None


def identify_profile(
    percentages: Sequence[Decimal],
    tolerance: Decimal = DEFAULT_MATCH_TOLERANCE,
) -> str:
    """
    Name of the first profile matching ``percentages`` in all 12 months.

    Returns ``CUSTOM`` when no profile matches (including when fewer or more
    than 12 percentages are given).
    """
    for profile in DISTRIBUTION_PROFILES.values():
        if profile.matches(percentages, tolerance):
            return profile.name
    return CUSTOM
