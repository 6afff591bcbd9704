"""
Tests for the distribution profile table and reverse inference.
"""

from decimal import Decimal

import pytest

from budget_engines.profiles import (
    CUSTOM,
    DISTRIBUTION_PROFILES,
    DistributionProfile,
    get_profile,
    identify_profile,
    profile_names,
)
from budget_kernel.exceptions import UnknownProfileError


class TestProfileTable:
    """The fixed table of named profiles."""

    def test_names_in_table_order(self):
        assert profile_names() == (
            "uniform",
            "first-half-heavy",
            "second-half-heavy",
            "quarter-end-heavy",
            "year-end-heavy",
            "seasonal",
        )

    @pytest.mark.parametrize("name", list(DISTRIBUTION_PROFILES))
    def test_every_profile_has_twelve_months_summing_to_100(self, name):
        profile = DISTRIBUTION_PROFILES[name]
        assert len(profile.percentages) == 12
        assert sum(profile.percentages) == Decimal("100")

    def test_uniform_remainder_in_december(self):
        uniform = get_profile("uniform")
        assert uniform.percentages[:11] == (Decimal("8.33"),) * 11
        assert uniform.percentages[11] == Decimal("8.37")

    def test_year_end_heavy_values(self):
        assert get_profile("year-end-heavy").percentages == tuple(
            Decimal(v) for v in (5, 5, 5, 5, 5, 5, 5, 5, 10, 10, 15, 25)
        )

    def test_first_and_second_half_are_mirrors(self):
        first = get_profile("first-half-heavy").percentages
        second = get_profile("second-half-heavy").percentages
        assert first == tuple(reversed(second))
        assert sum(first[:6]) > sum(first[6:])

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            DISTRIBUTION_PROFILES["spiky"] = get_profile("uniform")  # type: ignore[index]

    def test_percentage_for_month(self):
        assert get_profile("quarter-end-heavy").percentage_for(3) == Decimal("15")

    def test_percentage_for_invalid_month(self):
        with pytest.raises(ValueError):
            get_profile("uniform").percentage_for(13)


class TestProfileConstruction:
    """Malformed profiles are rejected."""

    def test_wrong_month_count(self):
        with pytest.raises(ValueError, match="11 months"):
            DistributionProfile("short", "Short", (Decimal("10"),) * 11)

    def test_wrong_sum(self):
        with pytest.raises(ValueError, match="sums to"):
            DistributionProfile("big", "Big", (Decimal("10"),) * 12)


class TestGetProfile:

    def test_unknown_name(self):
        with pytest.raises(UnknownProfileError) as exc_info:
            get_profile("spiky")
        assert exc_info.value.profile_name == "spiky"
        assert "uniform" in exc_info.value.available


class TestIdentifyProfile:
    """Reverse inference from monthly percentages."""

    @pytest.mark.parametrize("name", list(DISTRIBUTION_PROFILES))
    def test_exact_values_identify_their_profile(self, name):
        assert identify_profile(DISTRIBUTION_PROFILES[name].percentages) == name

    def test_within_tolerance_matches(self):
        values = [p + Decimal("0.5") for p in get_profile("seasonal").percentages]
        assert identify_profile(values) == "seasonal"

    def test_difference_of_exactly_one_does_not_match(self):
        """Tolerance is strict: a 1-point difference is not a match."""
        values = list(get_profile("year-end-heavy").percentages)
        values[0] += Decimal("1")
        assert identify_profile(values) == CUSTOM

    def test_custom_when_nothing_matches(self):
        values = [Decimal("50"), Decimal("50")] + [Decimal("0")] * 10
        assert identify_profile(values) == CUSTOM

    def test_wrong_length_is_custom(self):
        assert identify_profile([Decimal("100")]) == CUSTOM

    def test_wider_tolerance(self):
        values = list(get_profile("uniform").percentages)
        values[0] += Decimal("1.5")
        assert identify_profile(values, tolerance=Decimal("2")) == "uniform"
