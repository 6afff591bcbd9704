"""
Tests for the allocation Variance Calculator.

Covers:
- Per-month variance (actual - planned)
- Monthly totals across allocations
- Annual totals (planned - actual)
- Execution summary of one allocation
"""

from decimal import Decimal

from budget_engines.distribution import AllocationDistributor, MonthlyAllocation
from budget_engines.variance import VarianceCalculator


def _month(month, planned, actual=None, year=2024):
    return MonthlyAllocation(
        month=month,
        year=year,
        planned_amount=Decimal(planned),
        percentage=Decimal("0"),
        actual_amount=None if actual is None else Decimal(actual),
    )


class TestMonthVariance:

    def setup_method(self):
        self.calculator = VarianceCalculator()

    def test_over_budget(self):
        result = self.calculator.month_variance(_month(1, "1000", "1100"))
        assert result.variance == Decimal("100")
        assert result.variance_percentage == Decimal("10")
        assert result.is_over_budget is True

    def test_under_budget(self):
        result = self.calculator.month_variance(_month(1, "1000", "750"))
        assert result.variance == Decimal("-250")
        assert result.variance_percentage == Decimal("-25")
        assert result.is_over_budget is False

    def test_unrealized_month(self):
        assert self.calculator.month_variance(_month(1, "1000")) is None

    def test_zero_planned(self):
        result = self.calculator.month_variance(_month(1, "0", "50"))
        assert result.variance == Decimal("50")
        assert result.variance_percentage == Decimal("0")

    def test_month_variances_skip_unrealized(self):
        months = [_month(1, "100", "90"), _month(2, "100"), _month(3, "100", "120")]
        result = self.calculator.month_variances(months)
        assert [v.month for v in result] == [1, 3]


class TestMonthlyTotals:

    def setup_method(self):
        self.calculator = VarianceCalculator()

    def test_sums_per_month_across_sets(self):
        first = [_month(m, "100", "90" if m == 1 else None) for m in range(1, 13)]
        second = [_month(m, "50", "60" if m == 1 else None) for m in range(1, 13)]
        totals = self.calculator.monthly_totals([first, second])

        assert len(totals) == 12
        assert totals[0].planned == Decimal("150")
        assert totals[0].actual == Decimal("150")
        assert totals[1].planned == Decimal("150")
        assert totals[1].actual == Decimal("0")

    def test_empty_input_gives_twelve_zero_months(self):
        totals = self.calculator.monthly_totals([])
        assert [t.month for t in totals] == list(range(1, 13))
        assert all(t.planned == 0 and t.actual == 0 for t in totals)

    def test_actuals_do_not_change_planned(self):
        months = AllocationDistributor().distribute(
            total_amount=Decimal("120000"), strategy="equal", fiscal_year=2024,
        )
        realized = [m.with_actual(Decimal("1")) for m in months]
        before = self.calculator.monthly_totals([months])
        after = self.calculator.monthly_totals([realized])
        assert [t.planned for t in before] == [t.planned for t in after]


class TestYearlyTotals:

    def setup_method(self):
        self.calculator = VarianceCalculator()

    def test_remaining_budget(self):
        months = [_month(m, "1000", "800" if m <= 6 else None) for m in range(1, 13)]
        result = self.calculator.yearly_totals(self.calculator.monthly_totals([months]))
        assert result.planned == Decimal("12000")
        assert result.actual == Decimal("4800")
        assert result.variance == Decimal("7200")
        assert result.variance_percentage == Decimal("60")

    def test_nothing_planned(self):
        result = self.calculator.yearly_totals(self.calculator.monthly_totals([]))
        assert result.variance == Decimal("0")
        assert result.variance_percentage == Decimal("0")


class TestExecutionSummary:

    def setup_method(self):
        self.calculator = VarianceCalculator()

    def test_summary(self):
        months = [_month(m, "1000", "500" if m == 1 else None) for m in range(1, 13)]
        result = self.calculator.execution_summary(Decimal("12000"), months)
        assert result.total_actual == Decimal("500")
        assert result.variance == Decimal("11500")
        assert result.realized_months == 1

    def test_zero_total(self):
        result = self.calculator.execution_summary(Decimal("0"), [])
        assert result.variance_percentage == Decimal("0")
        assert result.realized_months == 0
