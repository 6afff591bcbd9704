"""
Tests for the Budget Allocation Service.

Validates:
- Creation with every distribution type, fiscal-year resolution
- Validation failures leave nothing behind
- Updates: regeneration, replanning, fiscal-year change, plain field edits
- Execution tracking (actual amounts per month)
- Listing and planned vs. actual reporting
"""

from __future__ import annotations

import inspect
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from budget_config import parse_settings
from budget_engines.distribution import DistributionType
from budget_kernel.exceptions import (
    AllocationNotFoundError,
    MonthlyAllocationNotFoundError,
    UnknownProfileError,
    ValidationError,
)
from budget_modules.allocation.models import AllocationUpdate
from budget_modules.allocation.orm import MonthlyAllocationModel
from budget_modules.allocation.service import BudgetAllocationService


def _custom_amounts(first_half: str, second_half: str) -> tuple[Decimal, ...]:
    return (Decimal(first_half),) * 6 + (Decimal(second_half),) * 6


# =============================================================================
# Structural Tests
# =============================================================================


class TestAllocationServiceStructure:

    def test_constructor_signature(self):
        params = list(inspect.signature(BudgetAllocationService.__init__).parameters)
        assert params[1:] == ["session", "clock", "settings"]

    def test_has_public_methods(self):
        for name in (
            "add_allocation",
            "update_allocation",
            "delete_allocation",
            "update_actual_amount",
            "get_allocation",
            "list_allocations",
            "list_by_budget_item",
            "list_by_cost_center",
            "list_by_fiscal_year",
            "get_monthly_totals",
            "get_yearly_totals",
            "get_execution_summary",
            "get_month_variances",
            "identify_profile",
        ):
            assert callable(getattr(BudgetAllocationService, name))


# =============================================================================
# Creation
# =============================================================================


class TestAddAllocation:

    def test_equal_distribution(self, allocation_service, allocation_form, test_actor_id):
        allocation = allocation_service.add_allocation(allocation_form(), test_actor_id)

        assert allocation.distribution_type is DistributionType.EQUAL
        assert [m.month for m in allocation.allocations] == list(range(1, 13))
        assert all(m.year == 2024 for m in allocation.allocations)
        assert allocation.month(1).planned_amount == Decimal("9996")
        assert allocation.month(12).planned_amount == Decimal("10044")
        assert allocation.planned_total == Decimal("120000")
        assert allocation.actual_total == Decimal("0")
        assert allocation.created_by_id == test_actor_id

    def test_persisted(self, allocation_service, allocation_form, test_actor_id):
        created = allocation_service.add_allocation(allocation_form(), test_actor_id)
        fetched = allocation_service.get_allocation(created.id)
        assert fetched.id == created.id
        assert fetched.total_amount == Decimal("120000")
        assert len(fetched.allocations) == 12

    def test_year_taken_from_fiscal_year_id(self, allocation_service, allocation_form, test_actor_id):
        allocation = allocation_service.add_allocation(
            allocation_form(fiscal_year_id="FY-2026"), test_actor_id,
        )
        assert {m.year for m in allocation.allocations} == {2026}

    def test_year_falls_back_to_clock(self, allocation_service, allocation_form, test_actor_id):
        allocation = allocation_service.add_allocation(
            allocation_form(fiscal_year_id="BUDGET"), test_actor_id,
        )
        assert {m.year for m in allocation.allocations} == {2024}

    def test_weighted_distribution(self, allocation_service, allocation_form, test_actor_id):
        allocation = allocation_service.add_allocation(
            allocation_form(
                total_amount=Decimal("100000"),
                distribution_type=DistributionType.WEIGHTED,
            ),
            test_actor_id,
        )
        assert allocation.month(12).planned_amount == Decimal("25000")

    def test_seasonal_named_profile(self, allocation_service, allocation_form, test_actor_id):
        allocation = allocation_service.add_allocation(
            allocation_form(
                total_amount=Decimal("100000"),
                distribution_type=DistributionType.SEASONAL,
                profile_name="quarter-end-heavy",
            ),
            test_actor_id,
        )
        assert allocation.month(3).planned_amount == Decimal("15000")
        assert allocation.month(4).planned_amount == Decimal("5000")

    def test_custom_distribution(self, allocation_service, allocation_form, test_actor_id):
        amounts = _custom_amounts("5000", "15000")
        allocation = allocation_service.add_allocation(
            allocation_form(
                distribution_type=DistributionType.CUSTOM,
                planned_amounts=amounts,
            ),
            test_actor_id,
        )
        assert allocation.planned_amounts == amounts
        assert abs(allocation.month(1).percentage - Decimal("4.1666666667")) < Decimal("1e-6")
        assert allocation.month(12).percentage == Decimal("12.5")

    def test_custom_within_tolerance(self, allocation_service, allocation_form, test_actor_id):
        allocation = allocation_service.add_allocation(
            allocation_form(
                total_amount=Decimal("120000.01"),
                distribution_type=DistributionType.CUSTOM,
                planned_amounts=(Decimal("10000"),) * 12,
            ),
            test_actor_id,
        )
        assert allocation.planned_total == Decimal("120000")

    def test_empty_custom_amounts_spread_equally(
        self, allocation_service, allocation_form, test_actor_id,
    ):
        allocation = allocation_service.add_allocation(
            allocation_form(distribution_type=DistributionType.CUSTOM, planned_amounts=()),
            test_actor_id,
        )
        assert allocation.month(1).planned_amount == Decimal("9996")
        assert allocation.planned_total == Decimal("120000")
        assert allocation.distribution_type is DistributionType.CUSTOM

    def test_missing_type_uses_configured_default(
        self, session, deterministic_clock, allocation_form, test_actor_id,
    ):
        weighted_default = parse_settings({
            "config_id": "weighted-default",
            "version": 1,
            "allocation": {"default_distribution": "weighted"},
        })
        service = BudgetAllocationService(
            session, clock=deterministic_clock, settings=weighted_default,
        )
        allocation = service.add_allocation(
            allocation_form(total_amount=Decimal("100000"), distribution_type=None),
            test_actor_id,
        )
        assert allocation.distribution_type is DistributionType.WEIGHTED
        assert allocation.month(12).planned_amount == Decimal("25000")

    def test_logs_creation(self, allocation_service, allocation_form, test_actor_id, captured_logs):
        allocation = allocation_service.add_allocation(allocation_form(), test_actor_id)
        created = [r for r in captured_logs() if r["message"] == "allocation_created"]
        assert created[0]["allocation_id"] == str(allocation.id)
        assert created[0]["total_amount"] == "120000"


class TestAddAllocationValidation:

    def test_custom_sum_mismatch(self, allocation_service, allocation_form, test_actor_id):
        with pytest.raises(ValidationError) as exc_info:
            allocation_service.add_allocation(
                allocation_form(
                    distribution_type=DistributionType.CUSTOM,
                    planned_amounts=_custom_amounts("10000", "8000"),
                ),
                test_actor_id,
            )
        assert exc_info.value.field_errors["planned_amounts"] == (
            "The sum of monthly allocations (R$ 108,000.00) "
            "must equal the total amount (R$ 120,000.00)"
        )
        assert allocation_service.list_allocations() == []

    def test_missing_fields(self, allocation_service, allocation_form, test_actor_id):
        with pytest.raises(ValidationError) as exc_info:
            allocation_service.add_allocation(
                allocation_form(budget_item_id="", total_amount=Decimal("0")),
                test_actor_id,
            )
        assert set(exc_info.value.field_errors) == {"budget_item_id", "total_amount"}
        assert exc_info.value.code == "VALIDATION_FAILED"

    def test_validation_failure_logged(
        self, allocation_service, allocation_form, test_actor_id, captured_logs,
    ):
        with pytest.raises(ValidationError):
            allocation_service.add_allocation(
                allocation_form(cost_center_id=" "), test_actor_id,
            )
        failures = [
            r for r in captured_logs() if r["message"] == "allocation_validation_failed"
        ]
        assert failures[0]["fields"] == ["cost_center_id"]

    def test_unknown_profile_rolls_back(self, allocation_service, allocation_form, test_actor_id):
        with pytest.raises(UnknownProfileError):
            allocation_service.add_allocation(
                allocation_form(
                    distribution_type=DistributionType.SEASONAL,
                    profile_name="spiky",
                ),
                test_actor_id,
            )
        assert allocation_service.list_allocations() == []


# =============================================================================
# Updates
# =============================================================================


class TestUpdateAllocation:

    def test_total_change_regenerates_and_keeps_actuals(
        self, allocation_service, allocation_form, test_actor_id,
    ):
        created = allocation_service.add_allocation(allocation_form(), test_actor_id)
        allocation_service.update_actual_amount(
            created.id, 1, Decimal("9500"), test_actor_id, notes="licences",
        )

        updated = allocation_service.update_allocation(
            created.id, AllocationUpdate(total_amount=Decimal("240000")), test_actor_id,
        )
        assert updated.total_amount == Decimal("240000")
        assert updated.month(1).planned_amount == Decimal("19992")
        assert updated.month(1).actual_amount == Decimal("9500")
        assert updated.month(1).notes == "licences"
        assert updated.month(2).actual_amount is None
        assert updated.planned_total == Decimal("240000")

    def test_distribution_type_change(self, allocation_service, allocation_form, test_actor_id):
        created = allocation_service.add_allocation(allocation_form(), test_actor_id)
        updated = allocation_service.update_allocation(
            created.id,
            AllocationUpdate(distribution_type=DistributionType.WEIGHTED),
            test_actor_id,
        )
        assert updated.distribution_type is DistributionType.WEIGHTED
        assert updated.month(12).percentage == Decimal("25")
        assert updated.month(12).planned_amount == Decimal("30000")

    def test_seasonal_keeps_named_profile(self, allocation_service, allocation_form, test_actor_id):
        created = allocation_service.add_allocation(
            allocation_form(
                total_amount=Decimal("100000"),
                distribution_type=DistributionType.SEASONAL,
                profile_name="quarter-end-heavy",
            ),
            test_actor_id,
        )
        updated = allocation_service.update_allocation(
            created.id, AllocationUpdate(total_amount=Decimal("200000")), test_actor_id,
        )
        assert updated.month(3).planned_amount == Decimal("30000")
        assert allocation_service.identify_profile(created.id) == "quarter-end-heavy"

    def test_new_profile_name_regenerates(self, allocation_service, allocation_form, test_actor_id):
        created = allocation_service.add_allocation(
            allocation_form(
                total_amount=Decimal("100000"),
                distribution_type=DistributionType.SEASONAL,
            ),
            test_actor_id,
        )
        updated = allocation_service.update_allocation(
            created.id, AllocationUpdate(profile_name="year-end-heavy"), test_actor_id,
        )
        assert updated.month(12).planned_amount == Decimal("25000")

    def test_replan_keeps_stored_type(self, allocation_service, allocation_form, test_actor_id):
        created = allocation_service.add_allocation(allocation_form(), test_actor_id)
        amounts = _custom_amounts("6000", "14000")
        updated = allocation_service.update_allocation(
            created.id, AllocationUpdate(planned_amounts=amounts), test_actor_id,
        )
        assert updated.distribution_type is DistributionType.EQUAL
        assert updated.planned_amounts == amounts

    def test_replan_sum_must_match_total(self, allocation_service, allocation_form, test_actor_id):
        created = allocation_service.add_allocation(allocation_form(), test_actor_id)
        with pytest.raises(ValidationError) as exc_info:
            allocation_service.update_allocation(
                created.id,
                AllocationUpdate(planned_amounts=(Decimal("1"),) * 12),
                test_actor_id,
            )
        assert "planned_amounts" in exc_info.value.field_errors
        unchanged = allocation_service.get_allocation(created.id)
        assert unchanged.month(1).planned_amount == Decimal("9996")

    def test_custom_total_change_spreads_equally(
        self, allocation_service, allocation_form, test_actor_id,
    ):
        created = allocation_service.add_allocation(
            allocation_form(
                total_amount=Decimal("1200"),
                distribution_type=DistributionType.CUSTOM,
                planned_amounts=(Decimal("100"),) * 12,
            ),
            test_actor_id,
        )
        allocation_service.update_actual_amount(created.id, 1, Decimal("90"), test_actor_id)

        updated = allocation_service.update_allocation(
            created.id, AllocationUpdate(total_amount=Decimal("2400")), test_actor_id,
        )
        assert updated.planned_total == Decimal("2400")
        assert updated.month(1).planned_amount == Decimal("199.92")
        assert updated.month(12).planned_amount == Decimal("200.88")
        assert updated.month(1).actual_amount == Decimal("90")
        assert updated.distribution_type is DistributionType.CUSTOM

    def test_custom_total_change_with_new_amounts(
        self, allocation_service, allocation_form, test_actor_id,
    ):
        created = allocation_service.add_allocation(
            allocation_form(
                distribution_type=DistributionType.CUSTOM,
                planned_amounts=(Decimal("10000"),) * 12,
            ),
            test_actor_id,
        )

        updated = allocation_service.update_allocation(
            created.id,
            AllocationUpdate(
                total_amount=Decimal("150000"),
                planned_amounts=(Decimal("12500"),) * 12,
            ),
            test_actor_id,
        )
        assert updated.planned_total == Decimal("150000")
        assert updated.distribution_type is DistributionType.CUSTOM

    def test_fiscal_year_change_restamps_months(
        self, allocation_service, allocation_form, test_actor_id,
    ):
        created = allocation_service.add_allocation(allocation_form(), test_actor_id)
        allocation_service.update_actual_amount(created.id, 2, Decimal("100"), test_actor_id)

        updated = allocation_service.update_allocation(
            created.id, AllocationUpdate(fiscal_year_id="FY-2025"), test_actor_id,
        )
        assert updated.fiscal_year_id == "FY-2025"
        assert {m.year for m in updated.allocations} == {2025}
        assert updated.month(2).actual_amount == Decimal("100")
        assert updated.month(1).planned_amount == Decimal("9996")

    def test_plain_field_edit(self, allocation_service, allocation_form, test_actor_id):
        created = allocation_service.add_allocation(allocation_form(), test_actor_id)
        updated = allocation_service.update_allocation(
            created.id,
            AllocationUpdate(notes="approved by board", cost_center_id="CC-OPS"),
            test_actor_id,
        )
        assert updated.notes == "approved by board"
        assert updated.cost_center_id == "CC-OPS"
        assert updated.planned_amounts == created.planned_amounts

    def test_same_total_does_not_regenerate(
        self, allocation_service, allocation_form, test_actor_id, captured_logs,
    ):
        created = allocation_service.add_allocation(allocation_form(), test_actor_id)
        allocation_service.update_allocation(
            created.id, AllocationUpdate(total_amount=Decimal("120000")), test_actor_id,
        )
        updates = [r for r in captured_logs() if r["message"] == "allocation_updated"]
        assert updates[0]["regenerated"] is False

    def test_unknown_allocation(self, allocation_service, test_actor_id):
        with pytest.raises(AllocationNotFoundError):
            allocation_service.update_allocation(uuid4(), AllocationUpdate(), test_actor_id)


class TestDeleteAllocation:

    def test_delete_removes_months(self, allocation_service, allocation_form, test_actor_id, session):
        created = allocation_service.add_allocation(allocation_form(), test_actor_id)
        allocation_service.delete_allocation(created.id)

        with pytest.raises(AllocationNotFoundError):
            allocation_service.get_allocation(created.id)
        count = session.execute(
            select(func.count()).select_from(MonthlyAllocationModel)
        ).scalar_one()
        assert count == 0

    def test_delete_unknown(self, allocation_service):
        with pytest.raises(AllocationNotFoundError):
            allocation_service.delete_allocation(uuid4())


# =============================================================================
# Execution tracking
# =============================================================================


class TestUpdateActualAmount:

    def test_records_actual_without_touching_plan(
        self, allocation_service, allocation_form, test_actor_id,
    ):
        created = allocation_service.add_allocation(allocation_form(), test_actor_id)
        updated = allocation_service.update_actual_amount(
            created.id, 5, Decimal("10250.75"), test_actor_id,
        )
        assert updated.month(5).actual_amount == Decimal("10250.75")
        assert updated.month(5).planned_amount == Decimal("9996")
        assert updated.month(5).percentage == Decimal("8.33")
        assert updated.actual_total == Decimal("10250.75")

    def test_clear_actual(self, allocation_service, allocation_form, test_actor_id):
        created = allocation_service.add_allocation(allocation_form(), test_actor_id)
        allocation_service.update_actual_amount(created.id, 5, Decimal("1"), test_actor_id)
        updated = allocation_service.update_actual_amount(created.id, 5, None, test_actor_id)
        assert updated.month(5).actual_amount is None

    def test_unknown_month(self, allocation_service, allocation_form, test_actor_id):
        created = allocation_service.add_allocation(allocation_form(), test_actor_id)
        with pytest.raises(MonthlyAllocationNotFoundError) as exc_info:
            allocation_service.update_actual_amount(created.id, 13, Decimal("1"), test_actor_id)
        assert exc_info.value.month == 13

    def test_unknown_allocation(self, allocation_service, test_actor_id):
        with pytest.raises(AllocationNotFoundError):
            allocation_service.update_actual_amount(uuid4(), 1, Decimal("1"), test_actor_id)


# =============================================================================
# Reads and reporting
# =============================================================================


@pytest.fixture
def populated(allocation_service, allocation_form, test_actor_id):
    """Three allocations over two cost centers and two fiscal years."""
    it = allocation_service.add_allocation(allocation_form(), test_actor_id)
    hr = allocation_service.add_allocation(
        allocation_form(
            budget_item_id="BI-TRAINING",
            cost_center_id="CC-HR",
            total_amount=Decimal("12000"),
        ),
        test_actor_id,
    )
    next_year = allocation_service.add_allocation(
        allocation_form(fiscal_year_id="FY-2025"), test_actor_id,
    )
    return it, hr, next_year


class TestListing:

    def test_list_all_ordered(self, allocation_service, populated):
        it, hr, next_year = populated
        ids = [a.id for a in allocation_service.list_allocations()]
        assert ids == [it.id, hr.id, next_year.id]

    def test_filters(self, allocation_service, populated):
        it, hr, next_year = populated
        assert [a.id for a in allocation_service.list_by_cost_center("CC-HR")] == [hr.id]
        assert [a.id for a in allocation_service.list_by_budget_item("BI-SOFTWARE")] == [
            it.id, next_year.id,
        ]
        assert [a.id for a in allocation_service.list_by_fiscal_year("FY-2025")] == [
            next_year.id,
        ]
        assert allocation_service.list_by_fiscal_year("FY-1999") == []


class TestReporting:

    def test_monthly_totals(self, allocation_service, populated):
        totals = allocation_service.get_monthly_totals("FY-2024")
        assert len(totals) == 12
        assert totals[0].planned == Decimal("10995.6")

    def test_monthly_totals_by_cost_center(self, allocation_service, populated):
        totals = allocation_service.get_monthly_totals("FY-2024", cost_center_id="CC-IT")
        assert totals[0].planned == Decimal("9996")

    def test_yearly_totals(self, allocation_service, populated, test_actor_id):
        it, _, _ = populated
        allocation_service.update_actual_amount(it.id, 1, Decimal("10000"), test_actor_id)

        totals = allocation_service.get_yearly_totals("FY-2024")
        assert totals.planned == Decimal("132000")
        assert totals.actual == Decimal("10000")
        assert totals.variance == Decimal("122000")

    def test_yearly_totals_empty_year(self, allocation_service, populated):
        totals = allocation_service.get_yearly_totals("FY-1999")
        assert totals.planned == Decimal("0")
        assert totals.variance_percentage == Decimal("0")

    def test_execution_summary_and_variances(self, allocation_service, populated, test_actor_id):
        it, _, _ = populated
        allocation_service.update_actual_amount(it.id, 1, Decimal("10000"), test_actor_id)
        allocation_service.update_actual_amount(it.id, 2, Decimal("9000"), test_actor_id)

        summary = allocation_service.get_execution_summary(it.id)
        assert summary.total_actual == Decimal("19000")
        assert summary.variance == Decimal("101000")
        assert summary.realized_months == 2

        variances = allocation_service.get_month_variances(it.id)
        assert [v.month for v in variances] == [1, 2]
        assert variances[0].variance == Decimal("4")
        assert variances[0].is_over_budget
        assert variances[1].variance == Decimal("-996")

    @pytest.mark.parametrize(
        "strategy,expected",
        [
            (DistributionType.EQUAL, "uniform"),
            (DistributionType.WEIGHTED, "year-end-heavy"),
            (DistributionType.SEASONAL, "seasonal"),
        ],
    )
    def test_identify_profile(
        self, allocation_service, allocation_form, test_actor_id, strategy, expected,
    ):
        created = allocation_service.add_allocation(
            allocation_form(distribution_type=strategy), test_actor_id,
        )
        assert allocation_service.identify_profile(created.id) == expected

    def test_identify_custom(self, allocation_service, allocation_form, test_actor_id):
        created = allocation_service.add_allocation(
            allocation_form(
                distribution_type=DistributionType.CUSTOM,
                planned_amounts=(Decimal("120000"),) + (Decimal("0"),) * 11,
            ),
            test_actor_id,
        )
        assert allocation_service.identify_profile(created.id) == "custom"
