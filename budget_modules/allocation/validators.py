"""
Allocation form validation.

Returns field-level messages instead of raising so callers can show every
problem at once; ``BudgetAllocationService`` wraps a non-empty result in
``ValidationError``.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from budget_config.schema import BudgetSettings
from budget_engines.distribution import DistributionType
from budget_kernel.domain.numeric import (
    MONTHS_PER_YEAR,
    ZERO,
    format_money,
    sum_decimals,
    to_decimal,
    within_tolerance,
)
from budget_modules.allocation.models import AllocationFormData


def validate_allocation_form(
    form: AllocationFormData,
    settings: BudgetSettings,
) -> dict[str, str]:
    """Field name -> message for every rule ``form`` breaks."""
    errors: dict[str, str] = {}

    if not (form.budget_item_id or "").strip():
        errors["budget_item_id"] = "Budget item is required"
    if not (form.fiscal_year_id or "").strip():
        errors["fiscal_year_id"] = "Fiscal year is required"
    if not (form.cost_center_id or "").strip():
        errors["cost_center_id"] = "Cost center is required"

    total = _as_decimal(form.total_amount)
    if total is None or total <= ZERO:
        errors["total_amount"] = "Total amount must be greater than zero"

    try:
        strategy = DistributionType(
            form.distribution_type or settings.allocation.default_distribution
        )
    except ValueError:
        errors["distribution_type"] = (
            f"Unknown distribution type: {form.distribution_type!r}"
        )
        strategy = None

    # Empty amounts mean none; custom then falls back to equal.
    if form.planned_amounts:
        message = _check_planned_amounts(form.planned_amounts, strategy, total, settings)
        if message:
            errors["planned_amounts"] = message

    return errors


def _check_planned_amounts(
    planned_amounts: Sequence,
    strategy: DistributionType | None,
    total: Decimal | None,
    settings: BudgetSettings,
) -> str | None:
    amounts = [_as_decimal(v) for v in planned_amounts]
    if len(amounts) != MONTHS_PER_YEAR:
        return f"Monthly amounts must have {MONTHS_PER_YEAR} entries, got {len(amounts)}"
    if any(a is None for a in amounts):
        return "Monthly amounts must be numeric"
    if any(a < ZERO for a in amounts):
        return "Monthly amounts cannot be negative"

    # The sum rule binds custom distributions only.
    if strategy is not DistributionType.CUSTOM or total is None:
        return None

    allocated = sum_decimals(amounts)
    if not within_tolerance(allocated, total, settings.allocation.sum_tolerance):
        symbol = settings.currency_symbol
        places = settings.decimal_places
        return (
            f"The sum of monthly allocations ({format_money(allocated, symbol, places)}) "
            f"must equal the total amount ({format_money(total, symbol, places)})"
        )
    return None


def _as_decimal(value) -> Decimal | None:
    if value is None:
        return None
    try:
        return to_decimal(value)
    except ValueError:
        return None
