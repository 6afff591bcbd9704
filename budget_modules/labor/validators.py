"""
Labor budget form validation.

Returns field-level messages; benefit and charge errors are keyed by
position, e.g. ``benefits[1].value``.
"""

from __future__ import annotations

from decimal import Decimal

from budget_config.schema import BudgetSettings
from budget_engines.labor_cost import Benefit, LaborCharge
from budget_kernel.domain.numeric import MONTHS_PER_YEAR, ZERO, to_decimal
from budget_modules.labor.models import LaborBudgetFormData


def validate_labor_form(
    form: LaborBudgetFormData,
    settings: BudgetSettings,
) -> dict[str, str]:
    """Field name -> message for every rule ``form`` breaks."""
    errors: dict[str, str] = {}

    if not (form.position or "").strip():
        errors["position"] = "Position is required"
    if not (form.department or "").strip():
        errors["department"] = "Department is required"

    salary = _as_decimal(form.base_salary)
    if salary is None or salary <= ZERO:
        errors["base_salary"] = "Base salary must be greater than zero"

    min_quantity = settings.labor.min_quantity
    if not isinstance(form.quantity, int) or form.quantity < min_quantity:
        errors["quantity"] = f"Quantity must be at least {min_quantity}"

    if not (form.cost_center_id or "").strip():
        errors["cost_center_id"] = "Cost center is required"
    if not (form.fiscal_year_id or "").strip():
        errors["fiscal_year_id"] = "Fiscal year is required"

    for index, benefit in enumerate(form.benefits):
        errors.update(_benefit_errors(index, benefit))

    max_percentage = settings.labor.max_charge_percentage
    for index, charge in enumerate(form.charges):
        errors.update(_charge_errors(index, charge, max_percentage))

    return errors


def _benefit_errors(index: int, benefit: Benefit) -> dict[str, str]:
    errors = {}
    key = f"benefits[{index}]"
    if not (benefit.name or "").strip():
        errors[f"{key}.name"] = "Benefit name is required"
    value = _as_decimal(benefit.value)
    if value is None or value < ZERO:
        errors[f"{key}.value"] = "Benefit value cannot be negative"
    if not 1 <= benefit.months <= MONTHS_PER_YEAR:
        errors[f"{key}.months"] = f"Benefit months must be between 1 and {MONTHS_PER_YEAR}"
    return errors


def _charge_errors(
    index: int,
    charge: LaborCharge,
    max_percentage: Decimal,
) -> dict[str, str]:
    errors = {}
    key = f"charges[{index}]"
    if not (charge.name or "").strip():
        errors[f"{key}.name"] = "Charge name is required"
    percentage = _as_decimal(charge.percentage)
    if percentage is None or not ZERO <= percentage <= max_percentage:
        errors[f"{key}.percentage"] = (
            f"Charge percentage must be between 0 and {max_percentage}"
        )
    return errors


def _as_decimal(value) -> Decimal | None:
    if value is None:
        return None
    try:
        return to_decimal(value)
    except ValueError:
        return None
