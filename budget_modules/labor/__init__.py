"""
Labor Budget Module (``budget_modules.labor``).

Responsibility
--------------
Budgeted positions: base salary, benefits, statutory charges and
headcount per cost center and fiscal year, with the annual cost derived
by ``budget_engines.LaborCostCalculator``.

Architecture position
---------------------
**Modules layer** -- DTOs, form parsers and validation, ORM persistence and
a service facade.
"""

from budget_modules.labor.models import (
    LaborBudget,
    LaborBudgetFormData,
    LaborBudgetUpdate,
    LaborStatusFilter,
    benefit_as_dict,
    charge_as_dict,
    parse_benefit,
    parse_charge,
)
from budget_modules.labor.service import LaborBudgetService
from budget_modules.labor.validators import validate_labor_form

__all__ = [
    "LaborBudget",
    "LaborBudgetFormData",
    "LaborBudgetService",
    "LaborBudgetUpdate",
    "LaborStatusFilter",
    "benefit_as_dict",
    "charge_as_dict",
    "parse_benefit",
    "parse_charge",
    "validate_labor_form",
]
