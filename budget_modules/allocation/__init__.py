"""
Budget Allocation Module (``budget_modules.allocation``).

Responsibility
--------------
Annual budgets per (budget item, cost center, fiscal year) spread over
twelve months, execution tracking (actual amounts per month) and
planned vs. actual reporting.

Architecture position
---------------------
**Modules layer** -- DTOs, form validation, ORM persistence and a service
facade that delegates distribution and variance arithmetic to
``budget_engines``.
"""

from budget_modules.allocation.models import (
    AllocationFormData,
    AllocationUpdate,
    BudgetAllocation,
    resolve_fiscal_year,
)
from budget_modules.allocation.service import BudgetAllocationService
from budget_modules.allocation.validators import validate_allocation_form

__all__ = [
    "AllocationFormData",
    "AllocationUpdate",
    "BudgetAllocation",
    "BudgetAllocationService",
    "resolve_fiscal_year",
    "validate_allocation_form",
]
