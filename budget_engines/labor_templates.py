"""
Default labor cost templates.

Read-only lookups built once at import: the benefit and charge rules a new
labor budget starts from, keyed by name, and the department options offered
when classifying a position.
"""

from collections.abc import Mapping
from decimal import Decimal
from types import MappingProxyType

from budget_engines.labor_cost import (
    Benefit,
    FixedBenefit,
    LaborCharge,
    PercentageBenefit,
)

DEFAULT_BENEFITS: tuple[Benefit, ...] = (
    FixedBenefit("Meal Voucher", Decimal("500"), months=12, is_monthly=True),
    FixedBenefit("Transportation Voucher", Decimal("220"), months=12, is_monthly=True),
    FixedBenefit("Health Plan", Decimal("400"), months=12, is_monthly=True),
    PercentageBenefit("13th Salary", Decimal("100"), months=1, is_monthly=False),
    # Vacation pay plus the constitutional one-third bonus.
    PercentageBenefit("Vacation", Decimal("133.33"), months=1, is_monthly=False),
)

DEFAULT_CHARGES: tuple[LaborCharge, ...] = (
    LaborCharge("INSS", Decimal("20")),
    LaborCharge("FGTS", Decimal("8")),
    LaborCharge("PIS/PASEP", Decimal("1")),
    LaborCharge("Severance Provision", Decimal("4"), base_includes_benefits=True),
)

BENEFIT_TEMPLATES: Mapping[str, Benefit] = MappingProxyType(
    {b.name: b for b in DEFAULT_BENEFITS}
)

CHARGE_TEMPLATES: Mapping[str, LaborCharge] = MappingProxyType(
    {c.name: c for c in DEFAULT_CHARGES}
)

DEPARTMENT_OPTIONS: tuple[str, ...] = (
    "Administrative",
    "Commercial",
    "Finance",
    "Marketing",
    "Operations",
    "Production",
    "Human Resources",
    "Information Technology",
    "Other",
)
