"""
Module: budget_engines.labor_cost
Responsibility:
    Compute the annual cost of a budgeted position: base salary, benefits
    (fixed amounts or percentages of salary, paid a number of times per
    year), statutory charges on salary (optionally on salary plus benefits),
    multiplied by headcount.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import budget_kernel.domain and sibling engine modules.

Invariants enforced:
    - Benefits are tagged variants (``FixedBenefit | PercentageBenefit``);
      the calculator dispatches on the variant class, never on a string.
    - Charges are computed after benefits so ``base_includes_benefits`` sees
      the full annual benefit total.
    - ``is_monthly`` is informational; ``months`` alone drives arithmetic.
    - No clamping, no rounding: inputs are trusted once validated upstream.
    - Salary, benefit values and charge percentages are coerced with
      ``to_decimal``, so ints, floats and numeric strings are accepted.
    - Purity: identical inputs give identical output; adding one to
      ``quantity`` adds exactly one ``annual_cost_per_employee``.

Failure modes:
    - TypeError when a benefit is neither variant.

Usage:
    from budget_engines.labor_cost import FixedBenefit, LaborCharge, LaborCostCalculator

    total = LaborCostCalculator().calculate(
        base_salary=Decimal("5000"),
        benefits=[FixedBenefit("Meal Voucher", Decimal("500"), months=12)],
        charges=[LaborCharge("INSS", Decimal("20"))],
        quantity=2,
    )
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from budget_engines.tracer import traced_engine
from budget_kernel.domain.numeric import (
    MONTHS_PER_YEAR,
    ZERO,
    Numeric,
    percent_of,
    safe_ratio,
    to_decimal,
)
from budget_kernel.logging_config import get_logger

logger = get_logger("engines.labor_cost")


class BenefitType(str, Enum):
    """Wire/form tag of a benefit variant."""

    FIXED = "fixed"
    PERCENTAGE = "percentage"


@dataclass(frozen=True)
class FixedBenefit:
    """A fixed amount paid ``months`` times a year."""

    name: str
    value: Decimal
    months: int = MONTHS_PER_YEAR
    is_monthly: bool = True

    @property
    def type(self) -> BenefitType:
        return BenefitType.FIXED


@dataclass(frozen=True)
class PercentageBenefit:
    """``value`` percent of base salary, paid ``months`` times a year."""

    name: str
    value: Decimal
    months: int = 1
    is_monthly: bool = False

    @property
    def type(self) -> BenefitType:
        return BenefitType.PERCENTAGE


Benefit = FixedBenefit | PercentageBenefit


@dataclass(frozen=True)
class LaborCharge:
    """A statutory charge on annual salary (plus benefits when flagged)."""

    name: str
    percentage: Decimal
    base_includes_benefits: bool = False


@dataclass(frozen=True)
class LaborCostBreakdown:
    """
    Every intermediate of the labor cost pipeline.

    Guarantees:
        - ``total_cost == annual_cost_per_employee * quantity``.
        - ``annual_cost_per_employee == annual_salary + total_benefits
          + charges_amount``.
    """

    base_salary: Decimal
    annual_salary: Decimal
    fixed_benefits: Decimal
    percentage_benefits: Decimal
    total_benefits: Decimal
    charges_amount: Decimal
    annual_cost_per_employee: Decimal
    quantity: int
    total_cost: Decimal

    @property
    def monthly_cost_per_employee(self) -> Decimal:
        return monthly_cost_per_employee(self.total_cost, self.quantity)


def monthly_cost_per_employee(total_cost: Numeric, quantity: int) -> Decimal:
    """``total_cost / (quantity * 12)``, or 0 when quantity is 0."""
    return safe_ratio(to_decimal(total_cost), Decimal(quantity * MONTHS_PER_YEAR))


class LaborCostCalculator:
    """
    Annual labor cost of a position.

    Contract:
        Pure functions.  No I/O, no database access.
    Guarantees:
        1. annual_fixed_benefits = sum(value * months) over fixed benefits
        2. percentage_benefits = sum(base * value / 100 * months)
        3. total_benefits = 1 + 2
        4. charges = sum((base * 12 [+ total_benefits]) * percentage / 100)
        5. annual_cost_per_employee = base * 12 + total_benefits + charges
        6. total_cost = annual_cost_per_employee * quantity
    Non-goals:
        - Does not validate quantity, salary, or percentage ranges.
    """

    @traced_engine(
        "labor_cost",
        "1.0",
        fingerprint_fields=("base_salary", "benefits", "charges", "quantity"),
    )
    def calculate(
        self,
        base_salary: Numeric,
        benefits: Sequence[Benefit],
        charges: Sequence[LaborCharge],
        quantity: int,
    ) -> Decimal:
        """Total annual cost for ``quantity`` employees."""
        return self.breakdown(
            base_salary=base_salary,
            benefits=benefits,
            charges=charges,
            quantity=quantity,
        ).total_cost

    def breakdown(
        self,
        base_salary: Numeric,
        benefits: Sequence[Benefit],
        charges: Sequence[LaborCharge],
        quantity: int,
    ) -> LaborCostBreakdown:
        """Run the pipeline and return every intermediate amount."""
        salary = to_decimal(base_salary)
        annual_salary = salary * MONTHS_PER_YEAR

        fixed_benefits = ZERO
        percentage_benefits = ZERO
        for benefit in benefits:
            match benefit:
                case FixedBenefit(value=value, months=months):
                    fixed_benefits += to_decimal(value) * months
                case PercentageBenefit(value=value, months=months):
                    percentage_benefits += percent_of(salary, to_decimal(value)) * months
                case _:
                    raise TypeError(f"Unsupported benefit: {benefit!r}")
        total_benefits = fixed_benefits + percentage_benefits

        charges_amount = ZERO
        for charge in charges:
            charge_base = (
                annual_salary + total_benefits
                if charge.base_includes_benefits
                else annual_salary
            )
            charges_amount += percent_of(charge_base, to_decimal(charge.percentage))

        annual_cost = annual_salary + total_benefits + charges_amount
        total_cost = annual_cost * quantity

        logger.info("labor_cost_calculated", extra={
            "base_salary": str(salary),
            "benefit_count": len(benefits),
            "charge_count": len(charges),
            "total_benefits": str(total_benefits),
            "charges_amount": str(charges_amount),
            "quantity": quantity,
            "total_cost": str(total_cost),
        })

        return LaborCostBreakdown(
            base_salary=salary,
            annual_salary=annual_salary,
            fixed_benefits=fixed_benefits,
            percentage_benefits=percentage_benefits,
            total_benefits=total_benefits,
            charges_amount=charges_amount,
            annual_cost_per_employee=annual_cost,
            quantity=quantity,
            total_cost=total_cost,
        )
