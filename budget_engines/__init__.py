"""
Module: budget_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for the
    module layer (budget_modules).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import budget_kernel (domain, exceptions, logging) and sibling
    engine modules.  MUST NOT import budget_modules, budget_config or the
    db layer.

Invariants enforced:
    - Purity: engines never read the clock; years are passed in.
    - Decimal-only arithmetic for money and percentages.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from budget_engines import AllocationDistributor, DistributionType
    from budget_engines import LaborCostCalculator, FixedBenefit, LaborCharge
    from budget_engines import VarianceCalculator
"""

from budget_kernel.logging_config import get_logger

logger = get_logger("engines")

from budget_engines.distribution import (
    STRATEGY_PROFILES,
    AllocationDistributor,
    DistributionType,
    MonthlyAllocation,
    percentage_total,
    planned_total,
)
from budget_engines.labor_cost import (
    Benefit,
    BenefitType,
    FixedBenefit,
    LaborCharge,
    LaborCostBreakdown,
    LaborCostCalculator,
    PercentageBenefit,
    monthly_cost_per_employee,
)
from budget_engines.labor_templates import (
    BENEFIT_TEMPLATES,
    CHARGE_TEMPLATES,
    DEFAULT_BENEFITS,
    DEFAULT_CHARGES,
    DEPARTMENT_OPTIONS,
)
from budget_engines.profiles import (
    CUSTOM,
    DISTRIBUTION_PROFILES,
    DistributionProfile,
    get_profile,
    identify_profile,
    profile_names,
)
from budget_engines.variance import (
    ExecutionSummary,
    MonthlyTotal,
    MonthVariance,
    VarianceCalculator,
    YearlyTotals,
)

__all__ = [
    # Distribution
    "AllocationDistributor",
    "DistributionType",
    "MonthlyAllocation",
    "STRATEGY_PROFILES",
    "planned_total",
    "percentage_total",
    # Profiles
    "CUSTOM",
    "DISTRIBUTION_PROFILES",
    "DistributionProfile",
    "get_profile",
    "identify_profile",
    "profile_names",
    # Variance
    "VarianceCalculator",
    "MonthVariance",
    "MonthlyTotal",
    "YearlyTotals",
    "ExecutionSummary",
    # Labor cost
    "LaborCostCalculator",
    "LaborCostBreakdown",
    "Benefit",
    "BenefitType",
    "FixedBenefit",
    "PercentageBenefit",
    "LaborCharge",
    "monthly_cost_per_employee",
    # Templates
    "BENEFIT_TEMPLATES",
    "CHARGE_TEMPLATES",
    "DEFAULT_BENEFITS",
    "DEFAULT_CHARGES",
    "DEPARTMENT_OPTIONS",
]
