"""Pure domain helpers for the budget kernel (clock, numeric)."""

from budget_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from budget_kernel.domain.numeric import (
    HUNDRED,
    MONTHS_PER_YEAR,
    ZERO,
    format_money,
    format_percentage,
    percent_of,
    quantize_money,
    safe_percentage,
    safe_ratio,
    sum_decimals,
    to_decimal,
    within_tolerance,
)

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "HUNDRED",
    "MONTHS_PER_YEAR",
    "ZERO",
    "format_money",
    "format_percentage",
    "percent_of",
    "quantize_money",
    "safe_percentage",
    "safe_ratio",
    "sum_decimals",
    "to_decimal",
    "within_tolerance",
]
