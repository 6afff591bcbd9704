"""
Module: budget_kernel.domain.numeric
Responsibility:
    Decimal helpers shared by the engines and the module layer: coercion,
    zero-safe ratios, percentage arithmetic, tolerance checks, and display
    formatting for money and percentages.

Architecture position:
    Kernel > Domain -- pure functions, zero I/O.  Lowest import target for
    budget_engines.

Invariants enforced:
    - Decimal-only arithmetic: floats are converted through ``str`` so a
      float literal such as ``8.33`` becomes ``Decimal("8.33")``, never the
      binary expansion.
    - Zero denominators yield ``Decimal("0")`` (never an exception or NaN).

Failure modes:
    - ValueError from ``to_decimal`` on values that are not numeric, NaN,
      or infinite.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

ZERO = Decimal("0")
HUNDRED = Decimal("100")
MONTHS_PER_YEAR = 12

Numeric = Decimal | int | float | str


def to_decimal(value: Numeric) -> Decimal:
    """Coerce ``value`` to a finite Decimal.

    Raises:
        ValueError: if the value is a bool, not numeric, NaN or infinite.
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a numeric amount: {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise ValueError(f"Not a numeric amount: {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"Amount must be finite: {value!r}")
    return result


def safe_ratio(numerator: Decimal, denominator: Decimal) -> Decimal:
    """``numerator / denominator``, or 0 when the denominator is 0."""
    if denominator == ZERO:
        return ZERO
    return numerator / denominator


def safe_percentage(part: Decimal, whole: Decimal) -> Decimal:
    """``part / whole * 100``, or 0 when ``whole`` is 0."""
    return safe_ratio(part, whole) * HUNDRED


def percent_of(base: Decimal, percentage: Decimal) -> Decimal:
    """``percentage`` percent of ``base``."""
    return base * percentage / HUNDRED


def sum_decimals(values: Iterable[Decimal]) -> Decimal:
    """Sum with a Decimal start value (``sum()`` of nothing is ``0``)."""
    return sum(values, ZERO)


def within_tolerance(a: Decimal, b: Decimal, tolerance: Decimal) -> bool:
    """True when ``|a - b| <= tolerance``."""
    return abs(a - b) <= tolerance


def quantize_money(amount: Decimal, decimal_places: int = 2) -> Decimal:
    """Round half-up to ``decimal_places`` (display and storage only)."""
    return amount.quantize(Decimal(10) ** -decimal_places, rounding=ROUND_HALF_UP)


def format_money(
    amount: Decimal,
    symbol: str = "R$",
    decimal_places: int = 2,
) -> str:
    """Render ``amount`` as ``"R$ 1,234.56"``."""
    rounded = quantize_money(amount, decimal_places)
    return f"{symbol} {rounded:,.{decimal_places}f}"


def format_percentage(value: Decimal, decimal_places: int = 2) -> str:
    """Render ``value`` as ``"8.33%"``."""
    return f"{quantize_money(value, decimal_places):.{decimal_places}f}%"
