"""Exact base-10 arithmetic for every value that takes part in a ranking comparison."""

from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_EVEN, Context, Decimal, InvalidOperation

from standings.errors import ShapeError

# 50 significant digits keeps averages of small integer totals far away from
# any rounding that could flip an ordering.
DECIMAL_CONTEXT = Context(prec=50, rounding=ROUND_HALF_EVEN)

ZERO = Decimal(0)
SURVIVAL_EPSILON = Decimal("1e-9")

DecimalLike = Decimal | int | float | str


def to_decimal(value: DecimalLike) -> Decimal:
    """Convert a parser value into an exact, finite Decimal.

    Floats go through their shortest ``repr`` so ``0.1`` becomes
    ``Decimal("0.1")`` rather than its binary expansion.
    """
    if isinstance(value, bool) or value is None:
        raise ShapeError(f"Expected a numeric value, got {value!r}")

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(repr(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation as exc:
            raise ShapeError(f"Not a decimal number: {value!r}") from exc
    else:
        raise ShapeError(f"Expected a numeric value, got {type(value).__name__}")

    if not result.is_finite():
        raise ShapeError(f"Decimal value must be finite, got {value!r}")
    return result


def add(left: Decimal, right: Decimal) -> Decimal:
    return DECIMAL_CONTEXT.add(left, right)


def multiply(left: DecimalLike, right: DecimalLike) -> Decimal:
    return DECIMAL_CONTEXT.multiply(to_decimal(left), to_decimal(right))


def divide(value: DecimalLike, count: int) -> Decimal:
    """Divide by a positive integer count (used for per-match averages)."""
    if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
        raise ValueError(f"count must be a positive integer, got {count!r}")
    return DECIMAL_CONTEXT.divide(to_decimal(value), Decimal(count))


def compare(left: Decimal, right: Decimal) -> int:
    """Return -1, 0 or 1 like a classic three-way comparator."""
    return int(left.compare(right))


def decimal_max(values: Iterable[Decimal], default: Decimal = ZERO) -> Decimal:
    result: Decimal | None = None
    for value in values:
        if result is None or value > result:
            result = value
    return default if result is None else result


def decimal_sum(values: Iterable[Decimal]) -> Decimal:
    total = ZERO
    for value in values:
        total = add(total, value)
    return total


def format_decimal(value: Decimal) -> str:
    """Plain positional text (never exponent notation), e.g. ``0.000000001``."""
    text = format(value, "f")
    if text.startswith("-") and value.is_zero():
        return text[1:]
    return text


def parse_decimal(text: DecimalLike) -> Decimal:
    return to_decimal(text)


__all__ = [
    "DECIMAL_CONTEXT",
    "SURVIVAL_EPSILON",
    "ZERO",
    "add",
    "compare",
    "decimal_max",
    "decimal_sum",
    "divide",
    "format_decimal",
    "multiply",
    "parse_decimal",
    "to_decimal",
]
