"""
Currency rounding — the one rounding policy every quote total goes through.

Money is carried as Decimal and rounded to the cent, half away from zero.
Floats are read through repr() so 25.505 is seen as 25.505 and not as
25.50499999999999900524... (which is what float math would round).

Inputs are loosely typed on purpose: ORM floats, request floats, Decimal,
numeric strings. Anything missing or non-finite counts as zero. Nothing here
raises.
"""

import functools
import math
from decimal import (
    Context,
    Decimal,
    DivisionByZero,
    InvalidOperation,
    ROUND_HALF_UP,
    localcontext,
)
from typing import NewType

Money = NewType("Money", Decimal)
Percentage = NewType("Percentage", Decimal)

_TWO_PLACES = Decimal("0.01")
_ZERO = Decimal(0)

ZERO = Money(Decimal("0.00"))

# Fixed arithmetic context so results never depend on whatever decimal
# context the host process happens to have set. Overflow is not trapped: a
# result past the exponent range becomes Infinity, which counts as zero like
# any other non-finite input.
CURRENCY_CONTEXT = Context(
    prec=60,
    rounding=ROUND_HALF_UP,
    traps=[InvalidOperation, DivisionByZero],
)


def currency_context(func):
    """Run func under CURRENCY_CONTEXT."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        with localcontext(CURRENCY_CONTEXT):
            return func(*args, **kwargs)

    return wrapper


def to_decimal(value) -> Decimal:
    """Coerce a number-ish value to a finite Decimal. None, NaN, inf, junk -> 0."""
    if value is None or isinstance(value, bool):
        return _ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else _ZERO
    if isinstance(value, float):
        if not math.isfinite(value):
            return _ZERO
        return Decimal(repr(value))
    if isinstance(value, int):
        return Decimal(value)
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return _ZERO
    return result if result.is_finite() else _ZERO


def non_negative(value) -> Decimal:
    """to_decimal(), clamped at zero. Used for prices, quantities and percentages."""
    result = to_decimal(value)
    return result if result > 0 else _ZERO


def round_currency(value) -> Money:
    """
    Round to the nearest cent, half away from zero.

    Idempotent: round_currency(round_currency(x)) == round_currency(x).
    Large values keep every integer digit; precision grows to fit them.
    """
    value = to_decimal(value)
    context = CURRENCY_CONTEXT
    # Integer digits + 2 cents + 1 for a carry (999.995 -> 1000.00)
    digits = value.adjusted() + 4
    if digits > context.prec:
        context = context.copy()
        context.prec = digits
    try:
        result = value.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP, context=context)
    except InvalidOperation:
        # Past the context's exponent range
        return ZERO
    if result == 0:
        # -0.00 -> 0.00
        return ZERO
    return Money(result)
