"""
Decimal Arithmetic Module

Fixed-scale Decimal helpers for loan calculations. Every rounding step is
half-up at an explicit scale so results reproduce exactly across runs.
NEVER uses float for monetary values.
"""

from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP, InvalidOperation, localcontext
from typing import Optional, Union
import re

CURRENCY_SCALE = 2

# Working digits for truncated division; grown per call when the quotient is large
_DIVISION_GUARD_DIGITS = 28

Number = Union[Decimal, int, float, str]


def to_decimal(value: Optional[Number]) -> Optional[Decimal]:
    """
    Convert a value to Decimal without going through binary floating point

    Args:
        value: Decimal, int, float, numeric string or None

    Returns:
        Decimal value, or None when value is None

    Raises:
        ValueError: If value cannot be converted
    """
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Cannot convert boolean {value!r} to Decimal")
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Cannot convert {value!r} to Decimal")


def quantize(value: Decimal, scale: int) -> Decimal:
    """Round value half-up to a fixed number of fractional digits"""
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + scale + 2)
        return value.quantize(Decimal(1).scaleb(-scale), rounding=ROUND_HALF_UP)


def to_cents(value: Decimal) -> Decimal:
    """Round value half-up to currency precision"""
    return quantize(value, CURRENCY_SCALE)


def multiply(*factors: Decimal) -> Decimal:
    """
    Exact product of Decimal factors

    The context precision is raised to the total digit count of the factors
    so that no intermediate product is rounded.
    """
    digits = sum(len(factor.as_tuple().digits) for factor in factors)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, digits)
        result = Decimal(1)
        for factor in factors:
            result = result * factor
    return result


def subtract(minuend: Decimal, subtrahend: Decimal) -> Decimal:
    """Exact difference of two Decimals"""
    with localcontext() as ctx:
        ctx.prec = max(
            ctx.prec,
            len(minuend.as_tuple().digits) + len(subtrahend.as_tuple().digits)
            + abs(minuend.adjusted() - subtrahend.adjusted()) + 1
        )
        return minuend - subtrahend


def divide(dividend: Decimal, divisor: Decimal, scale: int) -> Decimal:
    """
    Divide and round half-up to a fixed number of fractional digits

    The quotient is first truncated at a working precision well beyond the
    target scale, then rounded half-up. Truncation never moves a value across
    a rounding boundary, so the result equals the exact quotient rounded
    half-up.

    Args:
        dividend: Value to divide
        divisor: Non-zero divisor
        scale: Number of fractional digits in the result

    Returns:
        Quotient rounded half-up to scale
    """
    dividend = to_decimal(dividend)
    divisor = to_decimal(divisor)
    with localcontext() as ctx:
        ctx.rounding = ROUND_DOWN
        magnitude = dividend.adjusted() - divisor.adjusted() + 1
        ctx.prec = max(_DIVISION_GUARD_DIGITS, magnitude + scale + _DIVISION_GUARD_DIGITS)
        quotient = dividend / divisor
    return quantize(quotient, scale)


def power(base: Decimal, exponent: int, precision: int) -> Decimal:
    """
    Raise base to a non-negative integer power

    Args:
        base: Decimal base
        exponent: Integer exponent
        precision: Significant digits kept in the result (rounded half-up)

    Returns:
        base ** exponent rounded to precision significant digits
    """
    with localcontext() as ctx:
        ctx.prec = precision
        ctx.rounding = ROUND_HALF_UP
        return base ** exponent


def format_amount(value: Decimal) -> str:
    """Format a monetary Decimal as a plain two-decimal string"""
    return f"{to_cents(value):.{CURRENCY_SCALE}f}"


def decimal_from_string(value: str) -> Decimal:
    """
    Safely convert string to Decimal, handling common formats

    Args:
        value: String representation of number

    Returns:
        Decimal value

    Raises:
        ValueError: If string cannot be converted to valid Decimal
    """
    if not value or not isinstance(value, str):
        raise ValueError("Value must be a non-empty string")

    # Remove currency symbols and whitespace
    clean_value = re.sub(r'[^\d.,\-+]', '', value.strip())

    if ',' in clean_value and '.' in clean_value:
        # Both comma and dot - comma is the thousands separator
        clean_value = clean_value.replace(',', '')
    elif ',' in clean_value and clean_value.count(',') == 1:
        integer_part, fraction_part = clean_value.split(',')
        if len(fraction_part) <= 2:
            clean_value = f"{integer_part}.{fraction_part}"
        else:
            clean_value = integer_part + fraction_part
    elif ',' in clean_value:
        clean_value = clean_value.replace(',', '')

    try:
        return Decimal(clean_value)
    except InvalidOperation:
        raise ValueError(f"Cannot convert '{value}' to Decimal")
