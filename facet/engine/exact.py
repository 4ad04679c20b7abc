"""
Exact-probability arithmetic.

Probabilities are carried unnormalised as integers scaled by SCALE (=20) per
trial.  Python ints never wrap, so the 192-bit accumulator width is enforced
explicitly: any result above U192_MAX is an internal invariant violation and
raises OverflowError instead of silently growing.

Conversion to decimal happens only at the boundary and truncates:
    numerator * 10**precision // denominator
"""

from __future__ import annotations

from fractions import Fraction

U192_BITS: int = 192
U192_MAX: int = (1 << U192_BITS) - 1
"""Largest value the probability accumulator may hold."""


def check_u192(value: int) -> int:
    """Return *value* if it fits in an unsigned 192-bit integer.

    Raises:
        OverflowError: if *value* is negative or exceeds U192_MAX.
    """
    if value < 0 or value > U192_MAX:
        raise OverflowError(
            f"Exact-probability accumulator overflowed {U192_BITS} bits "
            f"(value has {value.bit_length()} bits)."
        )
    return value


def checked_mul(a: int, b: int) -> int:
    return check_u192(a * b)


def checked_add(a: int, b: int) -> int:
    return check_u192(a + b)


def checked_pow(base: int, exponent: int) -> int:
    """``base ** exponent`` with the 192-bit overflow check.

    Examples:
        >>> checked_pow(20, 2)
        400
    """
    if exponent < 0:
        raise ValueError(f"Exponent must be non-negative, got {exponent}.")
    return check_u192(base**exponent)


def to_fraction(numerator: int, denominator: int) -> Fraction:
    return Fraction(numerator, denominator)


def to_decimal(numerator: int, denominator: int, precision: int = 6) -> str:
    """Render ``numerator / denominator`` as a decimal string, truncated.

    Args:
        numerator:   Non-negative unnormalised value.
        denominator: Positive normalisation shared by the numerators.
        precision:   Digits after the decimal point.

    Returns:
        Decimal string with exactly *precision* fractional digits.

    Examples:
        >>> to_decimal(2, 3, 4)
        '0.6666'
        >>> to_decimal(1, 1, 2)
        '1.00'
        >>> to_decimal(1, 8, 0)
        '0'
    """
    if denominator <= 0:
        raise ValueError(f"Denominator must be positive, got {denominator}.")
    if precision < 0:
        raise ValueError(f"Precision must be non-negative, got {precision}.")
    scaled = numerator * 10**precision // denominator
    whole, frac = divmod(scaled, 10**precision)
    if precision == 0:
        return str(whole)
    return f"{whole}.{frac:0{precision}d}"


def to_float(numerator: int, denominator: int, precision: int = 15) -> float:
    """Truncated fixed-point value as a float (host-facing convenience)."""
    return float(to_decimal(numerator, denominator, precision))
