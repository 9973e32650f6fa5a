"""
Utilities Module

This module provides the numeric helpers shared by the bill splitter
modules.

Features:
    - Lenient parsing of user-entered numbers into Decimal
    - Half-up rounding to 2 decimal places
    - Money formatting for API payloads and messages

Leniency:
    Values typed into a half-filled form are often empty strings, None or
    garbage. Every parser here degrades such input to zero instead of
    raising, so a partially entered bill still produces a result.

Functions:
    to_decimal: Parse any user value into a finite Decimal (0 on failure).
    round2: Round a Decimal to 2 places using ROUND_HALF_UP.
    format_amount: Format an amount as a plain "1234.56" string.
    format_currency: Format an amount with a currency symbol.
    validate_amount: Check if a value is a valid non-negative amount.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext

CENT = Decimal("0.01")
ZERO = Decimal("0")
ONE_HUNDRED = Decimal("100")

# Larger magnitudes are treated as malformed input
MAX_AMOUNT = Decimal("1e15")


def to_decimal(value, default: Decimal = ZERO) -> Decimal:
    """
    Convert a user-entered value to a Decimal.

    Accepts ints, floats, Decimals and numeric strings (surrounding
    whitespace is ignored). Floats go through str() so that 0.1 becomes
    Decimal("0.1") rather than its binary expansion.

    Args:
        value: Value to convert.
        default: Returned for None, empty, non-numeric, non-finite or
            out-of-range (beyond MAX_AMOUNT) input.

    Returns:
        Decimal: Parsed value or the default.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        return value if value.is_finite() else default
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return default
    try:
        parsed = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return default
    if not parsed.is_finite() or abs(parsed) > MAX_AMOUNT:
        return default
    return parsed


def to_non_negative_decimal(value) -> Decimal:
    """Parse like to_decimal but clamp negative results to zero."""
    parsed = to_decimal(value)
    return parsed if parsed > 0 else ZERO


def round2(value) -> Decimal:
    """
    Round a value to 2 decimal places.

    Uses ROUND_HALF_UP (2.675 -> 2.68), applied at every stage of a
    calculation rather than only at the end. Products of large inputs
    (price x quantity x tax) can exceed the default 28-digit context, so
    precision is widened to fit the result.

    Args:
        value: Decimal or anything to_decimal accepts.

    Returns:
        Decimal: Value quantized to cents (0 for non-finite Decimals).
    """
    if not isinstance(value, Decimal):
        value = to_decimal(value)
    if not value.is_finite():
        value = ZERO
    with localcontext() as ctx:
        # every integer digit plus the two cents digits
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_amount(value) -> str:
    """Format an amount as a 2-place string without grouping, e.g. "50.00"."""
    rounded = round2(value)
    if rounded == 0:
        rounded = abs(rounded)  # no "-0.00"
    return f"{rounded:.2f}"


def format_currency(amount, symbol: str = "$") -> str:
    """
    Format a monetary amount with the appropriate currency symbol.

    Args:
        amount: The amount to format.
        symbol: Currency symbol (default: $).

    Returns:
        str: Formatted string like "$1,234.56" or "-$5.00".
    """
    rounded = round2(amount)
    sign = "-" if rounded < 0 else ""
    return f"{sign}{symbol}{abs(rounded):,.2f}"


def validate_amount(value) -> bool:
    """
    Validate if the input is a valid monetary amount.

    Args:
        value: Value to validate.

    Returns:
        bool: True if value parses to a finite number >= 0.
    """
    sentinel = Decimal("-1")
    return to_decimal(value, default=sentinel) >= 0


def pick(data: dict, *keys, default=None):
    """
    Return the value of the first key present in data.

    Lets model constructors accept both snake_case keys and the camelCase
    keys used by browser bill-state payloads (e.g. "tax_rate"/"taxRate").
    """
    for key in keys:
        if key in data:
            return data[key]
    return default
