"""
Money helpers.

All amounts are Decimal in major units (dollars) inside the service and are
rounded half-up to cents, which is what customers expect on a receipt.
The payment provider works in integer minor units (cents).
"""

from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # str() avoids binary float artefacts (0.1 -> 0.1000000000000000055...)
        return Decimal(str(value))
    return Decimal(value)


def quantize_money(value) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_minor_units(amount) -> int:
    """
    Major units to cents for the payment provider.

    Example:
        >>> to_minor_units(Decimal("216.00"))
        21600
    """
    return int((to_decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

