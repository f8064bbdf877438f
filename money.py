from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

from config import Config

EPSILON = Config.CURRENCY_UNIT
ZERO = Decimal('0')


def to_decimal(value) -> Decimal:
    """
    Convert value to an exact, unrounded Decimal.
    Floats go through str() so binary artefacts never reach the ledger.
    """
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, bool):
        raise TypeError("Boolean is not a number")
    elif isinstance(value, (int, float, str)):
        amount = Decimal(str(value).strip())
    else:
        raise TypeError(f"Unsupported number type: {type(value).__name__}")

    if not amount.is_finite():
        raise ValueError(f"Number must be finite, got {value!r}")
    return amount


def parse_decimal(value) -> Optional[Decimal]:
    """Like to_decimal, but returns None for anything that is not a number"""
    try:
        return to_decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        return None


def to_money(value, rounding=ROUND_HALF_UP) -> Decimal:
    """Convert value to a Decimal quantized to the currency unit"""
    return to_decimal(value).quantize(EPSILON, rounding=rounding)


def parse_money(value) -> Optional[Decimal]:
    """Like to_money, but returns None for anything that is not a number"""
    try:
        return to_money(value)
    except (InvalidOperation, TypeError, ValueError):
        return None


def is_dust(amount: Decimal) -> bool:
    """True when amount is smaller than one currency unit"""
    return abs(amount) < EPSILON


def money_str(amount: Decimal) -> str:
    return str(to_money(amount))
