"""Fixed-point helpers for monetary amounts.

Amounts travel as decimal strings (``"0.50000000"``) and are summed as integer
minor units (satoshis for 8-decimal chains) so that long folds do not drift.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union

BTC_DECIMALS = 8


def to_minor_units(value: Union[str, int, Decimal, None], decimals: int = BTC_DECIMALS) -> Optional[int]:
    """
    Parse a decimal amount into integer minor units.

    Returns None for values that are not numbers (e.g. the "Error" and
    "Check Explorer" sentinels), so callers can decide how to degrade.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    scaled = (amount * (Decimal(10) ** decimals)).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return int(scaled)


def format_minor_units(units: int, decimals: int = BTC_DECIMALS) -> str:
    """Format integer minor units as a fixed-precision decimal string."""
    sign = "-" if units < 0 else ""
    whole, frac = divmod(abs(int(units)), 10 ** decimals)
    if decimals == 0:
        return f"{sign}{whole}"
    return f"{sign}{whole}.{frac:0{decimals}d}"


def format_decimal(value: Decimal, places: int) -> str:
    """Round a Decimal half-up to a fixed number of places."""
    quantum = Decimal(1).scaleb(-places)
    return str(value.quantize(quantum, rounding=ROUND_HALF_UP))


def is_numeric_amount(value: Optional[str]) -> bool:
    return to_minor_units(value) is not None
