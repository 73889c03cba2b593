"""
Projection engine - compound growth of a balance over whole years.
"""

import math
from datetime import date
from decimal import Decimal
from typing import Optional, Union

Number = Union[Decimal, float, int]


def project_future_value(
    current_balance: Optional[Number],
    rate: float,
    years: int
) -> float:
    """
    Project the future value of a balance at a constant annual rate.

    Formula: FV = PV * (1 + rate) ^ years

    Args:
        current_balance: Starting value (None is treated as no balance)
        rate: Annual growth rate; negative rates model a decline
        years: Whole years to compound

    Returns:
        Projected value as float; inf when compounding overflows

    Raises:
        ValueError: If balance or years is negative, or rate is not finite
    """
    if current_balance is None:
        return 0.0

    if years < 0:
        raise ValueError(f"years must be non-negative, got {years}")

    balance = float(current_balance)
    if balance < 0:
        raise ValueError(f"current_balance must be non-negative, got {current_balance}")

    if not math.isfinite(rate):
        raise ValueError(f"rate must be finite, got {rate}")

    try:
        growth = (1 + rate) ** years
    except OverflowError:
        # Saturate like IEEE pow instead of raising
        growth = math.inf if (1 + rate) > 0 or years % 2 == 0 else -math.inf

    if balance == 0:
        return 0.0
    return balance * growth


def age_on(birth_date: date, as_of: date) -> int:
    """Whole years of age reached by `as_of`."""
    age = as_of.year - birth_date.year
    if (as_of.month, as_of.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age
