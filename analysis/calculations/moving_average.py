"""
Simple moving average utilities.
Pure functions using exact decimal arithmetic on adjusted closes.
"""

from decimal import Decimal, MAX_PREC, ROUND_HALF_UP, localcontext
from typing import Dict, Optional, Sequence

from analysis.models import PricePoint

# Significant digits kept on every average
SMA_PRECISION = 4

SMA_PERIODS = (20, 50, 200)


class MovingAverageError(Exception):
    """Raised when moving average calculation fails."""
    pass


def simple_moving_average(
    history: Sequence[PricePoint],
    period: int
) -> Optional[Decimal]:
    """
    Calculate the simple moving average of the most recent prices.

    Formula: SMA = sum(adj_close[-period:]) / period

    Rounded to 4 significant digits, half-up. The decimal context is
    local to this call, so concurrent callers never share rounding state.

    Args:
        history: Price points in chronological order
        period: Number of most recent points to average

    Returns:
        Average as Decimal, or None if fewer than `period` points exist

    Raises:
        MovingAverageError: If period is not positive
    """
    if period <= 0:
        raise MovingAverageError(f"Period must be positive, got {period}")

    if len(history) < period:
        return None

    window = history[-period:]

    # Sum exactly, round only on the final division
    with localcontext() as ctx:
        ctx.prec = MAX_PREC
        total = sum((p.adj_close for p in window), Decimal(0))

    with localcontext() as ctx:
        ctx.prec = SMA_PRECISION
        ctx.rounding = ROUND_HALF_UP
        return total / Decimal(period)


def calculate_moving_averages(
    history: Sequence[PricePoint],
    periods: Sequence[int] = SMA_PERIODS
) -> Dict[int, Optional[Decimal]]:
    """
    Calculate SMAs for several periods at once.

    Returns:
        Dictionary mapping period to average (None if insufficient data)
    """
    return {period: simple_moving_average(history, period) for period in periods}
