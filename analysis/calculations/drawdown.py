"""
Drawdown calculation utilities.
Pure functions for maximum peak-to-trough decline.
"""

import numpy as np
from typing import Sequence

from analysis.calculations.returns import TRADING_DAYS_PER_YEAR


def max_drawdown(
    prices: Sequence[float],
    lookback: int = TRADING_DAYS_PER_YEAR
) -> float:
    """
    Calculate the largest decline from a running peak.

    Only the trailing `lookback` prices are considered (the whole series if
    shorter). Drawdown at each point is (peak - price) / peak.

    Args:
        prices: Prices in chronological order
        lookback: Number of most recent prices to examine

    Returns:
        Max drawdown as a positive decimal in [0, 1] (0.25 = 25% decline)
    """
    if len(prices) == 0 or lookback <= 0:
        return 0.0

    window = np.asarray(prices[-lookback:], dtype=np.float64)

    # Track running maximum (peak)
    running_max = np.maximum.accumulate(window)

    # A zero peak has nothing to fall from
    drawdowns = np.zeros_like(window)
    np.divide(running_max - window, running_max, out=drawdowns, where=running_max > 0)

    return float(drawdowns.max())
