"""
Volatility calculation utilities.
Pure functions for realized volatility of simple daily returns.
"""

import math
import numpy as np
from typing import Sequence

from analysis.calculations.returns import TRADING_DAYS_PER_YEAR, daily_returns


def realized_vol(
    returns: np.ndarray,
    annualize: int = TRADING_DAYS_PER_YEAR
) -> float:
    """
    Calculate annualized volatility from a series of returns.

    Formula: σ = std(returns, ddof=1) × √annualize

    Args:
        returns: Array of periodic returns
        annualize: Annualization factor (252 for daily to annual)

    Returns:
        Annualized volatility as decimal (0.25 = 25%), 0.0 when fewer than
        two returns are available (sample std is undefined)
    """
    if len(returns) < 2:
        return 0.0

    # Sample standard deviation (ddof=1)
    std_dev = np.std(returns, ddof=1)

    return float(std_dev * math.sqrt(annualize))


def annualized_volatility(
    prices: Sequence[float],
    annualize: int = TRADING_DAYS_PER_YEAR
) -> float:
    """
    Annualized volatility of a price series.

    Args:
        prices: Prices in chronological order

    Returns:
        Annualized volatility, 0.0 for fewer than two returns
    """
    if len(prices) < 2:
        return 0.0

    return realized_vol(daily_returns(prices), annualize=annualize)
