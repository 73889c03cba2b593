"""
Returns calculation utilities.
Pure functions for daily simple returns and compound annual growth.
"""

import math

import numpy as np
from typing import List, Sequence

# Trading-day year used for every annualization
TRADING_DAYS_PER_YEAR = 252


def daily_returns(prices: Sequence[float]) -> np.ndarray:
    """
    Calculate simple day-over-day returns.

    Formula: r_i = (P_i - P_{i-1}) / P_{i-1}

    A zero previous price yields a zero return rather than a division error.

    Args:
        prices: Prices in chronological order

    Returns:
        Numpy array of returns (length = len(prices) - 1, empty if < 2 prices)
    """
    if len(prices) < 2:
        return np.array([], dtype=np.float64)

    price_array = np.asarray(prices, dtype=np.float64)
    previous = price_array[:-1]
    change = np.diff(price_array)

    returns = np.zeros_like(change)
    np.divide(change, previous, out=returns, where=previous != 0)

    return returns


def cagr(
    prices: Sequence[float],
    trading_days_per_year: int = TRADING_DAYS_PER_YEAR
) -> float:
    """
    Calculate compound annual growth rate over the whole series.

    Formula: CAGR = (P_end / P_start) ^ (1 / years) - 1
    where years = len(prices) / trading_days_per_year

    Uses the trading-day count, not calendar time, so five daily points
    span 5/252 of a year.

    Args:
        prices: Prices in chronological order
        trading_days_per_year: Annualization basis

    Returns:
        CAGR as decimal (0.07 = 7%), 0.0 when start price is not positive,
        inf when the annualized growth overflows
    """
    if len(prices) == 0:
        return 0.0

    start_price = float(prices[0])
    end_price = float(prices[-1])
    years = len(prices) / float(trading_days_per_year)

    if start_price <= 0 or years <= 0:
        return 0.0

    try:
        return (end_price / start_price) ** (1.0 / years) - 1.0
    except OverflowError:
        # Short explosive histories exceed float range
        return math.inf


def risk_adjusted_return(cagr_value: float, volatility: float) -> float:
    """
    Penalize growth by variance drag.

    Formula: CAGR - 0.5 * volatility^2

    This is not a Sharpe ratio; no risk-free rate is subtracted.
    """
    return cagr_value - 0.5 * volatility * volatility


def to_float_prices(values: List) -> List[float]:
    """Convert Decimal (or other numeric) prices to floats for ratio math."""
    return [float(v) for v in values]
