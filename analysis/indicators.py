"""
Indicator engine - composes all price calculations into an IndicatorBundle.
Pure function of one price history: no IO, no state, no caching.
"""

from typing import Optional, Sequence

from analysis.calculations.drawdown import max_drawdown
from analysis.calculations.moving_average import simple_moving_average
from analysis.calculations.returns import cagr, risk_adjusted_return, to_float_prices
from analysis.calculations.volatility import annualized_volatility
from analysis.guardrails import validate_price_history
from analysis.models import IndicatorBundle, PricePoint


def analyze(history: Optional[Sequence[PricePoint]]) -> IndicatorBundle:
    """
    Analyze a price history and produce every technical indicator.

    Calculates SMA20/50/200, annualized volatility, trailing one-year max
    drawdown, CAGR and the volatility-adjusted return.

    Args:
        history: Price points sorted oldest first

    Returns:
        IndicatorBundle; an empty bundle when history is None or empty

    Raises:
        DataQualityError: If the history is unsorted, has duplicate dates or
            contains negative / non-finite prices
    """
    if not history:
        return IndicatorBundle()

    validate_price_history(history)

    prices = to_float_prices([p.adj_close for p in history])

    volatility = annualized_volatility(prices)
    growth = cagr(prices)

    return IndicatorBundle(
        sma20=simple_moving_average(history, 20),
        sma50=simple_moving_average(history, 50),
        sma200=simple_moving_average(history, 200),
        max_drawdown=max_drawdown(prices),
        volatility=volatility,
        cagr=growth,
        risk_adjusted_return=risk_adjusted_return(growth, volatility),
        last_price=history[-1].adj_close,
        trading_days=len(history),
    )
