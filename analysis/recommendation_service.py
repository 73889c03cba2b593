"""
Recommendation service - stored price history to Buy / Sell / Hold.
Queries the database, calls the pure engines, returns value objects.
"""

import logging
import sqlite3
from datetime import date
from typing import Optional

from analysis.guardrails import DataQualityError, price_history_warnings
from analysis.indicators import analyze
from analysis.models import IndicatorBundle, RecommendationResult
from analysis.scoring import score
from storage.loaders import load_price_history

logger = logging.getLogger(__name__)


class RecommendationError(Exception):
    """Raised when a recommendation cannot be produced."""
    pass


def analyze_symbol(
    conn: sqlite3.Connection,
    symbol: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> IndicatorBundle:
    """
    Compute indicators for a symbol from its stored price history.

    Args:
        conn: SQLite connection
        symbol: Stock ticker
        start_date: Optional start of price window
        end_date: Optional end of price window

    Returns:
        IndicatorBundle for the symbol

    Raises:
        RecommendationError: If no price data is stored or it is malformed
    """
    symbol = symbol.upper()
    history = load_price_history(conn, symbol, start_date, end_date)

    if not history:
        raise RecommendationError(f"No price data found for ticker {symbol}")

    for warning in price_history_warnings(history, as_of_date=end_date):
        logger.warning("%s: %s", symbol, warning)

    try:
        bundle = analyze(history)
    except DataQualityError as e:
        raise RecommendationError(f"Invalid price history for {symbol}: {e}") from e

    logger.debug("Analyzed %s over %d trading days", symbol, bundle.trading_days)
    return bundle


def get_recommendation(
    conn: sqlite3.Connection,
    symbol: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> RecommendationResult:
    """
    Recommend BUY, SELL or HOLD for a symbol.

    Raises:
        RecommendationError: If no price data is stored or it is malformed
    """
    symbol = symbol.upper()
    bundle = analyze_symbol(conn, symbol, start_date, end_date)
    result = score(bundle, ticker=symbol)

    logger.info(
        "%s recommendation: %s (confidence %d)", symbol, result.action.value, result.confidence
    )
    return result
