"""
yfinance adapter - fetch daily bars from Yahoo Finance.
Network IO allowed here, but minimal business logic.
"""

import logging
import os
from datetime import date, timedelta
from typing import Dict, Any, List

import pandas as pd
import yfinance as yf
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

PRICE_FIELDS = ['Open', 'High', 'Low', 'Close', 'Adj Close', 'Volume']


class YFinanceError(Exception):
    """Raised when yfinance operations fail."""
    pass


def fetch_prices_window(ticker: str, start: date, end: date) -> List[Dict[str, Any]]:
    """
    Fetch daily price data for a ticker within a date window.
    Returns raw data in provider format - no normalization.

    Args:
        ticker: Stock ticker symbol (e.g., 'AAPL')
        start: Start date (inclusive)
        end: End date (inclusive)

    Returns:
        List of raw price dictionaries in yfinance format

    Raises:
        YFinanceError: If fetch fails or validation fails
    """
    _validate_date_range(start, end)
    _validate_ticker(ticker)

    # yfinance uses exclusive end dates, so add 1 day
    yf_end = end + timedelta(days=1)

    logger.info("Fetching %s prices from %s to %s", ticker, start, end)

    try:
        # auto_adjust=False keeps the 'Adj Close' column
        data = yf.download(
            ticker,
            start=start.isoformat(),
            end=yf_end.isoformat(),
            progress=False,
            auto_adjust=False
        )
    except Exception as e:
        raise YFinanceError(f"Failed to fetch prices for {ticker}: {e}") from e

    if data is None or data.empty:
        logger.warning("No price data returned for %s", ticker)
        return []

    # Flatten multi-level columns (yfinance keys them by field and ticker)
    if isinstance(data.columns, pd.MultiIndex):
        data.columns = data.columns.get_level_values(0)

    rows = []
    for date_idx, row in data.iterrows():
        row_dict = {'Date': date_idx.strftime('%Y-%m-%d')}

        for field in PRICE_FIELDS:
            if field in data.columns and pd.notna(row[field]):
                row_dict[field] = float(row[field]) if field != 'Volume' else int(row[field])

        rows.append(row_dict)

    return rows


def _validate_date_range(start: date, end: date) -> None:
    """
    Validate date range parameters.

    Raises:
        YFinanceError: If validation fails
    """
    if start > end:
        raise YFinanceError(f"start date ({start}) must be <= end date ({end})")

    today = date.today()
    if start > today or end > today:
        raise YFinanceError("Future dates not allowed for historical data")

    max_days = int(os.getenv('YFINANCE_MAX_RANGE_DAYS', str(365 * 3)))
    if (end - start).days > max_days:
        raise YFinanceError(f"Date range too long (max {max_days} days)")


def _validate_ticker(ticker: str) -> None:
    """
    Basic ticker validation.

    Raises:
        YFinanceError: If ticker is invalid
    """
    if not ticker or not isinstance(ticker, str):
        raise YFinanceError("Ticker must be non-empty string")

    if len(ticker) > 10:
        raise YFinanceError("Ticker too long (max 10 characters)")

    allowed_chars = set('ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789.-')
    if not set(ticker.upper()).issubset(allowed_chars):
        raise YFinanceError(f"Ticker contains invalid characters: {ticker}")
