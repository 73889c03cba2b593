"""
Normalizers for transforming provider data to canonical shape.
Pure functions - no IO, network, or side effects.
"""

import math
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, Any, List, Optional

from analysis.models import PricePoint


def normalize_prices(
    raw_rows: List[Dict[str, Any]],
    *,
    ticker: str,
    source: str,
    as_of: date,
    ingested_at: datetime
) -> List[Dict[str, Any]]:
    """
    Transform provider-native price rows to canonical shape.

    Minimal normalization:
    - Date strings to date objects (required for schema)
    - Field name mapping (provider uses different names)
    - Deduplication by date (keep last to handle corrections)
    - Chronological ordering

    Args:
        raw_rows: List of provider-specific price dictionaries
        ticker: Stock ticker symbol
        source: Data provider name
        as_of: Date when data was fetched
        ingested_at: Pipeline processing timestamp

    Returns:
        List of canonical price dictionaries, oldest first
    """
    if not raw_rows:
        return []

    seen_dates = {}

    for raw in raw_rows:
        # yfinance uses "Date" field
        date_str = raw.get('Date', '')
        if isinstance(date_str, str):
            row_date = date.fromisoformat(date_str)
        else:
            row_date = date_str

        canonical = {
            'ticker': ticker,
            'date': row_date,
            'open': float(raw.get('Open', 0)),
            'high': float(raw.get('High', 0)),
            'low': float(raw.get('Low', 0)),
            'close': float(raw.get('Close', 0)),
            'adj_close': float(raw['Adj Close']) if 'Adj Close' in raw else None,
            'volume': int(raw.get('Volume', 0)),
            'source': source,
            'as_of': as_of,
            'ingested_at': ingested_at,
        }

        # Later rows for the same date are corrections
        seen_dates[row_date] = canonical

    return [seen_dates[d] for d in sorted(seen_dates)]


def to_price_history(rows: List[Dict[str, Any]]) -> List[PricePoint]:
    """
    Convert canonical price rows to PricePoints.

    Uses adj_close when present, falling back to close.

    Args:
        rows: Canonical rows with 'date', 'close' and optional 'adj_close'

    Returns:
        List of PricePoint in the same order as rows
    """
    history = []
    for row in rows:
        row_date = row['date']
        if isinstance(row_date, str):
            row_date = date.fromisoformat(row_date)
        price = _pick_adjusted(row.get('adj_close'), row.get('close'))
        history.append(PricePoint(date=row_date, adj_close=price))
    return history


def _pick_adjusted(adj_close: Optional[float], close: Optional[float]) -> Decimal:
    for value in (adj_close, close):
        if value is None:
            continue
        if isinstance(value, float) and math.isnan(value):
            continue
        return Decimal(str(value))
    raise ValueError("Row has neither adj_close nor close")
