"""
Daily prices DAG - refreshes the stored price history for one ticker.
Composes: Provider → Transform → Validate → Store.
"""

import logging
import os
import sqlite3
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Dict, Any, Optional

from dotenv import load_dotenv

from ingestion.providers.yfinance_adapter import fetch_prices_window
from ingestion.transforms.normalizers import normalize_prices
from ingestion.transforms.validators import validate_prices_row, ValidationError
from storage.loaders import upsert_prices

load_dotenv()

logger = logging.getLogger(__name__)

SOURCE = 'yfinance'


class PipelineError(Exception):
    """Raised when pipeline execution fails."""
    pass


def default_lookback_days() -> int:
    """Calendar days fetched when no start date is given."""
    return int(os.getenv('PRICE_LOOKBACK_DAYS', '730'))


@dataclass
class DailyPricesConfig:
    """Configuration for daily prices pipeline."""
    ticker: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    def __post_init__(self):
        """Validate and set defaults."""
        if not self.ticker or not isinstance(self.ticker, str):
            raise PipelineError("ticker must be non-empty string")

        self.ticker = self.ticker.upper()

        if self.end_date is None:
            self.end_date = date.today()

        # Enough calendar days to cover a 200-day moving average
        if self.start_date is None:
            self.start_date = self.end_date - timedelta(days=default_lookback_days())

        if self.start_date > self.end_date:
            raise PipelineError("start_date must be <= end_date")

    @property
    def days_range(self) -> int:
        """Calculate number of days in range."""
        return (self.end_date - self.start_date).days


def run_daily_prices(config: DailyPricesConfig, conn: sqlite3.Connection) -> Dict[str, Any]:
    """
    Run the complete daily prices pipeline.

    Pipeline stages:
    1. Fetch raw data from provider
    2. Normalize to canonical format
    3. Validate each row
    4. Store valid rows

    Args:
        config: Pipeline configuration
        conn: SQLite database connection

    Returns:
        Dictionary with run results and metrics
    """
    start_time = datetime.now()

    result = {
        'ticker': config.ticker,
        'start_date': config.start_date,
        'end_date': config.end_date,
        'status': 'running',
        'rows_fetched': 0,
        'rows_stored': 0,
        'rows_inserted': 0,
        'rows_updated': 0,
        'first_date': None,
        'last_date': None,
        'validation_warnings': 0,
        'error_message': None
    }

    try:
        raw_data = fetch_prices_window(
            ticker=config.ticker,
            start=config.start_date,
            end=config.end_date
        )

        result['rows_fetched'] = len(raw_data)

        if not raw_data:
            # Empty data is not an error
            return _finish(result, 'completed', start_time)

        normalized_data = normalize_prices(
            raw_rows=raw_data,
            ticker=config.ticker,
            source=SOURCE,
            as_of=config.end_date,
            ingested_at=datetime.now()
        )

        valid_rows = []
        for row in normalized_data:
            try:
                validate_prices_row(row)
                valid_rows.append(row)
            except ValidationError as e:
                result['validation_warnings'] += 1
                logger.warning(
                    "Validation warning for %s %s: %s",
                    config.ticker, row.get('date', 'unknown'), e
                )

        if not valid_rows:
            result['error_message'] = f"All {len(normalized_data)} rows failed validation"
            return _finish(result, 'failed', start_time)

        inserted, updated = upsert_prices(conn, valid_rows)
        result['rows_stored'] = len(valid_rows)
        result['rows_inserted'] = inserted
        result['rows_updated'] = updated
        result['first_date'] = valid_rows[0]['date']
        result['last_date'] = valid_rows[-1]['date']

        return _finish(result, 'completed', start_time)

    except Exception as e:
        logger.exception("daily_prices failed for %s", config.ticker)
        result['error_message'] = str(e)
        return _finish(result, 'failed', start_time)


def _finish(result: Dict[str, Any], status: str, start_time: datetime) -> Dict[str, Any]:
    result['status'] = status
    result['duration_seconds'] = (datetime.now() - start_time).total_seconds()
    logger.info(
        "daily_prices %s for %s: %d fetched, %d stored",
        status, result['ticker'], result['rows_fetched'], result['rows_stored']
    )
    return result
