"""
Core validators for canonical data rows.
Pure functions - no IO, network, or side effects.
"""

import math
from datetime import date, datetime
from typing import Dict, Any


class ValidationError(ValueError):
    """Raised when data validation fails."""
    pass


def validate_prices_row(row: Dict[str, Any]) -> None:
    """
    Validate a canonical prices row.

    Args:
        row: Dictionary containing price data

    Raises:
        ValidationError: If validation fails
    """
    required_keys = {
        'ticker', 'date', 'open', 'high', 'low', 'close',
        'volume', 'source', 'as_of', 'ingested_at'
    }

    missing = required_keys - set(row.keys())
    if missing:
        raise ValidationError(f"Missing required keys: {missing}")

    if not isinstance(row['ticker'], str):
        raise ValidationError(f"ticker must be string, got {type(row['ticker'])}")

    if not isinstance(row['date'], date):
        raise ValidationError(f"date must be date, got {type(row['date'])}")

    if not isinstance(row['as_of'], date):
        raise ValidationError(f"as_of must be date, got {type(row['as_of'])}")

    if not isinstance(row['ingested_at'], datetime):
        raise ValidationError(f"ingested_at must be datetime, got {type(row['ingested_at'])}")

    for field in ['open', 'high', 'low', 'close']:
        _check_price(field, row[field])

    # Adjusted close drives every indicator, so it gets the same checks
    if row.get('adj_close') is not None:
        _check_price('adj_close', row['adj_close'])

    volume = row['volume']
    if not isinstance(volume, int):
        raise ValidationError(f"volume must be integer, got {type(volume)}")

    if volume < 0:
        raise ValidationError(f"volume must be non-negative, got {volume}")

    high = row['high']
    low = row['low']

    if high < low:
        raise ValidationError(f"high ({high}) must be >= low ({low})")

    if not low <= row['open'] <= high:
        raise ValidationError(f"open ({row['open']}) must be within [{low}, {high}]")

    if not low <= row['close'] <= high:
        raise ValidationError(f"close ({row['close']}) must be within [{low}, {high}]")


def validate_account_row(row: Dict[str, Any]) -> None:
    """
    Validate an account row before storage.

    Args:
        row: Dictionary with user_id, name, birth_date

    Raises:
        ValidationError: If validation fails
    """
    missing = {'user_id', 'name', 'birth_date'} - set(row.keys())
    if missing:
        raise ValidationError(f"Missing required keys: {missing}")

    if not isinstance(row['user_id'], int) or isinstance(row['user_id'], bool):
        raise ValidationError(f"user_id must be integer, got {type(row['user_id'])}")

    if row['user_id'] <= 0:
        raise ValidationError(f"user_id must be positive, got {row['user_id']}")

    if not isinstance(row['name'], str) or not row['name'].strip():
        raise ValidationError("name must be non-empty string")

    birth_date = row['birth_date']
    if not isinstance(birth_date, date) or isinstance(birth_date, datetime):
        raise ValidationError(f"birth_date must be date, got {type(birth_date)}")

    if birth_date > date.today():
        raise ValidationError(f"birth_date cannot be in the future: {birth_date}")


def validate_shares(shares: Any) -> None:
    """
    Validate a holding's share count.

    Raises:
        ValidationError: If shares is not a finite, non-negative number
    """
    if not isinstance(shares, (int, float)) or isinstance(shares, bool):
        raise ValidationError(f"shares must be numeric, got {type(shares)}")

    if not math.isfinite(shares):
        raise ValidationError(f"shares must be finite, got {shares}")

    if shares < 0:
        raise ValidationError(f"shares must be non-negative, got {shares}")


def _check_price(field: str, value: Any) -> None:
    if not isinstance(value, (int, float)):
        raise ValidationError(f"{field} must be numeric, got {type(value)}")

    if not math.isfinite(value):
        raise ValidationError(f"{field} must be finite, got {value}")

    if value <= 0:
        raise ValidationError(f"{field} must be positive, got {value}")
