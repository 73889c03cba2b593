"""
Guardrails for analysis engine - validation and safety checks.
Malformed histories are rejected; suspicious but well-formed ones only warn.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional, Sequence

from analysis.models import PricePoint

# Daily moves larger than this are flagged for review
LARGE_MOVE_THRESHOLD = 0.20

# Calendar days after which the latest price is considered stale
STALE_AFTER_DAYS = 7


class DataQualityError(Exception):
    """Raised when a price history violates the engine's preconditions."""
    pass


def validate_price_history(history: Sequence[PricePoint]) -> None:
    """
    Validate that a price history is well-formed.

    Requirements:
    - Every item is a PricePoint
    - Dates strictly increase (oldest first, no duplicates)
    - Prices are finite and non-negative

    Args:
        history: Price points in chronological order

    Raises:
        DataQualityError: On the first violation found
    """
    previous_date: Optional[date] = None

    for index, point in enumerate(history):
        if not isinstance(point, PricePoint):
            raise DataQualityError(
                f"Item {index} must be PricePoint, got {type(point).__name__}"
            )

        price = point.adj_close
        if not price.is_finite():
            raise DataQualityError(f"Price on {point.date} must be finite, got {price}")

        if price < 0:
            raise DataQualityError(f"Price on {point.date} must be non-negative, got {price}")

        if previous_date is not None:
            if point.date == previous_date:
                raise DataQualityError(f"Duplicate date in price history: {point.date}")
            if point.date < previous_date:
                raise DataQualityError(
                    f"Price history must be sorted oldest first: "
                    f"{point.date} follows {previous_date}"
                )

        previous_date = point.date


def price_history_warnings(
    history: Sequence[PricePoint],
    as_of_date: Optional[date] = None
) -> List[str]:
    """
    Detect anomalies that do not block analysis but deserve a log line.

    Args:
        history: Validated price points in chronological order
        as_of_date: Reference date for staleness (defaults to today)

    Returns:
        List of human-readable warnings
    """
    warnings = []

    if not history:
        return warnings

    if as_of_date is None:
        as_of_date = date.today()

    # Check for large price gaps (>20% daily moves)
    for previous, current in zip(history, history[1:]):
        if previous.adj_close == 0:
            continue
        daily_change = abs(float(current.adj_close / previous.adj_close) - 1)
        if daily_change > LARGE_MOVE_THRESHOLD:
            warnings.append(
                f"Large price movement on {current.date}: "
                f"{daily_change:.1%} change (${previous.adj_close:.2f} → ${current.adj_close:.2f})"
            )

    zero_days = [p.date for p in history if p.adj_close == Decimal(0)]
    if zero_days:
        warnings.append(f"Zero price detected on {len(zero_days)} days: {zero_days}")

    latest = history[-1].date
    if as_of_date - latest > timedelta(days=STALE_AFTER_DAYS):
        warnings.append(
            f"Stale price data: latest point {latest} is "
            f"{(as_of_date - latest).days} days before {as_of_date}"
        )

    return warnings
