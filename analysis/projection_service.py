"""
Projection service - grows a user's current holdings to a target age.
Resolves balance and age from the account store, the growth rate from
each holding's risk-adjusted return, then applies the projection engine.
"""

import logging
import math
import sqlite3
from datetime import date
from typing import List, Optional, Tuple

from analysis.guardrails import DataQualityError
from analysis.indicators import analyze
from analysis.models import Account, ProjectionResult
from analysis.projection import age_on, project_future_value
from storage.loaders import load_account, load_price_history

logger = logging.getLogger(__name__)

DEFAULT_TARGET_AGE = 65


class ProjectionError(Exception):
    """Raised when a projection cannot be resolved."""
    pass


def project(
    conn: sqlite3.Connection,
    user_id: int,
    target_age: int = DEFAULT_TARGET_AGE,
    as_of: Optional[date] = None
) -> ProjectionResult:
    """
    Project a user's portfolio value at a target age.

    Balance is the sum of shares × latest adjusted close across holdings.
    Growth rate is the value-weighted risk-adjusted return of those holdings.

    Args:
        conn: SQLite connection
        user_id: Account identifier
        target_age: Age to project to (defaults to 65)
        as_of: Reference date for age and prices (defaults to today)

    Returns:
        ProjectionResult

    Raises:
        ProjectionError: If the user is unknown, the target age has passed,
            a held ticker has no usable price history,
            or the blended growth rate is not finite
    """
    if as_of is None:
        as_of = date.today()

    account = load_account(conn, user_id)
    if account is None:
        raise ProjectionError(f"User {user_id} not found")

    current_age = age_on(account.birth_date, as_of)
    if target_age < current_age:
        raise ProjectionError(
            f"Target age {target_age} is below current age {current_age} for user {user_id}"
        )
    years = target_age - current_age

    balance, rate = _resolve_balance_and_rate(conn, account, as_of)
    projected = project_future_value(balance, rate, years)

    logger.info(
        "Projected user %d from %.2f to %.2f over %d years at %.4f",
        user_id, balance, projected, years, rate
    )

    return ProjectionResult(
        user_id=user_id,
        target_age=target_age,
        projected_balance=projected,
        current_age=current_age,
        years=years,
        current_balance=balance,
        growth_rate=rate,
        as_of=as_of,
    )


def _resolve_balance_and_rate(
    conn: sqlite3.Connection,
    account: Account,
    as_of: date
) -> Tuple[float, float]:
    """
    Value each holding and blend their growth rates by market value.

    Returns:
        Tuple of (total balance, value-weighted risk-adjusted return)
    """
    positions: List[Tuple[float, float]] = []

    for holding in account.holdings:
        history = load_price_history(conn, holding.ticker, end_date=as_of)
        if not history:
            raise ProjectionError(f"No price data found for held ticker {holding.ticker}")

        try:
            bundle = analyze(history)
        except DataQualityError as e:
            raise ProjectionError(f"Invalid price history for {holding.ticker}: {e}") from e

        value = holding.shares * float(bundle.last_price)
        positions.append((value, bundle.risk_adjusted_return))

    balance = sum(value for value, _ in positions)
    if balance <= 0:
        return 0.0, 0.0

    rate = sum(value * r for value, r in positions) / balance
    if not math.isfinite(rate):
        raise ProjectionError(
            f"Growth rate for user {account.user_id} is not finite ({rate})"
        )
    return balance, rate
