"""
Tests for the projection service - account, holdings and prices to projection.
Uses in-memory DB seeded with accounts and synthetic price series.
"""

import math
import pytest
import sqlite3
from datetime import date, datetime, timedelta

from analysis.projection_service import project, ProjectionError
from storage.loaders import init_database, upsert_prices, upsert_account, upsert_holding

AS_OF = date(2025, 1, 1)


def _price_rows(ticker, prices, start=date(2024, 1, 1)):
    rows = []
    for i, price in enumerate(prices):
        day = start + timedelta(days=i)
        rows.append({
            'ticker': ticker, 'date': day,
            'open': price, 'high': price, 'low': price, 'close': price, 'adj_close': price,
            'volume': 1000000, 'source': 'yfinance', 'as_of': day,
            'ingested_at': datetime(2024, 12, 31, 9, 0, 0)
        })
    return rows


# One trading year of steady 10% growth, ending at 110
GROWTH_PRICES = [100.0 * 1.1 ** (i / 251) for i in range(252)]


@pytest.fixture
def db():
    """In-memory database with one flat and one growing ticker."""
    conn = sqlite3.connect(':memory:')
    init_database(conn)
    upsert_prices(conn, _price_rows('FLAT', [100.0] * 252))
    upsert_prices(conn, _price_rows('GROW', GROWTH_PRICES))
    upsert_account(conn, {'user_id': 1, 'name': 'Ada', 'birth_date': date(1990, 1, 1)})
    return conn


class TestProject:
    """Tests for project."""

    def test_flat_holding(self, db):
        """Test zero growth keeps the balance."""
        upsert_holding(db, 1, 'FLAT', 10)

        result = project(db, 1, target_age=65, as_of=AS_OF)

        assert result.current_age == 35
        assert result.years == 30
        assert result.current_balance == pytest.approx(1000.0)
        assert result.growth_rate == pytest.approx(0.0)
        assert result.projected_balance == pytest.approx(1000.0)

    def test_growing_holding(self, db):
        """Test growth compounds at the holding's risk-adjusted return."""
        upsert_holding(db, 1, 'GROW', 10)

        result = project(db, 1, target_age=65, as_of=AS_OF)

        assert result.current_balance == pytest.approx(1100.0)
        assert result.growth_rate == pytest.approx(0.10, rel=1e-6)
        assert result.projected_balance == pytest.approx(1100.0 * 1.1 ** 30, rel=1e-4)

    def test_value_weighted_rate(self, db):
        """Test the growth rate is weighted by market value."""
        upsert_holding(db, 1, 'FLAT', 10)
        upsert_holding(db, 1, 'GROW', 10)

        result = project(db, 1, target_age=65, as_of=AS_OF)

        assert result.current_balance == pytest.approx(2100.0)
        assert result.growth_rate == pytest.approx(1100.0 * 0.10 / 2100.0, rel=1e-5)

    def test_no_holdings(self, db):
        """Test an empty portfolio projects to zero."""
        result = project(db, 1, target_age=65, as_of=AS_OF)

        assert result.current_balance == 0.0
        assert result.growth_rate == 0.0
        assert result.projected_balance == 0.0

    def test_target_age_reached(self, db):
        """Test zero years leaves the balance unchanged."""
        upsert_holding(db, 1, 'GROW', 10)

        result = project(db, 1, target_age=35, as_of=AS_OF)

        assert result.years == 0
        assert result.projected_balance == pytest.approx(result.current_balance)

    def test_default_target_age(self, db):
        """Test target age defaults to 65."""
        result = project(db, 1, as_of=AS_OF)

        assert result.target_age == 65

    def test_unknown_user(self, db):
        """Test unknown users cannot be projected."""
        with pytest.raises(ProjectionError, match="User 99 not found"):
            project(db, 99, as_of=AS_OF)

    def test_target_age_passed(self, db):
        """Test target age below current age is rejected."""
        with pytest.raises(ProjectionError, match="below current age"):
            project(db, 1, target_age=30, as_of=AS_OF)

    def test_holding_without_prices(self, db):
        """Test a held ticker with no stored history is rejected."""
        upsert_holding(db, 1, 'MISSING', 5)

        with pytest.raises(ProjectionError, match="No price data found for held ticker MISSING"):
            project(db, 1, as_of=AS_OF)

    def test_prices_after_as_of_ignored(self, db):
        """Test only prices on or before the reference date are used."""
        upsert_holding(db, 1, 'FLAT', 10)
        upsert_prices(db, _price_rows('FLAT', [500.0], start=date(2025, 6, 1)))

        result = project(db, 1, as_of=AS_OF)

        assert result.current_balance == pytest.approx(1000.0)

    def test_short_history_overflows_to_infinity(self, db):
        """Test a huge but finite rate compounds to inf instead of raising."""
        upsert_prices(db, _price_rows('FAST', [100.0, 110.0, 121.0, 133.1, 146.41]))
        upsert_holding(db, 1, 'FAST', 10)

        result = project(db, 1, target_age=75, as_of=AS_OF)

        assert math.isfinite(result.growth_rate)
        assert result.projected_balance == math.inf

    def test_infinite_growth_rate_rejected(self, db):
        """Test an overflowing CAGR surfaces as a projection error."""
        upsert_prices(db, _price_rows('PNY', [1.0, 1000.0]))
        upsert_holding(db, 1, 'PNY', 10)

        with pytest.raises(ProjectionError, match="not finite"):
            project(db, 1, as_of=AS_OF)
