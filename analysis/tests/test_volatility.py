"""
Tests for volatility calculation utilities.
Synthetic data where the sample standard deviation is known.
"""

import math
import pytest
import numpy as np

from analysis.calculations.volatility import realized_vol, annualized_volatility


class TestRealizedVolatility:
    """Tests for realized_vol."""

    def test_realized_vol_constant_returns(self):
        """Test constant returns have zero volatility."""
        returns = np.array([0.01, 0.01, 0.01, 0.01, 0.01])

        assert realized_vol(returns) == pytest.approx(0.0, abs=1e-12)

    def test_realized_vol_sample_std(self):
        """Test sample (ddof=1) standard deviation without annualization."""
        returns = np.array([0.0, 0.02, -0.02, 0.02, -0.02])

        vol = realized_vol(returns, annualize=1)

        assert vol == pytest.approx(np.std(returns, ddof=1))

    def test_realized_vol_annualization(self):
        """Test annualized volatility scales by sqrt(252)."""
        returns = np.array([0.01, -0.01, 0.01, -0.01, 0.01])

        vol_daily = realized_vol(returns, annualize=1)
        vol_annual = realized_vol(returns, annualize=252)

        assert vol_annual == pytest.approx(vol_daily * math.sqrt(252))

    def test_realized_vol_single_return(self):
        """Test one return has undefined sample std and yields zero."""
        assert realized_vol(np.array([0.05])) == 0.0

    def test_realized_vol_empty(self):
        """Test empty returns yield zero."""
        assert realized_vol(np.array([])) == 0.0


class TestAnnualizedVolatility:
    """Tests for price-based annualized volatility."""

    def test_annualized_volatility_known_series(self):
        """Test +10% then -10% moves."""
        # Returns [0.1, -0.1]: mean 0, sample variance 0.02
        vol = annualized_volatility([100.0, 110.0, 99.0])

        expected = math.sqrt(0.02) * math.sqrt(252)
        assert vol == pytest.approx(expected)

    def test_annualized_volatility_flat_prices(self):
        """Test flat prices have zero volatility."""
        assert annualized_volatility([100.0] * 300) == 0.0

    def test_annualized_volatility_insufficient_prices(self):
        """Test fewer than two prices gives zero."""
        assert annualized_volatility([]) == 0.0
        assert annualized_volatility([100.0]) == 0.0

    def test_annualized_volatility_two_prices(self):
        """Test two prices (a single return) gives zero."""
        assert annualized_volatility([100.0, 105.0]) == 0.0

    def test_annualized_volatility_zero_price(self):
        """Test a zero price is handled without division errors."""
        vol = annualized_volatility([0.0, 10.0, 20.0])

        expected = np.std([0.0, 1.0], ddof=1) * math.sqrt(252)
        assert vol == pytest.approx(expected)

    def test_annualized_volatility_non_negative(self):
        """Test volatility is never negative."""
        prices = [100.0, 95.0, 97.0, 90.0, 120.0, 60.0, 61.0]

        assert annualized_volatility(prices) >= 0.0
