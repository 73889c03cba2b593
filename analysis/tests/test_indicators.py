"""
Tests for the indicator engine.
End-to-end scenarios from price history to IndicatorBundle.
"""

import json
import math
import pytest
from datetime import date, timedelta
from decimal import Decimal

from analysis.guardrails import DataQualityError
from analysis.indicators import analyze
from analysis.models import IndicatorBundle, PricePoint


def _history(prices, start=date(2024, 1, 1)):
    return [PricePoint(start + timedelta(days=i), Decimal(str(p))) for i, p in enumerate(prices)]


class TestAnalyze:
    """Tests for analyze."""

    def test_empty_history_returns_empty_bundle(self):
        """Test empty and None histories degrade to the empty bundle."""
        assert analyze([]) == IndicatorBundle()
        assert analyze(None) == IndicatorBundle()

    def test_empty_bundle_sentinels(self):
        """Test empty bundle fields."""
        bundle = analyze([])

        assert bundle.sma20 is None
        assert bundle.sma50 is None
        assert bundle.sma200 is None
        assert bundle.volatility == 0.0
        assert bundle.max_drawdown == 0.0
        assert bundle.cagr == 0.0
        assert bundle.risk_adjusted_return == 0.0
        assert bundle.last_price is None
        assert bundle.trading_days == 0

    def test_flat_series(self):
        """Test 300 identical prices."""
        bundle = analyze(_history([100.0] * 300))

        assert bundle.sma20 == Decimal('100')
        assert bundle.sma50 == Decimal('100')
        assert bundle.sma200 == Decimal('100')
        assert bundle.volatility == 0.0
        assert bundle.max_drawdown == 0.0
        assert bundle.cagr == 0.0
        assert bundle.risk_adjusted_return == 0.0
        assert bundle.last_price == Decimal('100')
        assert bundle.trading_days == 300

    def test_short_history_sma_unavailable(self):
        """Test SMAs beyond the history length are None, not zero."""
        bundle = analyze(_history([10.0] * 30))

        assert bundle.sma20 == Decimal('10')
        assert bundle.sma50 is None
        assert bundle.sma200 is None

    def test_geometric_growth_cagr(self):
        """Test CAGR uses the 252-trading-day year."""
        prices = [100.0, 110.0, 121.0, 133.1, 146.41]

        bundle = analyze(_history(prices))

        assert bundle.cagr == pytest.approx(1.4641 ** (252 / 5) - 1, rel=1e-9)

    def test_risk_adjusted_return_composition(self):
        """Test risk-adjusted return combines CAGR and volatility."""
        bundle = analyze(_history([100.0, 110.0, 99.0, 104.0, 101.0]))

        expected = bundle.cagr - 0.5 * bundle.volatility ** 2
        assert bundle.risk_adjusted_return == pytest.approx(expected)

    def test_drawdown_half(self):
        """Test a 50% fall that never recovers."""
        bundle = analyze(_history([100.0, 90.0, 75.0, 50.0]))

        assert bundle.max_drawdown == pytest.approx(0.5)

    def test_idempotent(self):
        """Test repeated analysis of the same history gives equal bundles."""
        history = _history([100.0 + (i % 7) * 1.3 - (i % 5) for i in range(260)])

        assert analyze(history) == analyze(history)

    def test_does_not_mutate_history(self):
        """Test the input history is left unchanged."""
        history = _history([100.0, 101.0, 102.0])
        snapshot = list(history)

        analyze(history)

        assert history == snapshot

    def test_explosive_short_history(self):
        """Test growth too large to annualize yields inf, not an error."""
        bundle = analyze(_history([1.0, 1000.0]))

        assert bundle.cagr == math.inf
        assert bundle.risk_adjusted_return == math.inf
        assert bundle.volatility == 0.0
        json.dumps(bundle.to_dict())

    def test_unsorted_history_rejected(self):
        """Test malformed input fails fast."""
        history = list(reversed(_history([100.0, 101.0])))

        with pytest.raises(DataQualityError):
            analyze(history)
