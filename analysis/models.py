"""
Value objects passed between the storage layer, the engines and the CLI.
All are frozen dataclasses - constructed once per request, never mutated.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Tuple


def _to_decimal(value: Any) -> Decimal:
    """Coerce a numeric value to Decimal via str to avoid float artifacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class PricePoint:
    """Single adjusted-close observation for one trading day."""
    date: date
    adj_close: Decimal

    def __post_init__(self):
        object.__setattr__(self, 'adj_close', _to_decimal(self.adj_close))


@dataclass(frozen=True)
class IndicatorBundle:
    """
    Technical indicators derived from one price history.

    Moving averages are None when the history is shorter than the
    averaging window, so "not enough data" is never confused with a
    computed zero.
    """
    sma20: Optional[Decimal] = None
    sma50: Optional[Decimal] = None
    sma200: Optional[Decimal] = None
    max_drawdown: float = 0.0
    volatility: float = 0.0
    cagr: float = 0.0
    risk_adjusted_return: float = 0.0
    last_price: Optional[Decimal] = None
    trading_days: int = 0

    def is_bullish_crossover(self) -> bool:
        """True when the 20-day average sits above the 50-day average."""
        if self.sma20 is None or self.sma50 is None:
            return False
        return self.sma20 > self.sma50

    def is_bullish_trend(self, current_price: Optional[Decimal]) -> bool:
        """True when the given price is strictly above the 200-day average."""
        if self.sma200 is None or current_price is None:
            return False
        return _to_decimal(current_price) > self.sma200

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sma20': _decimal_str(self.sma20),
            'sma50': _decimal_str(self.sma50),
            'sma200': _decimal_str(self.sma200),
            'max_drawdown': self.max_drawdown,
            'volatility': self.volatility,
            'cagr': self.cagr,
            'risk_adjusted_return': self.risk_adjusted_return,
            'last_price': _decimal_str(self.last_price),
            'trading_days': self.trading_days,
        }


class Action(str, Enum):
    """Allowed recommendation actions."""
    BUY = 'BUY'
    SELL = 'SELL'
    HOLD = 'HOLD'


@dataclass(frozen=True)
class RecommendationResult:
    """Buy / Sell / Hold recommendation for a single ticker."""
    ticker: str
    action: Action
    confidence: int
    rationale: str
    signals: Tuple[str, ...] = ()

    def __post_init__(self):
        if not isinstance(self.action, Action):
            object.__setattr__(self, 'action', Action(self.action))
        if not 0 <= self.confidence <= 100:
            raise ValueError(f"confidence must be within 0-100, got {self.confidence}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'ticker': self.ticker,
            'action': self.action.value,
            'confidence': self.confidence,
            'rationale': self.rationale,
            'signals': list(self.signals),
        }


@dataclass(frozen=True)
class ProjectionResult:
    """Projected portfolio balance at a target age."""
    user_id: int
    target_age: int
    projected_balance: float
    current_age: int
    years: int
    current_balance: float
    growth_rate: float
    as_of: date

    def to_dict(self) -> Dict[str, Any]:
        return {
            'user_id': self.user_id,
            'target_age': self.target_age,
            'current_age': self.current_age,
            'years': self.years,
            'current_balance': self.current_balance,
            'growth_rate': self.growth_rate,
            'projected_balance': self.projected_balance,
            'as_of': self.as_of.isoformat(),
        }


@dataclass(frozen=True)
class Holding:
    """Shares of one ticker held in an account."""
    ticker: str
    shares: float


@dataclass(frozen=True)
class Account:
    """A user and the positions they hold."""
    user_id: int
    name: str
    birth_date: date
    holdings: Tuple[Holding, ...] = field(default_factory=tuple)


def _decimal_str(value: Optional[Decimal]) -> Optional[str]:
    return str(value) if value is not None else None
