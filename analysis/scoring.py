"""
Scoring engine - turns an IndicatorBundle into a Buy / Sell / Hold call.
Pure and deterministic: the same bundle always yields the same result.
"""

from decimal import Decimal
from typing import List, NamedTuple, Optional

from analysis.models import Action, IndicatorBundle, RecommendationResult

# Annualized volatility band
LOW_VOLATILITY = 0.20
HIGH_VOLATILITY = 0.40

# Net signal count needed before leaving HOLD
DECISION_THRESHOLD = 2

BASE_CONFIDENCE = 40
AGREEING_WEIGHT = 15
OPPOSING_WEIGHT = 10
HOLD_CONFIDENCE = 50
CONFLICT_PENALTY = 10

NO_SIGNAL_RATIONALE = "No decisive trend or risk signals"


class Signal(NamedTuple):
    """One evaluated signal: +1 bullish, -1 bearish, 0 neutral."""
    name: str
    direction: int
    description: str


def _crossover_signal(bundle: IndicatorBundle) -> Signal:
    if bundle.sma20 is None or bundle.sma50 is None or bundle.sma20 == bundle.sma50:
        return Signal('crossover', 0, '')
    if bundle.is_bullish_crossover():
        return Signal('crossover', 1, 'golden cross detected (SMA20 above SMA50)')
    return Signal('crossover', -1, 'death cross detected (SMA20 below SMA50)')


def _trend_signal(bundle: IndicatorBundle, current_price: Optional[Decimal]) -> Signal:
    if bundle.sma200 is None or current_price is None or current_price == bundle.sma200:
        return Signal('trend', 0, '')
    if bundle.is_bullish_trend(current_price):
        return Signal('trend', 1, 'price above long-term trend (SMA200)')
    return Signal('trend', -1, 'price below long-term trend (SMA200)')


def _return_signal(bundle: IndicatorBundle) -> Signal:
    if bundle.risk_adjusted_return > 0:
        return Signal('risk_adjusted_return', 1, 'positive risk-adjusted return')
    if bundle.risk_adjusted_return < 0:
        return Signal('risk_adjusted_return', -1, 'negative risk-adjusted return')
    return Signal('risk_adjusted_return', 0, '')


def _volatility_signal(bundle: IndicatorBundle) -> Signal:
    if bundle.volatility > HIGH_VOLATILITY:
        return Signal('volatility', -1, f'elevated volatility ({bundle.volatility:.0%})')
    if 0 < bundle.volatility < LOW_VOLATILITY:
        return Signal('volatility', 1, f'low volatility ({bundle.volatility:.0%})')
    return Signal('volatility', 0, '')


def evaluate_signals(
    bundle: IndicatorBundle,
    current_price: Optional[Decimal] = None
) -> List[Signal]:
    """
    Evaluate the fixed, ordered signal set.

    Order: SMA crossover, long-term trend, risk-adjusted return, volatility.
    """
    if current_price is None:
        current_price = bundle.last_price
    elif not isinstance(current_price, Decimal):
        current_price = Decimal(str(current_price))

    return [
        _crossover_signal(bundle),
        _trend_signal(bundle, current_price),
        _return_signal(bundle),
        _volatility_signal(bundle),
    ]


def score(
    bundle: IndicatorBundle,
    current_price: Optional[Decimal] = None,
    ticker: str = ''
) -> RecommendationResult:
    """
    Score a bundle into a recommendation.

    BUY when bullish signals outnumber bearish ones by at least two, SELL
    for the mirror case, HOLD otherwise. Confidence grows with each
    agreeing signal and shrinks with each opposing one; HOLD confidence
    drops as signals conflict.

    Args:
        bundle: Indicators computed for the ticker
        current_price: Latest adjusted close (defaults to bundle.last_price)
        ticker: Symbol attached to the result

    Returns:
        RecommendationResult with action, confidence 0-100 and rationale
    """
    signals = evaluate_signals(bundle, current_price)

    bullish = [s for s in signals if s.direction > 0]
    bearish = [s for s in signals if s.direction < 0]
    net = len(bullish) - len(bearish)

    if net >= DECISION_THRESHOLD:
        action = Action.BUY
        agreeing, opposing = bullish, bearish
    elif net <= -DECISION_THRESHOLD:
        action = Action.SELL
        agreeing, opposing = bearish, bullish
    else:
        action = Action.HOLD
        agreeing, opposing = [], []

    if action is Action.HOLD:
        confidence = HOLD_CONFIDENCE - CONFLICT_PENALTY * min(len(bullish), len(bearish))
        rationale = _hold_rationale(bullish, bearish)
        drivers = bullish + bearish
    else:
        confidence = BASE_CONFIDENCE + AGREEING_WEIGHT * len(agreeing) - OPPOSING_WEIGHT * len(opposing)
        rationale = _join(agreeing)
        drivers = agreeing

    return RecommendationResult(
        ticker=ticker,
        action=action,
        confidence=max(0, min(100, confidence)),
        rationale=rationale,
        signals=tuple(s.name for s in drivers),
    )


def _hold_rationale(bullish: List[Signal], bearish: List[Signal]) -> str:
    if not bullish and not bearish:
        return NO_SIGNAL_RATIONALE
    if bullish and bearish:
        return f"Mixed signals: {_join(bullish + bearish, capitalize=False)}"
    return _join(bullish + bearish)


def _join(signals: List[Signal], capitalize: bool = True) -> str:
    text = '; '.join(s.description for s in signals)
    if capitalize and text:
        text = text[0].upper() + text[1:]
    return text
