"""TLT advisory signal derived from term premium, the 10Y yield and the VIX."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SignalLevel(str, Enum):
    BULLISH = "green"
    NEUTRAL = "yellow"
    BEARISH = "red"


BUY_ACTION = "Buy (scale into TLT / add duration)"
NEUTRAL_ACTION = "Sell Call / Wait (neutral: lean to covered calls or stay on the sidelines)"
HEDGE_ACTION = "Wait / Hedge (avoid adding; protective puts or shorter duration if needed)"


@dataclass(frozen=True)
class AdvisorySignal:
    level: SignalLevel
    action: str
    reasons: tuple[str, ...]

    @property
    def color(self) -> str:
        return self.level.value


def _below(value: float | None, threshold: float) -> bool:
    return value is not None and value < threshold


def _above(value: float | None, threshold: float) -> bool:
    return value is not None and value > threshold


def tlt_decision(
    term_premium: float | None,
    ten_year_yield: float | None,
    vix: float | None,
) -> AdvisorySignal:
    """Classify the latest readings into bullish, bearish or neutral.

    A missing reading never satisfies a condition. Bullish carries no reasons;
    bearish lists the bearish triggers that hold; neutral lists whichever
    bullish conditions hold on their own.
    """

    low_premium = _below(term_premium, 0)
    low_yield = _below(ten_year_yield, 3.5)
    calm_vix = _below(vix, 18)

    if low_premium and low_yield and calm_vix:
        return AdvisorySignal(SignalLevel.BULLISH, BUY_ACTION, ())

    high_premium = _above(term_premium, 0.5)
    high_yield = _above(ten_year_yield, 4.5)
    stressed_vix = _above(vix, 25)

    if high_premium or high_yield or stressed_vix:
        reasons = []
        if high_premium:
            reasons.append("term premium > 0.5")
        if high_yield:
            reasons.append("10Y yield > 4.5")
        if stressed_vix:
            reasons.append("VIX > 25")
        return AdvisorySignal(SignalLevel.BEARISH, HEDGE_ACTION, tuple(reasons))

    reasons = []
    if low_premium:
        reasons.append("term premium < 0")
    if low_yield:
        reasons.append("10Y yield < 3.5")
    if calm_vix:
        reasons.append("VIX < 18")
    return AdvisorySignal(SignalLevel.NEUTRAL, NEUTRAL_ACTION, tuple(reasons))


__all__ = [
    "SignalLevel",
    "AdvisorySignal",
    "BUY_ACTION",
    "NEUTRAL_ACTION",
    "HEDGE_ACTION",
    "tlt_decision",
]
