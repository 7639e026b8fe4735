"""
Briefing Scorer - composite market sentiment score.

Folds the seven factor evaluators into a single bounded score, a signal
label, an ordered factor list and the narrative paragraph. Pure: no I/O,
no shared state, safe to call concurrently.
"""
from datetime import datetime, timezone
from typing import Optional

from constants import Signal
from .factors import EVALUATORS
from .models import BriefingResult, MarketSnapshot

BASE_SCORE = 50
MIN_SCORE = 0
MAX_SCORE = 100

# (lower bound, signal), checked top-down
SIGNAL_BREAKPOINTS = (
    (75, Signal.STRONG_BULL),
    (60, Signal.BULL),
    (45, Signal.NEUTRAL),
    (30, Signal.BEAR),
)


def clamp_score(score: int) -> int:
    return max(MIN_SCORE, min(MAX_SCORE, score))


def derive_signal(score: int) -> Signal:
    """Map a clamped score to its signal label."""
    for lower_bound, signal in SIGNAL_BREAKPOINTS:
        if score >= lower_bound:
            return signal
    return Signal.STRONG_BEAR


def compute_briefing(snapshot: MarketSnapshot, now: Optional[datetime] = None) -> BriefingResult:
    """
    Score a market snapshot.
    
    Args:
        snapshot: Fully populated snapshot; missing upstream values must
                  already be defaulted to zero/empty.
        now: Timestamp to stamp on the result (defaults to current UTC time)
        
    Returns:
        BriefingResult with clamped score, signal, factors and narrative
    """
    raw_score = BASE_SCORE
    factors = []
    narrative = []

    for evaluate in EVALUATORS:
        for outcome in evaluate(snapshot):
            raw_score += outcome.points
            if outcome.factor is not None:
                factors.append(outcome.factor)
            if outcome.sentence:
                narrative.append(outcome.sentence)

    score = clamp_score(raw_score)
    return BriefingResult(
        score=score,
        signal=derive_signal(score),
        factors=tuple(factors),
        narrative=tuple(narrative),
        generated_at=now or datetime.now(timezone.utc),
        raw_score=raw_score,
    )
