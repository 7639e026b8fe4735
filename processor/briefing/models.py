"""
Data models for the Briefing module.

Snapshots are built fresh for every scoring pass and never mutated;
results are frozen once the scorer returns them.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from constants import Impact, Signal


class SnapshotValidationError(ValueError):
    """Raised when a snapshot has the wrong type or shape."""


@dataclass(frozen=True)
class Quote:
    """Price and daily change of one instrument."""
    price: float = 0.0
    change_percent: float = 0.0


@dataclass(frozen=True)
class GlobalRegion:
    """Overnight change of one foreign market."""
    name: str
    change_percent: float = 0.0


@dataclass(frozen=True)
class EconomicEvent:
    """Economic calendar release scheduled for the snapshot date."""
    name: str
    impact: Impact = Impact.LOW


@dataclass(frozen=True)
class EarningsEntry:
    """Upcoming mega-cap earnings report."""
    symbol: str
    date: str  # ISO date, e.g. "2026-10-20"


@dataclass(frozen=True)
class Headline:
    """News headline and summary, concatenated for keyword scanning."""
    text: str


@dataclass(frozen=True)
class MarketSnapshot:
    """
    Complete set of pre-fetched market observations for one scoring pass.
    
    `as_of_date` is fixed once by whoever builds the snapshot and is the only
    notion of "today" the evaluators use.
    """
    vix: Quote
    spy: Quote
    qqq: Quote
    gold: Quote
    oil: Quote
    global_regions: tuple[GlobalRegion, ...]
    as_of_date: date
    economic_events_today: tuple[EconomicEvent, ...] = ()
    upcoming_earnings: tuple[EarningsEntry, ...] = ()
    recent_headlines: tuple[Headline, ...] = ()
    
    def __post_init__(self):
        if len(self.global_regions) != 4:
            raise SnapshotValidationError(
                f"global_regions must hold exactly 4 regions, got {len(self.global_regions)}"
            )


@dataclass(frozen=True)
class Factor:
    """One scored contributor to the briefing score."""
    name: str
    detail: str
    points: int
    
    def to_dict(self) -> dict:
        return {
            "factor": self.name,
            "detail": self.detail,
            "points": self.points,
        }


@dataclass(frozen=True)
class FactorOutcome:
    """What a single evaluator contributes: points, a factor, a narrative sentence."""
    points: int
    factor: Optional[Factor] = None
    sentence: Optional[str] = None


@dataclass(frozen=True)
class BriefingResult:
    """Result of one full scoring pass."""
    score: int
    signal: Signal
    factors: tuple[Factor, ...]
    narrative: tuple[str, ...]
    generated_at: datetime
    raw_score: int = field(default=0, compare=False)
    
    @property
    def briefing(self) -> str:
        """Narrative sentences as a single paragraph."""
        return " ".join(self.narrative)
    
    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "signal": self.signal.value,
            "briefing": self.briefing,
            "factors": [f.to_dict() for f in self.factors],
            "timestamp": self.generated_at.isoformat(),
        }
