"""
Briefing Module - Daily market sentiment briefing

Components:
- compute_briefing: Pure scorer folding seven factor evaluators
- SnapshotAssembler: Fetches and defaults the scorer's inputs
- snapshot_from_payload: Validates client-supplied snapshots
"""

from .models import (
    BriefingResult,
    EarningsEntry,
    EconomicEvent,
    Factor,
    FactorOutcome,
    GlobalRegion,
    Headline,
    MarketSnapshot,
    Quote,
    SnapshotValidationError,
)
from .scorer import compute_briefing, derive_signal, clamp_score, BASE_SCORE
from .snapshot import AssembledSnapshot, SnapshotAssembler, snapshot_from_payload, market_today


__all__ = [
    "compute_briefing",
    "derive_signal",
    "clamp_score",
    "BASE_SCORE",
    "BriefingResult",
    "Factor",
    "FactorOutcome",
    "MarketSnapshot",
    "Quote",
    "GlobalRegion",
    "EconomicEvent",
    "EarningsEntry",
    "Headline",
    "SnapshotValidationError",
    "AssembledSnapshot",
    "SnapshotAssembler",
    "snapshot_from_payload",
    "market_today",
]
