"""
Processor package for Market Pulse Dashboard.

- briefing: Daily briefing scorer and snapshot assembly
- market_summary: Fear/greed gauge and market movers
"""

from .briefing import compute_briefing, SnapshotAssembler, snapshot_from_payload
from .market_summary import fear_greed, rank_movers

__all__ = [
    "compute_briefing",
    "SnapshotAssembler",
    "snapshot_from_payload",
    "fear_greed",
    "rank_movers",
]
