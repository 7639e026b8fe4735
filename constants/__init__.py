"""
Constants package for Market Pulse Dashboard.

Contains symbol tables, keyword lists, and enums.
"""

from .enums import Impact, Signal, FearGreedLevel
from .market_symbols import (
    MEGA_CAPS,
    MAX_BRIEFING_EARNINGS,
    MAX_BRIEFING_HEADLINES,
    BRIEFING_GLOBAL_REGIONS,
    BEARISH_KEYWORDS,
    BULLISH_KEYWORDS,
)

__all__ = [
    "Impact",
    "Signal",
    "FearGreedLevel",
    "MEGA_CAPS",
    "MAX_BRIEFING_EARNINGS",
    "MAX_BRIEFING_HEADLINES",
    "BRIEFING_GLOBAL_REGIONS",
    "BEARISH_KEYWORDS",
    "BULLISH_KEYWORDS",
]
