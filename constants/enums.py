"""
Shared Enums

Application-wide enums used across multiple modules.
"""
from enum import Enum


class Impact(str, Enum):
    """Economic calendar event impact levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Signal(str, Enum):
    """Five-level market signal derived from the briefing score."""
    STRONG_BULL = "Strong Bull"
    BULL = "Bull"
    NEUTRAL = "Neutral"
    BEAR = "Bear"
    STRONG_BEAR = "Strong Bear"


class FearGreedLevel(str, Enum):
    """VIX-based fear/greed gauge levels."""
    EXTREME_GREED = "Extreme Greed"
    GREED = "Greed"
    NEUTRAL = "Neutral"
    FEAR = "Fear"
    EXTREME_FEAR = "Extreme Fear"

