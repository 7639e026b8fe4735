"""
Market Summary - small derived views over batch quotes

- fear_greed: VIX-based fear/greed gauge
- rank_movers: top gainers and losers from a watchlist
"""
from typing import Optional

from constants import FearGreedLevel
from crawlers.quote_crawler import has_price

# (upper bound on VIX, level, score, description), checked top-down
FEAR_GREED_BANDS = (
    (12, FearGreedLevel.EXTREME_GREED, 95,
     "Market showing signs of extreme euphoria. Consider taking profits."),
    (17, FearGreedLevel.GREED, 75,
     "Strong market confidence. Positive momentum visible."),
    (22, FearGreedLevel.NEUTRAL, 50,
     "Market in balance. No clear directional bias."),
    (30, FearGreedLevel.FEAR, 25,
     "Market volatility elevated. Investors showing caution."),
)
EXTREME_FEAR = (
    FearGreedLevel.EXTREME_FEAR, 5,
    "Market in extreme panic. Potential buying opportunity for long-term investors.",
)


def fear_greed(vix: Optional[dict], spy: Optional[dict]) -> dict:
    """
    Classify market mood from the VIX level, with SPY's direction attached.
    
    Args:
        vix: Normalized VIX quote (may be None if the fetch failed)
        spy: Normalized SPY quote (may be None if the fetch failed)
    """
    vix = vix or {}
    spy = spy or {}
    vix_price = vix.get("price") or 0
    spy_change = spy.get("changePercent") or 0

    level, score, description = EXTREME_FEAR
    for upper, band_level, band_score, band_description in FEAR_GREED_BANDS:
        if vix_price < upper:
            level, score, description = band_level, band_score, band_description
            break

    return {
        "vix": {
            "price": vix_price,
            "change": vix.get("change") or 0,
            "changePercent": vix.get("changePercent") or 0,
        },
        "sentiment": level.value,
        "sentimentScore": score,
        "spyDirection": "Bullish" if spy_change >= 0 else "Bearish",
        "description": description,
    }


def rank_movers(quotes: list[dict], count: int = 5) -> dict:
    """Sort priced quotes by daily change; best `count` up, worst `count` down."""
    priced = sorted(
        (q for q in quotes if has_price(q)),
        key=lambda q: q.get("changePercent") or 0,
        reverse=True,
    )
    return {
        "gainers": priced[:count],
        "losers": list(reversed(priced[-count:])) if priced else [],
    }
