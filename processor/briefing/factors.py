"""
Factor Evaluators - the seven independent briefing signals.

Each evaluator reads the snapshot and returns zero or more FactorOutcome
objects. Evaluators never clamp; the scorer sums every outcome and clamps
once at the end.
"""
from constants import Impact, BEARISH_KEYWORDS, BULLISH_KEYWORDS
from .models import Factor, FactorOutcome, MarketSnapshot


def signed(value: float, decimals: int = 2) -> str:
    """Format a percentage with an explicit '+' for non-negative values."""
    value = value + 0.0  # turns -0.0 into 0.0
    sign = "+" if value >= 0 else ""
    return f"{sign}{value:.{decimals}f}"


def _outcome(points: int, name: str, detail: str, sentence: str = None) -> FactorOutcome:
    return FactorOutcome(
        points=points,
        factor=Factor(name=name, detail=detail, points=points),
        sentence=sentence,
    )


# ============================================================
# 1. Volatility
# ============================================================
def evaluate_volatility(snapshot: MarketSnapshot) -> list[FactorOutcome]:
    """Score the VIX level."""
    vix = snapshot.vix.price
    level = f"{vix:.1f}"

    if vix < 14:
        return [_outcome(
            20, "VIX Extremely Low",
            f"VIX at {level}: very low volatility, strong risk appetite",
            f"VIX at {level} signals extremely low volatility, a strong risk-on environment favoring long MES/MNQ positions.",
        )]
    if vix < 18:
        return [_outcome(
            12, "VIX Low",
            f"VIX at {level}: below average volatility",
            f"VIX at {level} shows below-average volatility, constructive for bullish positioning.",
        )]
    if vix < 22:
        return [_outcome(
            0, "VIX Normal",
            f"VIX at {level}: average range",
            f"VIX at {level} is sitting in the normal range with no strong volatility signal.",
        )]
    if vix < 30:
        return [_outcome(
            -15, "VIX Elevated",
            f"VIX at {level}: elevated fear",
            f"VIX at {level} is elevated and signals increased fear; be cautious with long MES/MNQ entries.",
        )]
    return [_outcome(
        -25, "VIX Spiking",
        f"VIX at {level}: extreme fear/panic",
        f"VIX at {level} is in panic territory with a high probability of continued selling pressure on MES/MNQ.",
    )]


# ============================================================
# 2. US index momentum
# ============================================================
def evaluate_momentum(snapshot: MarketSnapshot) -> list[FactorOutcome]:
    """Score the average SPY/QQQ daily change."""
    spy = snapshot.spy.change_percent
    qqq = snapshot.qqq.change_percent
    momentum = (spy + qqq) / 2
    detail = f"SPY {signed(spy)}%, QQQ {signed(qqq)}%"
    cited = f"SPY ({signed(spy)}%) and QQQ ({signed(qqq)}%)"

    if momentum > 1:
        return [_outcome(
            18, "Strong Bullish Momentum", detail,
            f"{cited} are showing strong upward momentum; MES/MNQ likely to follow.",
        )]
    if momentum > 0.2:
        return [_outcome(
            10, "Mild Bullish Momentum", detail,
            f"{cited} are tilting positive, a mild bullish bias for MES/MNQ.",
        )]
    if momentum >= -0.2:
        return [_outcome(
            0, "Flat Momentum", detail,
            f"{cited} are essentially flat, so US index momentum gives no clear directional bias.",
        )]
    if momentum >= -1:
        return [_outcome(
            -10, "Mild Bearish Momentum", detail,
            f"{cited} are tilting negative; stay cautious on MES/MNQ longs.",
        )]
    return [_outcome(
        -18, "Strong Bearish Momentum", detail,
        f"{cited} are in selloff mode; MES/MNQ likely to see continued selling pressure.",
    )]


# ============================================================
# 3. Global markets
# ============================================================
def evaluate_global_markets(snapshot: MarketSnapshot) -> list[FactorOutcome]:
    """Score the overnight tone of the four foreign regions."""
    changes = [region.change_percent for region in snapshot.global_regions]
    average = sum(changes) / len(changes)
    positive = sum(1 for change in changes if change > 0)
    summary = ", ".join(
        f"{region.name}: {signed(region.change_percent)}%"
        for region in snapshot.global_regions
    )

    # avg == 0 counts as Mixed-Negative
    if average > 0.5:
        points, name = 10, "Global Markets Bullish"
    elif average > 0:
        points, name = 5, "Global Markets Mixed-Positive"
    elif average >= -0.5:
        points, name = -5, "Global Markets Mixed-Negative"
    else:
        points, name = -10, "Global Markets Bearish"

    tone = (
        "Positive overnight tone supports MES/MNQ."
        if average > 0
        else "Negative global sentiment may weigh on US futures."
    )
    sentence = (
        f"Global markets: {positive} of {len(changes)} major regions positive. "
        f"{summary}. {tone}"
    )
    return [_outcome(points, name, summary, sentence)]


# ============================================================
# 4. Commodities
# ============================================================
def evaluate_commodities(snapshot: MarketSnapshot) -> list[FactorOutcome]:
    """Score gold and oil moves independently; zero, one or two factors."""
    gold = snapshot.gold.change_percent
    oil = snapshot.oil.change_percent
    outcomes = []

    if gold > 1:
        outcomes.append(_outcome(
            -5, "Gold Rising (Risk-Off)", f"Gold {signed(gold)}%",
            f"Gold up {gold:.2f}%; a flight to safety suggests some risk-off sentiment.",
        ))
    elif gold < -0.5:
        outcomes.append(_outcome(
            3, "Gold Falling (Risk-On)", f"Gold {signed(gold)}%",
            f"Gold down {abs(gold):.2f}%; risk-on rotation supports equity longs.",
        ))

    if oil > 2:
        outcomes.append(_outcome(
            -3, "Oil Spiking", f"Oil {signed(oil)}%",
            f"Oil spiking {oil:.2f}%; energy cost concerns may pressure the broader market.",
        ))
    elif oil < -2:
        outcomes.append(_outcome(
            -2, "Oil Selling Off", f"Oil {signed(oil)}%",
            f"Oil down sharply ({oil:.2f}%), which could signal demand concerns.",
        ))

    return outcomes


# ============================================================
# 5. Economic calendar
# ============================================================
MAX_PENALIZED_EVENTS = 3


def evaluate_economic_calendar(snapshot: MarketSnapshot) -> list[FactorOutcome]:
    """Penalize high-impact releases scheduled for today."""
    high_impact = [
        event for event in snapshot.economic_events_today
        if event.impact == Impact.HIGH
    ]

    if not high_impact:
        return [_outcome(
            3, "No Major Data Today", "Light economic calendar",
            "Clean economic calendar today with no high-impact data releases. "
            "This typically means lower intraday volatility and more predictable price action on MES/MNQ.",
        )]

    count = len(high_impact)
    names = ", ".join(event.name for event in high_impact)
    return [_outcome(
        -5 * min(count, MAX_PENALIZED_EVENTS),
        f"{count} High-Impact Event(s) Today",
        names,
        f"Heads up: {count} high-impact release(s) today: {names}. "
        "Expect elevated volatility around data prints. Consider tightening stops on MES/MNQ positions.",
    )]


# ============================================================
# 6. Mega-cap earnings
# ============================================================
def evaluate_earnings(snapshot: MarketSnapshot) -> list[FactorOutcome]:
    """At most one factor: earnings today take precedence over later ones."""
    upcoming = snapshot.upcoming_earnings
    if not upcoming:
        return []

    today = snapshot.as_of_date.isoformat()
    listing = ", ".join(f"{entry.symbol} ({entry.date})" for entry in upcoming)
    reporting_today = [entry.symbol for entry in upcoming if entry.date == today]

    if reporting_today:
        return [_outcome(
            -5, "Mega-Cap Earnings Today", listing,
            f"Major earnings today: {', '.join(reporting_today)}. "
            "NQ/MNQ could see significant moves post-report. Consider reducing position size ahead of the release.",
        )]
    return [_outcome(
        0, "Mega-Cap Earnings This Week", listing,
        f"Upcoming mega-cap earnings this week: {listing}. Keep on radar for potential NQ/MNQ volatility.",
    )]


# ============================================================
# 7. News sentiment
# ============================================================
NEWS_MARGIN = 3


def count_keyword_hits(texts, keywords) -> int:
    """Count (text, keyword) pairs where the keyword occurs in the text, case-insensitively."""
    hits = 0
    for text in texts:
        lowered = text.lower()
        hits += sum(1 for keyword in keywords if keyword in lowered)
    return hits


def evaluate_news_sentiment(snapshot: MarketSnapshot) -> list[FactorOutcome]:
    """Compare bullish and bearish keyword hits across recent headlines."""
    texts = [headline.text for headline in snapshot.recent_headlines]
    bearish = count_keyword_hits(texts, BEARISH_KEYWORDS)
    bullish = count_keyword_hits(texts, BULLISH_KEYWORDS)

    if bullish > bearish + NEWS_MARGIN:
        return [_outcome(
            5, "Positive News Flow", f"{bullish} bullish vs {bearish} bearish signals",
            f"News sentiment is leaning bullish with {bullish} positive signals vs {bearish} negative.",
        )]
    if bearish > bullish + NEWS_MARGIN:
        return [_outcome(
            -5, "Negative News Flow", f"{bearish} bearish vs {bullish} bullish signals",
            f"News flow is bearish-tilted with {bearish} negative signals vs {bullish} positive, "
            "a sentiment headwind for longs.",
        )]
    return []


# Evaluation order is display order
EVALUATORS = (
    evaluate_volatility,
    evaluate_momentum,
    evaluate_global_markets,
    evaluate_commodities,
    evaluate_economic_calendar,
    evaluate_earnings,
    evaluate_news_sentiment,
)
