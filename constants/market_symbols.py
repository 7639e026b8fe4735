"""
Market Symbol Constants

Fixed symbol tables used by the crawlers, the REST facade and the
briefing scorer. ETFs stand in for indices the free data tier does not
quote directly.
"""
from typing import Dict, List


# ============================================
# MEGA-CAP ALLOW-LIST (earnings relevance filter)
# ============================================

MEGA_CAPS: List[str] = [
    "AAPL", "MSFT", "GOOGL", "GOOG", "AMZN", "NVDA", "META", "TSLA",
    "AVGO", "JPM", "V", "MA", "UNH", "HD", "COST", "NFLX", "CRM", "AMD", "ADBE", "LIN",
]

MAX_BRIEFING_EARNINGS = 5
MAX_BRIEFING_HEADLINES = 20


# ============================================
# BRIEFING INPUT SYMBOLS
# ============================================

VIX_SYMBOL = "VIX"
SPY_SYMBOL = "SPY"
QQQ_SYMBOL = "QQQ"
GOLD_SYMBOL = "GLD"
OIL_SYMBOL = "USO"

# Order matters: averaged and reported in this order
BRIEFING_GLOBAL_REGIONS: List[Dict[str, str]] = [
    {"key": "london", "symbol": "EWU", "name": "London (FTSE)"},
    {"key": "tokyo", "symbol": "EWJ", "name": "Tokyo (Nikkei)"},
    {"key": "hongkong", "symbol": "FXI", "name": "Hong Kong (HSI)"},
    {"key": "frankfurt", "symbol": "EWG", "name": "Frankfurt (DAX)"},
]


# ============================================
# NEWS KEYWORDS
# ============================================

BEARISH_KEYWORDS: List[str] = [
    "crash", "recession", "plunge", "selloff", "sell-off", "crisis", "fear",
    "downgrade", "layoffs", "warning", "risk", "tariff", "war",
]

BULLISH_KEYWORDS: List[str] = [
    "rally", "surge", "record", "breakout", "upgrade", "growth", "boom",
    "beat", "strong", "hire", "bullish",
]


# ============================================
# FACADE WATCHLISTS
# ============================================

INDEX_SYMBOLS: List[Dict] = [
    {"symbol": "MES=F", "name": "Micro E-mini S&P (MES)", "futures": True},
    {"symbol": "MNQ=F", "name": "Micro E-mini NASDAQ (MNQ)", "futures": True},
    {"symbol": "ES=F", "name": "E-mini S&P 500 (ES)", "futures": True},
    {"symbol": "NQ=F", "name": "E-mini NASDAQ (NQ)", "futures": True},
    {"symbol": "SPY", "name": "S&P 500 (SPY)"},
    {"symbol": "QQQ", "name": "NASDAQ 100 (QQQ)"},
    {"symbol": "DIA", "name": "Dow Jones (DIA)"},
    {"symbol": "IWM", "name": "Russell 2000 (IWM)"},
    {"symbol": "VIX", "name": "VIX Volatility"},
]

SECTOR_ETFS: List[Dict[str, str]] = [
    {"symbol": "XLK", "name": "Technology"},
    {"symbol": "XLF", "name": "Financials"},
    {"symbol": "XLV", "name": "Healthcare"},
    {"symbol": "XLE", "name": "Energy"},
    {"symbol": "XLI", "name": "Industrials"},
    {"symbol": "XLC", "name": "Communications"},
    {"symbol": "XLY", "name": "Consumer Discretionary"},
    {"symbol": "XLP", "name": "Consumer Staples"},
    {"symbol": "XLU", "name": "Utilities"},
    {"symbol": "XLRE", "name": "Real Estate"},
    {"symbol": "XLB", "name": "Materials"},
]

GLOBAL_INDEX_ETFS: List[Dict[str, str]] = [
    {"symbol": "EWU", "name": "FTSE 100 (UK)", "region": "London"},
    {"symbol": "EWJ", "name": "Nikkei 225 (Japan)", "region": "Tokyo"},
    {"symbol": "FXI", "name": "Hang Seng (HK)", "region": "Hong Kong"},
    {"symbol": "MCHI", "name": "Shanghai (China)", "region": "Shanghai"},
    {"symbol": "EWG", "name": "DAX (Germany)", "region": "Frankfurt"},
    {"symbol": "EFA", "name": "Intl Developed", "region": "Global"},
]

COMMODITY_ETFS: List[Dict[str, str]] = [
    {"symbol": "GLD", "name": "Gold", "unit": "oz"},
    {"symbol": "USO", "name": "Crude Oil", "unit": "bbl"},
    {"symbol": "UNG", "name": "Natural Gas", "unit": "mmBtu"},
    {"symbol": "SLV", "name": "Silver", "unit": "oz"},
]

MOVER_SYMBOLS: List[str] = [
    "AAPL", "MSFT", "GOOGL", "AMZN", "NVDA", "META", "TSLA", "AMD", "NFLX", "CRM",
    "INTC", "PYPL", "COIN", "UBER", "ABNB", "PLTR", "SNAP", "ROKU", "SQ", "SHOP",
]

# Mini futures fall back to their ETF when the futures symbol has no quote
FUTURES_ETF_PROXIES: Dict[str, str] = {
    "MES=F": "SPY",
    "ES=F": "SPY",
    "MNQ=F": "QQQ",
    "NQ=F": "QQQ",
}


# ============================================
# ECONOMIC EVENT CATEGORIES (first match wins)
# ============================================

EVENT_CATEGORY_KEYWORDS: List[tuple] = [
    ("Employment", ("non-farm", "nfp", "unemployment")),
    ("Inflation", ("cpi", "ppi", "inflation")),
    ("Growth", ("gdp",)),
    ("Fed", ("fomc", "fed", "interest rate", "federal")),
    ("Consumer", ("retail", "consumer", "sales")),
    ("Housing", ("housing", "starts", "building")),
    ("Employment", ("jobless", "claims")),
]
DEFAULT_EVENT_CATEGORY = "Economic"
