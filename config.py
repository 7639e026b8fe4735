"""
Market Pulse Dashboard - Configuration
"""
from pathlib import Path
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Paths
    BASE_DIR: Path = Path(__file__).parent
    DATA_DIR: Path = Field(default_factory=lambda: Path(__file__).parent / "data")
    LOG_DIR: Path = Field(default_factory=lambda: Path(__file__).parent / "logs")

    # Upstream market data (Finnhub)
    FINNHUB_API_KEY: str = Field(default="", description="Finnhub API token")
    FINNHUB_REST_URL: str = Field(default="https://finnhub.io/api/v1")
    FINNHUB_WS_URL: str = Field(default="wss://ws.finnhub.io")
    REQUEST_TIMEOUT_SECONDS: float = Field(default=10.0)

    # Logging
    LOG_LEVEL: str = Field(default="INFO")

    # Crawler
    CRAWLERS_ENABLE_SSL: bool = Field(default=True, description="Enable SSL verification for crawlers")
    SAVE_RAW_RESPONSES: bool = Field(default=False, description="Dump raw crawl results to DATA_DIR/raw")

    # Briefing
    MARKET_TIMEZONE: str = Field(default="America/New_York", description="Timezone that defines 'today'")

    # Trade relay
    WS_RECONNECT_SECONDS: float = Field(default=5.0)

    # API
    API_HOST: str = Field(default="0.0.0.0")
    API_PORT: int = Field(default=3000)
    CORS_ORIGINS: list[str] = Field(default_factory=lambda: ["*"])

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Global settings instance
settings = Settings()


def ensure_directories():
    """Ensure all required directories exist."""
    dirs = [
        settings.DATA_DIR,
        settings.DATA_DIR / "raw",
        settings.LOG_DIR,
    ]
    for dir_path in dirs:
        dir_path.mkdir(parents=True, exist_ok=True)
