"""Configuration settings for the dashboard."""

from dataclasses import dataclass, field
from pathlib import Path
import os

from dotenv import load_dotenv


load_dotenv()


DEFAULT_BASE_URL = "https://api.coingecko.com/api/v3"
API_KEY_HEADER = "x-cg-demo-api-key"
VS_CURRENCY = "usd"

# Free tier serves at most 20 pages of the markets listing (1000 coins)
MAX_PAGE = 20
COINS_PER_PAGE = 50
WATCHLIST_PAGE_SIZE = 250

# Chart endpoint is the most rate limited one upstream
CHART_PRE_DELAY_MS = 1000

# Look-back windows offered by the chart, in days
CHART_RANGES: dict[str, str] = {
    "1": "24H",
    "7": "7D",
    "30": "30D",
    "90": "90D",
}
FALLBACK_RANGE = "7"

WATCHLIST_KEY = "crypto-watchlist"


@dataclass(frozen=True)
class RetryPolicy:
    """Retry and backoff timings for upstream requests."""

    max_attempts: int = 3
    backoff_ms: int = 2000
    rate_limit_wait_ms: int = 5000

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.backoff_ms < 0 or self.rate_limit_wait_ms < 0:
            raise ValueError("Wait times must not be negative")

    def backoff_before(self, attempt: int) -> float:
        """Seconds to wait before a 1-based attempt number (0 for the first)."""
        return self.backoff_ms * (attempt - 1) / 1000

    @property
    def rate_limit_wait(self) -> float:
        return self.rate_limit_wait_ms / 1000


@dataclass
class Settings:
    """Application settings."""

    coingecko_api_key: str = field(
        default_factory=lambda: os.getenv("COINGECKO_API_KEY", "")
    )
    base_url: str = field(
        default_factory=lambda: os.getenv("COINGECKO_BASE_URL", DEFAULT_BASE_URL)
    )
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    cache_dir: Path = field(
        default_factory=lambda: Path(__file__).parent.parent.parent / "cache"
    )
    db_path: Path = field(init=False)

    def __post_init__(self) -> None:
        self.base_url = self.base_url.rstrip("/")
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.db_path = self.cache_dir / "local_storage.db"

    def validate(self) -> None:
        """Validate required settings."""
        if not self.coingecko_api_key:
            raise ValueError(
                "COINGECKO_API_KEY not set. Get a demo key at: "
                "https://www.coingecko.com/en/api/pricing"
            )

    def has_api_key(self) -> bool:
        """Check if a CoinGecko API key is configured."""
        return bool(self.coingecko_api_key)
