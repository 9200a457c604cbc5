"""Configuration loader for the Organic Impressions Estimator."""

import logging
import sys
from dataclasses import dataclass, field

from decouple import config


@dataclass
class JungleScoutConfig:
    """Jungle Scout API configuration."""
    api_key_name: str
    api_key: str
    base_url: str = "https://developer.junglescout.com/api"
    timeout: int = 30

    @property
    def authorization(self) -> str:
        """Value of the Authorization header (``name:key``)."""
        return f"{self.api_key_name}:{self.api_key}"


@dataclass
class SheetsConfig:
    """Google Sheets configuration."""
    spreadsheet_id: str
    master_tab_name: str
    credentials_path: str


@dataclass
class Limits:
    """Fetch and report limits."""
    max_keywords: int = 2000
    history_days: int = 120
    rank_recency_days: int = 7
    chart_top_keywords: int = 6
    keyword_chart_count: int = 20
    page_size: int = 100


@dataclass
class AppConfig:
    """Application configuration."""
    junglescout: JungleScoutConfig
    sheets: SheetsConfig
    limits: Limits = field(default_factory=Limits)
    log_level: str = "INFO"


def load_config() -> AppConfig:
    """Load configuration from environment variables."""
    return AppConfig(
        junglescout=JungleScoutConfig(
            api_key_name=config("JUNGLESCOUT_API_KEY_NAME"),
            api_key=config("JUNGLESCOUT_API_KEY"),
            base_url=config(
                "JUNGLESCOUT_BASE_URL",
                default="https://developer.junglescout.com/api",
            ),
            timeout=config("JUNGLESCOUT_TIMEOUT", default=30, cast=int),
        ),
        sheets=SheetsConfig(
            spreadsheet_id=config("SPREADSHEET_ID"),
            master_tab_name=config("MASTER_TAB_NAME", default="ASINs"),
            credentials_path=config(
                "GOOGLE_CREDENTIALS_PATH",
                default="google-credentials.json"
            ),
        ),
        limits=Limits(
            max_keywords=config("MAX_KEYWORDS", default=2000, cast=int),
            history_days=config("HISTORY_DAYS", default=120, cast=int),
            rank_recency_days=config("RANK_RECENCY_DAYS", default=7, cast=int),
            chart_top_keywords=config("CHART_TOP_KEYWORDS", default=6, cast=int),
            keyword_chart_count=config("KEYWORD_CHART_COUNT", default=20, cast=int),
            page_size=config("PAGE_SIZE", default=100, cast=int),
        ),
        log_level=config("LOG_LEVEL", default="INFO"),
    )


def configure_logging(level: str = "INFO") -> None:
    """Send log records to stdout."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
