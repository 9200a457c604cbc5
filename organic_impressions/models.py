"""Core data models for the Organic Impressions Estimator."""

from dataclasses import dataclass, field
from datetime import date
from typing import Any


@dataclass
class TrackerSettings:
    """Per-run settings read from the ASINs tab."""
    primary_asin: str
    competitor_asins: list[str] = field(default_factory=list)
    marketplace: str = "us"
    min_monthly_search_volume: int = 1
    ranked_keywords_only: bool = False

    @property
    def asins(self) -> list[str]:
        """Primary ASIN followed by competitors."""
        return [self.primary_asin, *self.competitor_asins]


@dataclass
class RankObservation:
    """One keyword ranking snapshot for the primary ASIN."""
    asin: str
    keyword: str
    date: date

    # Ranks (None = unranked)
    organic_rank: int | None = None
    sponsored_rank: int | None = None
    overall_rank: int | None = None

    # Bids and volume
    ppc_bid_exact: float | None = None
    ppc_bid_broad: float | None = None
    exact_volume_30d: int | None = None

    # Organic rank per competitor ASIN, same order as the tracker settings
    competitor_ranks: list[int | None] = field(default_factory=list)

    @property
    def date_key(self) -> str:
        return self.date.isoformat()


@dataclass(frozen=True)
class WeeklyVolume:
    """Estimated exact search volume for one keyword-week."""
    week_start: date
    week_end: date
    exact_search_volume: int = 0

    @property
    def key(self) -> tuple[str, str]:
        """Column key used by the Keyword Volume tab."""
        return (self.week_start.isoformat(), self.week_end.isoformat())


@dataclass
class ImpressionRow:
    """Daily organic impression estimates for one keyword.

    Cells hold an int, or "" when no volume week covers the date.
    """
    keyword: str
    impressions: dict[str, Any] = field(default_factory=dict)

    def to_row(self, dates: list[str]) -> list[Any]:
        """Convert to a row for Google Sheets (without the total cell)."""
        return [self.keyword] + [self.impressions.get(d, "") for d in dates]
