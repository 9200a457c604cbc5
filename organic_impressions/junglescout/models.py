"""Data models for Jungle Scout API responses."""

from dataclasses import dataclass, field
from datetime import date
from typing import Any


@dataclass
class KeywordAttributes:
    """Attributes of one keywords_by_asin_query record."""

    name: str

    # Ranks (None = unranked)
    organic_rank: int | None = None
    sponsored_rank: int | None = None
    overall_rank: int | None = None
    avg_competitor_organic_rank: float | None = None
    avg_competitor_sponsored_rank: float | None = None

    # Volume
    monthly_search_volume_exact: int | None = None
    monthly_search_volume_broad: int | None = None

    # Bids
    ppc_bid_exact: float | None = None
    ppc_bid_broad: float | None = None

    # Metadata
    updated_at: date | None = None
    competitor_organic_ranks: dict[str, int | None] = field(default_factory=dict)


@dataclass
class APIResponse:
    """Generic Jungle Scout response wrapper."""

    success: bool
    data: Any | None = None
    error_code: str | None = None
    error_message: str | None = None

    @classmethod
    def from_success(cls, data: Any) -> "APIResponse":
        """Create successful response."""
        return cls(success=True, data=data)

    @classmethod
    def from_error(cls, code: str, message: str) -> "APIResponse":
        """Create error response."""
        return cls(success=False, error_code=code, error_message=message)
