"""Parsers for API attributes and sheet cell values."""

from datetime import date, datetime
from typing import Any

from .junglescout.models import KeywordAttributes
from .models import RankObservation, WeeklyVolume


# Formats the Sheets UI may render a date cell in
_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%Y/%m/%d", "%m/%d/%y")


def parse_keyword_attributes(item: dict[str, Any]) -> KeywordAttributes:
    """Parse one keywords_by_asin_query item (or its attributes)."""
    attrs = item.get("attributes", item) or {}

    competitor_ranks = {}
    for entry in attrs.get("competitor_organic_rank") or []:
        asin = str(entry.get("asin", "")).strip().upper()
        if asin:
            competitor_ranks[asin] = parse_rank(entry.get("organic_rank"))

    return KeywordAttributes(
        name=attrs.get("name", "") or "",
        organic_rank=parse_rank(attrs.get("organic_rank")),
        sponsored_rank=parse_rank(attrs.get("sponsored_rank")),
        overall_rank=parse_rank(attrs.get("overall_rank")),
        avg_competitor_organic_rank=_parse_float(attrs.get("avg_competitor_organic_rank")),
        avg_competitor_sponsored_rank=_parse_float(attrs.get("avg_competitor_sponsored_rank")),
        monthly_search_volume_exact=_parse_optional_int(attrs.get("monthly_search_volume_exact")),
        monthly_search_volume_broad=_parse_optional_int(attrs.get("monthly_search_volume_broad")),
        ppc_bid_exact=_parse_float(attrs.get("ppc_bid_exact")),
        ppc_bid_broad=_parse_float(attrs.get("ppc_bid_broad")),
        updated_at=parse_date(attrs.get("updated_at")),
        competitor_organic_ranks=competitor_ranks,
    )


def parse_weekly_volumes(items: list[dict[str, Any]]) -> list[WeeklyVolume]:
    """Parse historical_search_volume items, dropping undated ones."""
    volumes = []
    for item in items:
        attrs = item.get("attributes", item) or {}
        start = parse_date(attrs.get("estimate_start_date"))
        end = parse_date(attrs.get("estimate_end_date"))
        if start is None or end is None:
            continue
        volumes.append(
            WeeklyVolume(
                week_start=start,
                week_end=end,
                exact_search_volume=_parse_int(attrs.get("estimated_exact_search_volume")),
            )
        )
    return volumes


def observation_from_attributes(
    attrs: KeywordAttributes,
    asin: str,
    competitor_asins: list[str],
    observed_on: date | None = None,
) -> RankObservation | None:
    """Build a RankObservation; None when the record carries no date."""
    obs_date = attrs.updated_at or observed_on
    if obs_date is None:
        return None

    return RankObservation(
        asin=asin,
        keyword=attrs.name,
        date=obs_date,
        organic_rank=attrs.organic_rank,
        sponsored_rank=attrs.sponsored_rank,
        overall_rank=attrs.overall_rank,
        ppc_bid_exact=attrs.ppc_bid_exact,
        ppc_bid_broad=attrs.ppc_bid_broad,
        exact_volume_30d=attrs.monthly_search_volume_exact,
        competitor_ranks=[
            attrs.competitor_organic_ranks.get(c.upper()) for c in competitor_asins
        ],
    )


def parse_date(value: Any) -> date | None:
    """Parse a date, datetime, ISO timestamp or rendered sheet date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    # ISO timestamps such as 2024-01-05T13:22:10.000Z
    if len(text) >= 10 and text[4:5] == "-" and text[7:8] == "-":
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def normalize_date(value: Any) -> str | None:
    """Normalize a date-like value to ``yyyy-mm-dd``."""
    parsed = parse_date(value)
    return parsed.isoformat() if parsed else None


def parse_rank(value: Any) -> int | None:
    """Parse a rank; zero, blank and junk mean unranked."""
    rank = _parse_optional_int(value)
    if rank is None or rank <= 0:
        return None
    return rank


def _parse_optional_int(value: Any) -> int | None:
    """Parse value to integer, keeping None for missing values."""
    if value is None or value == "":
        return None
    return _parse_int(value)


def _parse_int(value: Any) -> int:
    """Parse value to integer."""
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    try:
        # Handle strings with thousands separators
        cleaned = str(value).replace(",", "").strip()
        return int(float(cleaned))
    except (ValueError, TypeError):
        return 0


def _parse_float(value: Any) -> float | None:
    """Parse value to float."""
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        # Handle strings with commas or currency symbols
        cleaned = str(value).replace(",", "").replace("$", "").strip()
        return float(cleaned)
    except (ValueError, TypeError):
        return None
