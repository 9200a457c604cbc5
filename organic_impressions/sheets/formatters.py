"""Output formatting utilities for Google Sheets."""

import re
from typing import Any

from ..junglescout.models import KeywordAttributes


_WORD = re.compile(r"\w\S*")


def blank_if_empty(value: Any) -> Any:
    """Return "" for None and zero, the value otherwise."""
    if value is None or value == 0:
        return ""
    return value


def to_title_case(text: str) -> str:
    """Capitalize the first letter of each word, lowercasing the rest."""
    return _WORD.sub(lambda m: m.group(0)[0].upper() + m.group(0)[1:].lower(), text)


def keyword_list_headers() -> list[str]:
    """Headers of the keyword block on the ASINs tab."""
    return [
        '=CONCATENATE("Keywords (", COUNTA(D7:D), ")")',
        "Organic Rank",
        "Avg. Comp. Rank",
        "Paid Rank",
        "Avg. Comp. Paid Rank",
        "Exact Searches",
        "Broad Searches",
    ]


def format_keyword_row(attrs: KeywordAttributes) -> list[Any]:
    """Format a keyword record for the ASINs tab keyword block."""
    return [
        attrs.name,
        blank_if_empty(attrs.organic_rank),
        blank_if_empty(attrs.avg_competitor_organic_rank),
        blank_if_empty(attrs.sponsored_rank),
        blank_if_empty(attrs.avg_competitor_sponsored_rank),
        attrs.monthly_search_volume_exact if attrs.monthly_search_volume_exact is not None else "",
        blank_if_empty(attrs.monthly_search_volume_broad),
    ]
