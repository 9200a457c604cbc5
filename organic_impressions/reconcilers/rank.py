"""Merge ranking snapshots into the raw log and the Rank by Day pivot."""

import logging
from datetime import date, timedelta
from typing import Any

from ..junglescout.models import KeywordAttributes
from ..models import RankObservation
from ..parsers import observation_from_attributes, parse_date
from ..sheets.formatters import blank_if_empty
from ..sheets.table import ColumnarTimeTable


logger = logging.getLogger(__name__)

RAW_LOG_HEADERS = [
    "ASIN",
    "Keyword",
    "Date",
    "Organic Rank",
    "Sponsored Rank",
    "Overall Rank",
    "Exact Bid",
    "Broad Bid",
    "30-Day Volume",
]

# Raw log column positions
KEYWORD_COL = 1
DATE_COL = 2

RANK_BY_DAY_CORNER = "Keyword"


class RankReconciler:
    """Dedup and merge rank observations for the primary ASIN.

    An observation is accepted only when its date is newer than every logged
    observation for the same keyword and falls within the recency window.
    Rows logged under any ASIN count.
    """

    def __init__(
        self,
        primary_asin: str,
        competitor_asins: list[str] | None = None,
        recency_days: int = 7,
    ):
        self.primary_asin = primary_asin
        self.competitor_asins = list(competitor_asins or [])
        self.recency_days = recency_days

    def observations_from_records(
        self,
        records: list[KeywordAttributes],
        observed_on: date | None = None,
    ) -> list[RankObservation]:
        """Turn feed records into observations for the primary ASIN."""
        observations = []
        for attrs in records:
            obs = observation_from_attributes(
                attrs, self.primary_asin, self.competitor_asins, observed_on
            )
            if obs is None:
                logger.warning("Skipping %r: no updated_at date", attrs.name)
                continue
            observations.append(obs)
        return observations

    def accept(
        self,
        observations: list[RankObservation],
        raw_log_values: list[list[Any]] | None,
        today: date,
    ) -> list[RankObservation]:
        """Filter observations down to those the raw log doesn't have yet.

        Args:
            observations: Freshly fetched observations
            raw_log_values: Existing Raw Rank Data grid (header row first)
            today: Reference day for the recency window

        Returns:
            Accepted observations, in input order
        """
        latest = latest_logged_dates(raw_log_values)
        cutoff = today - timedelta(days=self.recency_days)
        accepted = []

        for obs in observations:
            newest = latest.get(obs.keyword)

            if newest is not None and obs.date <= newest:
                logger.info(
                    "Skipping %r on %s: already logged through %s",
                    obs.keyword, obs.date_key, newest.isoformat(),
                )
                continue

            if obs.date < cutoff:
                logger.info(
                    "Skipping %r on %s: older than %d days",
                    obs.keyword, obs.date_key, self.recency_days,
                )
                continue

            latest[obs.keyword] = obs.date
            accepted.append(obs)

        logger.info("Accepted %d of %d observations", len(accepted), len(observations))
        return accepted

    def raw_log_header(self, existing_header: list[Any] | None = None) -> list[str]:
        """Fixed headers plus any competitor ASINs not yet in the header."""
        header = [str(h) for h in existing_header or []]
        if header[: len(RAW_LOG_HEADERS)] != RAW_LOG_HEADERS:
            header = list(RAW_LOG_HEADERS)
        for asin in self.competitor_asins:
            if asin not in header:
                header.append(asin)
        return header

    def raw_log_row(
        self, obs: RankObservation, header: list[str] | None = None
    ) -> list[Any]:
        """One Raw Rank Data row; unranked values are blank.

        Competitor ranks follow the competitor ASIN columns of ``header``
        (defaults to ``raw_log_header()``).
        """
        header = header or self.raw_log_header()
        ranks = dict(zip(self.competitor_asins, obs.competitor_ranks))
        row = [
            obs.asin,
            obs.keyword,
            obs.date_key,
            blank_if_empty(obs.organic_rank),
            blank_if_empty(obs.sponsored_rank),
            blank_if_empty(obs.overall_rank),
            blank_if_empty(obs.ppc_bid_exact),
            blank_if_empty(obs.ppc_bid_broad),
            blank_if_empty(obs.exact_volume_30d),
        ]
        row.extend(
            blank_if_empty(ranks.get(asin)) for asin in header[len(RAW_LOG_HEADERS):]
        )
        return row

    def merge_pivot(
        self,
        table: ColumnarTimeTable,
        observations: list[RankObservation],
    ) -> int:
        """Write organic ranks into the Rank by Day table.

        New dates are appended as columns in first-seen order and new
        keywords as rows at the end. Observations without an organic rank
        leave the table untouched.

        Returns:
            Number of cells set
        """
        updated = 0
        for obs in observations:
            if not obs.organic_rank:
                logger.info(
                    "Skipping %r on %s: no organic rank", obs.keyword, obs.date_key
                )
                continue

            col = table.find_or_append_column(obs.date_key)
            row = table.find_or_append_row(obs.keyword)
            table.set(row, col, obs.organic_rank)
            updated += 1

        return updated


def latest_logged_dates(
    raw_log_values: list[list[Any]] | None,
) -> dict[str, date]:
    """Newest logged date per keyword in the raw log grid."""
    latest: dict[str, date] = {}
    for row in (raw_log_values or [])[1:]:
        if len(row) <= DATE_COL:
            continue
        logged = parse_date(row[DATE_COL])
        if logged is None:
            continue
        key = str(row[KEYWORD_COL])
        if key not in latest or logged > latest[key]:
            latest[key] = logged
    return latest
