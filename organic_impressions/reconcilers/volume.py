"""Incremental merge of weekly search volume history."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date

from ..models import WeeklyVolume
from ..parsers import parse_date
from ..sheets.table import ColumnarTimeTable, count_period_gap


logger = logging.getLogger(__name__)

HistorySource = Callable[[str, str, date, date], list[WeeklyVolume]]

VOLUME_CORNER = ["Week Starting", "Week Ending"]
WEEK_DAYS = 7


@dataclass
class VolumeReconcileResult:
    """Summary of one volume reconciliation run."""
    columns_added: int = 0
    source_latest_end: date | None = None
    new_keywords: list[str] = field(default_factory=list)
    updated_keywords: list[str] = field(default_factory=list)
    failed_keywords: list[str] = field(default_factory=list)


class HistoricalVolumeReconciler:
    """Keep the Keyword Volume table current without refetching known weeks.

    Week columns are ordered newest first after the keyword column. Each run
    adds only the weeks the source has published since the table's newest
    column; existing keywords are fetched for those weeks only, new keywords
    for the full requested range.
    """

    def __init__(self, history_source: HistorySource, marketplace: str):
        self.history_source = history_source
        self.marketplace = marketplace

    def reconcile(
        self,
        table: ColumnarTimeTable,
        keywords: list[str],
        start: date,
        end: date,
    ) -> VolumeReconcileResult:
        """Merge volume history for ``keywords`` into ``table``.

        Args:
            table: Keyword Volume table (two header rows: week start, week end)
            keywords: Current keyword universe (from Rank by Day)
            start: Start of the full history range
            end: End of the history range (usually today)

        Returns:
            VolumeReconcileResult describing what changed
        """
        result = VolumeReconcileResult()
        if not keywords:
            logger.warning("No keywords to fetch volume for")
            return result

        existing_end = _key_end(table.latest_key)
        new_keywords, existing_keywords = partition_keywords(keywords, table)
        logger.info(
            "Found %d new keywords and %d existing keywords",
            len(new_keywords), len(existing_keywords),
        )

        sample = self._sample_history(keywords, start, end)
        if sample:
            result.source_latest_end = max(w.week_end for w in sample)
            logger.info("Most recent source volume data: %s", result.source_latest_end)
        else:
            logger.warning("No source data available to find the most recent week")

        diff_weeks = 0
        if existing_end is None:
            logger.info("No existing weeks. Adding all week headers.")
            result.columns_added = table.insert_period_columns(
                [w.key for w in _newest_first(sample)]
            )
        elif result.source_latest_end and existing_end < result.source_latest_end:
            diff_weeks = count_period_gap(existing_end, result.source_latest_end, WEEK_DAYS)
            logger.info("Source has newer data. Inserting %d new columns.", diff_weeks)
            result.columns_added = table.insert_period_columns(
                [w.key for w in _newest_first(sample)[:diff_weeks]]
            )
        else:
            logger.info("No new columns needed; no newer source data")

        if diff_weeks > 0 and existing_keywords:
            logger.info(
                "Fetching the newest %d weeks for %d existing keywords",
                diff_weeks, len(existing_keywords),
            )
            for keyword in existing_keywords:
                periods = self.history_source(keyword, self.marketplace, existing_end, end)
                if self._write_periods(table, keyword, trim_to_newest(periods, diff_weeks)):
                    result.updated_keywords.append(keyword)
                else:
                    result.failed_keywords.append(keyword)

        if new_keywords:
            logger.info("Fetching full history for %d new keywords", len(new_keywords))
            for keyword in new_keywords:
                table.find_or_append_row(keyword)
                periods = self.history_source(keyword, self.marketplace, start, end)
                if self._write_periods(table, keyword, periods):
                    result.new_keywords.append(keyword)
                else:
                    result.failed_keywords.append(keyword)

        return result

    def _sample_history(
        self, keywords: list[str], start: date, end: date
    ) -> list[WeeklyVolume]:
        """History of the first keyword the source has data for."""
        for keyword in keywords:
            periods = self.history_source(keyword, self.marketplace, start, end)
            if periods:
                logger.info("Sampled source weeks from %r", keyword)
                return periods
        return []

    def _write_periods(
        self,
        table: ColumnarTimeTable,
        keyword: str,
        periods: list[WeeklyVolume],
    ) -> bool:
        """Place each period's volume under its week column.

        Returns:
            False when the source returned nothing for the keyword or none
            of its weeks has a column
        """
        if not periods:
            logger.warning("No historical data found for keyword: %r", keyword)
            return False

        row = table.find_or_append_row(keyword)
        written = 0
        for period in periods:
            col = table.find_column(period.key)
            if col is None:
                logger.debug("No column for week %s of %r", period.key, keyword)
                continue
            table.set(row, col, period.exact_search_volume)
            written += 1

        if not written:
            logger.warning("No week columns matched the history of %r", keyword)
            return False
        return True


def partition_keywords(
    keywords: list[str], table: ColumnarTimeTable
) -> tuple[list[str], list[str]]:
    """Split keywords into (new, existing) against the table rows.

    A row without any volume counts as new so it gets full history again.
    Order is preserved and duplicates are dropped.
    """
    new, existing = [], []
    seen: set[str] = set()
    for keyword in keywords:
        if not keyword or keyword in seen:
            continue
        seen.add(keyword)
        if table.has_data(keyword):
            existing.append(keyword)
        else:
            new.append(keyword)
    return new, existing


def trim_to_newest(periods: list[WeeklyVolume], count: int) -> list[WeeklyVolume]:
    """Keep the ``count`` periods with the latest end dates, oldest first."""
    if count <= 0:
        return []
    return sorted(_newest_first(periods)[:count], key=lambda w: w.week_end)


def _newest_first(periods: list[WeeklyVolume]) -> list[WeeklyVolume]:
    return sorted(periods, key=lambda w: w.week_end, reverse=True)


def _key_end(key: tuple[str, ...] | None) -> date | None:
    if not key:
        return None
    return parse_date(key[-1])
