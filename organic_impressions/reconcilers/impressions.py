"""Estimate daily organic impressions from daily rank and weekly volume."""

import logging
import math
from dataclasses import dataclass, field
from typing import Any

from gspread.utils import rowcol_to_a1

from ..models import ImpressionRow
from ..parsers import _parse_int, normalize_date, parse_rank
from ..sheets.table import ColumnarTimeTable


logger = logging.getLogger(__name__)

IMPRESSIONS_CORNER = "Keywords/Dates"
TOTAL_HEADER = "Total"

# Share of a keyword's searches that see the listing, by organic rank.
# (first rank, last rank, multiplier); anything else is 0.
RANK_MULTIPLIERS = [
    (1, 1, 0.8),
    (2, 2, 0.7),
    (3, 6, 0.6),
    (7, 7, 0.4),
    (8, 10, 0.3),
    (11, 13, 0.09),
    (14, 18, 0.07),
    (19, 23, 0.05),
    (24, 28, 0.03),
    (29, 33, 0.01),
    (34, 38, 0.007),
    (39, 43, 0.005),
    (44, 48, 0.003),
    (49, 100, 0.001),
]


def rank_multiplier(rank: Any) -> float:
    """Click-through multiplier for an organic rank; 0 when unranked."""
    rank = parse_rank(rank)
    if rank is None:
        return 0.0
    for first, last, multiplier in RANK_MULTIPLIERS:
        if first <= rank <= last:
            return multiplier
    return 0.0


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class VolumeWeek:
    """One Keyword Volume column as an ISO date interval."""
    start: str
    end: str
    column: int

    def contains(self, day: str) -> bool:
        return self.start <= day <= self.end


def volume_weeks(volume_table: ColumnarTimeTable) -> list[VolumeWeek]:
    """Week intervals of the volume table; unparseable columns are skipped."""
    weeks = []
    for col, key in enumerate(volume_table.column_keys):
        start = normalize_date(key[0])
        end = normalize_date(key[-1])
        if start and end:
            weeks.append(VolumeWeek(start=start, end=end, column=col))
    return weeks


def find_week(weeks: list[VolumeWeek], day: str) -> VolumeWeek | None:
    """The week whose [start, end] contains ``day`` (ISO ``yyyy-mm-dd``)."""
    for week in weeks:
        if week.contains(day):
            return week
    return None


@dataclass
class ImpressionReport:
    """Organic Impressions table, recomputed in full on every run."""
    dates: list[str] = field(default_factory=list)
    rows: list[ImpressionRow] = field(default_factory=list)

    def to_values(self) -> list[list[Any]]:
        """Sheet grid with a live SUM formula in each row's Total cell."""
        values: list[list[Any]] = [[IMPRESSIONS_CORNER, *self.dates, TOTAL_HEADER]]
        for i, row in enumerate(self.rows):
            sheet_row = i + 2
            values.append(row.to_row(self.dates) + [self.total_formula(sheet_row)])
        return values

    def total_formula(self, sheet_row: int) -> str:
        if not self.dates:
            return "=0"
        first = rowcol_to_a1(sheet_row, 2)
        last = rowcol_to_a1(sheet_row, len(self.dates) + 1)
        return f"=SUM({first}:{last})"


class ImpressionEstimator:
    """Join Rank by Day against Keyword Volume.

    Each (keyword, date) cell is weekly volume / 7 times the rank
    multiplier, using the volume week that contains the date. Dates after
    the newest volume week are left out of the report.
    """

    def estimate(
        self,
        rank_table: ColumnarTimeTable,
        volume_table: ColumnarTimeTable,
    ) -> ImpressionReport:
        weeks = volume_weeks(volume_table)
        if not weeks:
            logger.warning("No valid volume weeks found")
            return ImpressionReport()

        latest_end = max(w.end for w in weeks)
        logger.info("Most recent volume week ends %s", latest_end)

        date_columns = []
        for col, key in enumerate(rank_table.column_keys):
            day = normalize_date(key[0])
            if day and day <= latest_end:
                date_columns.append((col, day))

        report = ImpressionReport(dates=[day for _, day in date_columns])

        for row_index, keyword in enumerate(rank_table.labels):
            volume_row = volume_table.find_row(keyword)
            impressions: dict[str, Any] = {}

            for col, day in date_columns:
                week = find_week(weeks, day)
                if week is None:
                    impressions[day] = ""
                    continue

                multiplier = rank_multiplier(rank_table.get(row_index, col))
                volume = 0
                if volume_row is not None:
                    volume = _parse_int(volume_table.get(volume_row, week.column))
                impressions[day] = round_half_up(volume / 7 * multiplier)

            report.rows.append(ImpressionRow(keyword=keyword, impressions=impressions))

        logger.info(
            "Estimated impressions for %d keywords over %d days",
            len(report.rows), len(report.dates),
        )
        return report
