"""Tests for incremental weekly volume reconciliation."""

import random
from datetime import date, timedelta
from unittest.mock import MagicMock

from organic_impressions.models import WeeklyVolume
from organic_impressions.reconcilers.volume import (
    VOLUME_CORNER,
    HistoricalVolumeReconciler,
    partition_keywords,
    trim_to_newest,
)
from organic_impressions.sheets.table import ColumnarTimeTable


START = date(2023, 9, 1)
END = date(2024, 1, 22)


def _make_week(start: date, volume: int = 100) -> WeeklyVolume:
    return WeeklyVolume(week_start=start, week_end=start + timedelta(days=6), exact_search_volume=volume)


def _make_weeks(first: date, count: int, volume: int = 100) -> list[WeeklyVolume]:
    return [_make_week(first + timedelta(weeks=i), volume + i) for i in range(count)]


def _make_source(history: dict[str, list[WeeklyVolume]]) -> MagicMock:
    return MagicMock(side_effect=lambda kw, marketplace, start, end: list(history.get(kw, [])))


def _make_table(values=None) -> ColumnarTimeTable:
    return ColumnarTimeTable.from_values(values, header_rows=2, corner=VOLUME_CORNER)


class TestTrimToNewest:
    def test_keeps_newest_in_ascending_order(self):
        weeks = _make_weeks(date(2024, 1, 1), 10)
        shuffled = list(weeks)
        random.Random(7).shuffle(shuffled)

        trimmed = trim_to_newest(shuffled, 3)

        assert trimmed == weeks[-3:]
        assert [w.week_end for w in trimmed] == sorted(w.week_end for w in trimmed)

    def test_zero(self):
        assert trim_to_newest(_make_weeks(date(2024, 1, 1), 3), 0) == []


class TestPartitionKeywords:
    def test_splits_new_and_existing(self):
        table = _make_table([
            ["Week Starting", "2024-01-01"],
            ["Week Ending", "2024-01-07"],
            ["a", 700],
            ["b", ""],
        ])

        new, existing = partition_keywords(["a", "b", "c", "a", ""], table)

        # "b" has a row but no data, so it gets the full history again
        assert new == ["b", "c"]
        assert existing == ["a"]


class TestEmptyTable:
    def test_inserts_all_weeks_and_fetches_full_history(self):
        weeks = _make_weeks(date(2024, 1, 1), 3)
        source = _make_source({"a": weeks, "b": weeks})
        table = _make_table()

        result = HistoricalVolumeReconciler(source, "us").reconcile(
            table, ["a", "b"], START, END
        )

        assert result.columns_added == 3
        assert result.source_latest_end == date(2024, 1, 21)
        assert result.new_keywords == ["a", "b"]
        assert table.column_keys == [
            ("2024-01-15", "2024-01-21"),
            ("2024-01-08", "2024-01-14"),
            ("2024-01-01", "2024-01-07"),
        ]
        assert table.row_values(table.find_row("a")) == [102, 101, 100]
        # sample + one full fetch per keyword
        assert source.call_count == 3
        source.assert_any_call("b", "us", START, END)

    def test_samples_first_keyword_with_data(self):
        source = _make_source({"a": [], "b": _make_weeks(date(2024, 1, 1), 2)})
        table = _make_table()

        result = HistoricalVolumeReconciler(source, "us").reconcile(
            table, ["a", "b"], START, END
        )

        assert result.columns_added == 2
        assert result.source_latest_end == date(2024, 1, 14)
        assert table.has_data("b") is True
        assert result.new_keywords == ["b"]
        assert result.failed_keywords == ["a"]

    def test_no_keywords(self):
        source = MagicMock()

        result = HistoricalVolumeReconciler(source, "us").reconcile(
            _make_table(), [], START, END
        )

        assert result.columns_added == 0
        source.assert_not_called()


class TestBehindSource:
    def test_inserts_gap_columns_and_trims_existing(self):
        table = _make_table([
            ["Week Starting", "2024-01-01"],
            ["Week Ending", "2024-01-07"],
            ["a", 700],
        ])
        history = [
            _make_week(date(2024, 1, 1), 999),
            _make_week(date(2024, 1, 8), 800),
            _make_week(date(2024, 1, 15), 900),
        ]
        source = _make_source({"a": history, "b": history})

        result = HistoricalVolumeReconciler(source, "us").reconcile(
            table, ["a", "b"], START, END
        )

        assert result.columns_added == 2
        assert table.column_keys == [
            ("2024-01-15", "2024-01-21"),
            ("2024-01-08", "2024-01-14"),
            ("2024-01-01", "2024-01-07"),
        ]
        # Only the two newest weeks are written for the existing keyword
        assert table.row_values(table.find_row("a")) == [900, 800, 700]
        assert table.row_values(table.find_row("b")) == [900, 800, 999]
        assert result.updated_keywords == ["a"]
        assert result.new_keywords == ["b"]

        # Existing keywords are fetched from the table's newest week end
        source.assert_any_call("a", "us", date(2024, 1, 7), END)
        source.assert_any_call("b", "us", START, END)


class TestCurrentTable:
    def test_fetches_only_new_keywords(self):
        table = _make_table([
            ["Week Starting", "2024-01-15", "2024-01-08"],
            ["Week Ending", "2024-01-21", "2024-01-14"],
            ["a", 900, 800],
        ])
        weeks = _make_weeks(date(2024, 1, 8), 2)
        source = _make_source({"a": weeks, "c": weeks})

        result = HistoricalVolumeReconciler(source, "us").reconcile(
            table, ["a", "c"], START, END
        )

        assert result.columns_added == 0
        assert result.updated_keywords == []
        assert result.new_keywords == ["c"]
        assert table.row_values(table.find_row("a")) == [900, 800]
        assert table.row_values(table.find_row("c")) == [101, 100]
        # sample + "c"
        assert source.call_count == 2


class TestFailedKeyword:
    def test_blank_row_kept_and_reported(self):
        weeks = _make_weeks(date(2024, 1, 1), 2)
        source = _make_source({"a": weeks})
        table = _make_table()

        result = HistoricalVolumeReconciler(source, "us").reconcile(
            table, ["a", "b"], START, END
        )

        assert result.new_keywords == ["a"]
        assert result.failed_keywords == ["b"]
        assert table.find_row("b") is not None
        assert table.has_data("b") is False

    def test_failed_keyword_retried_next_run(self):
        weeks = _make_weeks(date(2024, 1, 1), 2)
        table = _make_table()
        HistoricalVolumeReconciler(_make_source({"a": weeks}), "us").reconcile(
            table, ["a", "b"], START, END
        )

        source = _make_source({"a": weeks, "b": weeks})
        result = HistoricalVolumeReconciler(source, "us").reconcile(
            table, ["a", "b"], START, END
        )

        assert result.new_keywords == ["b"]
        assert table.has_data("b") is True

    def test_history_without_matching_columns_fails(self):
        table = _make_table([
            ["Week Starting", "2024-01-15", "2024-01-08"],
            ["Week Ending", "2024-01-21", "2024-01-14"],
            ["a", 900, 800],
        ])
        source = _make_source({
            "a": _make_weeks(date(2024, 1, 8), 2),
            "c": _make_weeks(date(2023, 12, 18), 2),
        })

        result = HistoricalVolumeReconciler(source, "us").reconcile(
            table, ["a", "c"], START, END
        )

        assert result.new_keywords == []
        assert result.failed_keywords == ["c"]
        assert table.has_data("c") is False
