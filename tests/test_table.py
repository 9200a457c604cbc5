"""Tests for the in-memory columnar time table."""

from datetime import date

import pytest

from organic_impressions.sheets.table import ColumnarTimeTable, count_period_gap


def _make_volume_table() -> ColumnarTimeTable:
    return ColumnarTimeTable.from_values(
        [
            ["Week Starting", "2024-01-01"],
            ["Week Ending", "2024-01-07"],
            ["garlic press", 700],
            ["garlic mincer", ""],
        ],
        header_rows=2,
    )


class TestFromValues:
    def test_loads_labels_and_keys(self):
        table = ColumnarTimeTable.from_values(
            [["Keyword", "2024-01-01", "2024-01-02"], ["a", 5, ""], ["b", "", 7]]
        )

        assert table.labels == ["a", "b"]
        assert table.column_keys == [("2024-01-01",), ("2024-01-02",)]
        assert table.get(1, 1) == 7

    def test_normalizes_date_headers(self):
        table = ColumnarTimeTable.from_values([["Keyword", "1/2/2024"], ["a", 3]])

        assert table.column_keys == [("2024-01-02",)]
        assert table.find_column("2024-01-02") == 0

    def test_drops_blank_and_duplicate_labels(self):
        table = ColumnarTimeTable.from_values(
            [["Keyword", "2024-01-01"], ["a", 1], ["", 2], ["a", 3], ["b", 4]]
        )

        assert table.labels == ["a", "b"]
        assert table.get(0, 0) == 1

    def test_pads_short_rows(self):
        table = ColumnarTimeTable.from_values(
            [["Keyword", "2024-01-01", "2024-01-02"], ["a"]]
        )

        assert table.row_values(0) == ["", ""]

    def test_keeps_default_corner_when_blank(self):
        table = ColumnarTimeTable.from_values([["", "2024-01-01"]], corner=["Keyword"])
        assert table.to_values()[0][0] == "Keyword"

    def test_empty_values(self):
        table = ColumnarTimeTable.from_values(None, header_rows=2, corner=["A", "B"])

        assert len(table) == 0
        assert table.latest_key is None
        assert table.to_values() == [["A"], ["B"]]

    def test_two_header_rows(self):
        table = _make_volume_table()

        assert table.column_keys == [("2024-01-01", "2024-01-07")]
        assert table.corner == ["Week Starting", "Week Ending"]
        assert table.latest_key == ("2024-01-01", "2024-01-07")


class TestRows:
    def test_find_or_append_row_existing(self):
        table = _make_volume_table()
        assert table.find_or_append_row("garlic mincer") == 1
        assert len(table) == 2

    def test_find_or_append_row_new(self):
        table = _make_volume_table()

        index = table.find_or_append_row("garlic crusher")

        assert index == 2
        assert table.labels[-1] == "garlic crusher"
        assert table.row_values(index) == [""]

    def test_exact_match(self):
        table = _make_volume_table()
        assert table.find_row("Garlic Press") is None
        assert table.find_row("garlic press ") is None

    def test_has_data(self):
        table = _make_volume_table()
        assert table.has_data("garlic press") is True
        assert table.has_data("garlic mincer") is False
        assert table.has_data("missing") is False


class TestColumns:
    def test_find_or_append_column(self):
        table = ColumnarTimeTable.from_values([["Keyword", "2024-01-01"], ["a", 5]])

        col = table.find_or_append_column("2024-01-02")

        assert col == 1
        assert table.column_keys == [("2024-01-01",), ("2024-01-02",)]
        assert table.row_values(0) == [5, ""]
        assert table.find_or_append_column("2024-01-02") == 1

    def test_insert_period_columns_newest_first(self):
        table = _make_volume_table()

        added = table.insert_period_columns([
            ("2024-01-15", "2024-01-21"),
            ("2024-01-08", "2024-01-14"),
        ])

        assert added == 2
        assert table.column_keys == [
            ("2024-01-15", "2024-01-21"),
            ("2024-01-08", "2024-01-14"),
            ("2024-01-01", "2024-01-07"),
        ]
        assert table.latest_key == ("2024-01-15", "2024-01-21")
        assert table.row_values(0) == ["", "", 700]

    def test_insert_skips_existing(self):
        table = _make_volume_table()

        assert table.insert_period_columns([("2024-01-01", "2024-01-07")]) == 0
        assert len(table.column_keys) == 1

    def test_key_must_match_header_rows(self):
        table = _make_volume_table()
        with pytest.raises(ValueError):
            table.insert_period_columns([("2024-01-08",)])

    def test_to_values(self):
        table = _make_volume_table()
        table.insert_period_columns([("2024-01-08", "2024-01-14")])
        table.set(1, 0, 300)

        assert table.to_values() == [
            ["Week Starting", "2024-01-08", "2024-01-01"],
            ["Week Ending", "2024-01-14", "2024-01-07"],
            ["garlic press", "", 700],
            ["garlic mincer", 300, ""],
        ]


class TestCountPeriodGap:
    def test_two_weeks_behind(self):
        assert count_period_gap(date(2024, 1, 7), date(2024, 1, 21)) == 2

    def test_partial_week_counts(self):
        assert count_period_gap(date(2024, 1, 7), date(2024, 1, 10)) == 1

    def test_not_behind(self):
        assert count_period_gap(date(2024, 1, 21), date(2024, 1, 21)) == 0
        assert count_period_gap(date(2024, 1, 21), date(2024, 1, 7)) == 0

    def test_daily_periods(self):
        assert count_period_gap(date(2024, 1, 1), date(2024, 1, 4), period_days=1) == 3
