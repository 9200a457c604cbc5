"""Tests for impressions and keyword volume chart data."""

from organic_impressions.reconcilers.charts import (
    build_chart_data,
    build_keyword_chart_data,
)
from organic_impressions.sheets.formatters import to_title_case


def _make_report_values() -> list[list]:
    return [
        ["Keywords/Dates", "2024-01-01", "2024-01-02", "Total"],
        ["garlic press", 100, 200, "300"],
        ["garlic mincer", 10, 20, "30"],
        ["GARLIC crusher", 500, "1,000", "1,500"],
        ["garlic tool", 1, 2, "3"],
    ]


class TestBuildChartData:
    def test_top_keywords_and_others(self):
        chart = build_chart_data(_make_report_values(), top_n=2)

        assert chart == [
            ["", "Garlic Crusher", "Garlic Press", "Others"],
            ["2024-01-01", 500, 100, 11],
            ["2024-01-02", 1000, 200, 22],
        ]

    def test_fewer_keywords_than_top_n(self):
        chart = build_chart_data(_make_report_values(), top_n=6)

        assert len(chart[0]) == 6
        assert chart[0][-1] == "Others"
        assert [row[-1] for row in chart[1:]] == [0, 0]

    def test_orders_by_total_column(self):
        # The Total cell is what the sheet reports, even if the day cells disagree
        values = [
            ["Keywords/Dates", "2024-01-01", "Total"],
            ["garlic press", 500, "5"],
            ["garlic mincer", 1, "900"],
        ]

        chart = build_chart_data(values, top_n=1)

        assert chart[0] == ["", "Garlic Mincer", "Others"]
        assert chart[1] == ["2024-01-01", 1, 500]

    def test_skips_blank_rows(self):
        values = _make_report_values() + [["", "", "", ""]]

        chart = build_chart_data(values, top_n=6)

        assert len(chart[0]) == 6

    def test_insufficient_data(self):
        assert build_chart_data([]) == []
        assert build_chart_data([["Keywords/Dates", "Total"]]) == []
        assert build_chart_data([["Keywords/Dates", "Total"], ["a", "=0"]]) == []


def _make_volume_values() -> list[list]:
    return [
        ["Week Starting", "2024-01-15", "2024-01-08", "2024-01-01"],
        ["Week Ending", "2024-01-21", "2024-01-14", "2024-01-07"],
        ["garlic press", "900", "800", "1,700"],
        ["", "", "", ""],
        ["GARLIC mincer", 30, "", 10],
        ["garlic tool", 3, 2, 1],
    ]


class TestBuildKeywordChartData:
    def test_oldest_week_first_with_titles(self):
        chart = build_keyword_chart_data(_make_volume_values())

        assert chart == [
            ["Week Ending", "Garlic Press", "Garlic Mincer", "Garlic Tool"],
            ["2024-01-07", 1700, 10, 1],
            ["2024-01-14", 800, "", 2],
            ["2024-01-21", 900, 30, 3],
        ]

    def test_limit_counts_keywords_not_rows(self):
        chart = build_keyword_chart_data(_make_volume_values(), limit=2)

        assert chart[0] == ["Week Ending", "Garlic Press", "Garlic Mincer"]
        assert all(len(row) == 3 for row in chart)

    def test_short_rows_are_blank(self):
        values = _make_volume_values()[:2] + [["garlic press", 9]]

        chart = build_keyword_chart_data(values)

        assert [row[1] for row in chart[1:]] == ["", "", 9]

    def test_insufficient_data(self):
        assert build_keyword_chart_data([]) == []
        assert build_keyword_chart_data(_make_volume_values()[:2]) == []
        assert build_keyword_chart_data([
            ["Week Starting"], ["Week Ending"], ["garlic press"],
        ]) == []


class TestToTitleCase:
    def test_title_case(self):
        assert to_title_case("garlic PRESS") == "Garlic Press"
        assert to_title_case("3-in-1 garlic tool") == "3-in-1 Garlic Tool"
