"""Chart data for the impressions and keyword volume charts."""

from typing import Any

from ..parsers import _parse_int, parse_date
from ..sheets.formatters import to_title_case


OTHERS_LABEL = "Others"
WEEK_ENDING_LABEL = "Week Ending"


def build_chart_data(
    report_values: list[list[Any]], top_n: int = 6
) -> list[list[Any]]:
    """Pivot the Organic Impressions grid into one row per date.

    The ``top_n`` keywords by Total each get a series; the rest are summed
    into "Others".

    Args:
        report_values: Organic Impressions grid (header, then keyword rows
            ending in a Total cell)
        top_n: Number of keywords charted individually

    Returns:
        Rows of ``[date, *top keyword values, others]`` under a header row
        ``["", *top keyword names, "Others"]``; empty when there is no data
    """
    if len(report_values) < 2 or len(report_values[0]) < 3:
        return []

    dates = list(report_values[0][1:-1])

    keywords = []
    for row in report_values[1:]:
        if not row or not str(row[0]).strip():
            continue
        padded = list(row) + [""] * (len(dates) + 2 - len(row))
        keywords.append({
            "keyword": to_title_case(str(row[0])),
            "total": _parse_int(padded[len(dates) + 1]),
            "values": [_parse_int(v) for v in padded[1 : len(dates) + 1]],
        })

    # Stable sort keeps sheet order among equal totals
    keywords.sort(key=lambda k: k["total"], reverse=True)
    top = keywords[:top_n]
    others = keywords[top_n:]

    chart = [[""] + [k["keyword"] for k in top] + [OTHERS_LABEL]]
    for i, day in enumerate(dates):
        row = [day] + [k["values"][i] for k in top]
        row.append(sum(k["values"][i] for k in others))
        chart.append(row)

    return chart


def build_keyword_chart_data(
    volume_values: list[list[Any]], limit: int = 20
) -> list[list[Any]]:
    """Weekly volume of the first ``limit`` keywords, oldest week first.

    Args:
        volume_values: Keyword Volume grid (week start row, week end row,
            then one row per keyword with week columns newest first)
        limit: Number of keywords to chart

    Returns:
        Rows of ``[week end, *volumes]`` under a header row
        ``["Week Ending", *keyword titles]``; empty when there is no data
    """
    if len(volume_values) < 3 or len(volume_values[1]) < 2:
        return []

    weeks = []
    for col, cell in enumerate(volume_values[1][1:], start=1):
        week_end = parse_date(cell)
        if week_end is not None:
            weeks.append((week_end, col))
    weeks.sort()

    keyword_rows = [
        row for row in volume_values[2:] if row and str(row[0]).strip()
    ][:limit]
    if not weeks or not keyword_rows:
        return []

    chart = [[WEEK_ENDING_LABEL] + [to_title_case(str(row[0])) for row in keyword_rows]]
    for week_end, col in weeks:
        line = [week_end.isoformat()]
        for row in keyword_rows:
            cell = row[col] if col < len(row) else ""
            line.append("" if cell in ("", None) else _parse_int(cell))
        chart.append(line)

    return chart
