#!/usr/bin/env python3
"""Draw weekly search volume line charts on the 'Keyword Charts' tab.

One small chart per keyword, for the first keywords of 'Keyword Volume'.

Usage:
    python -m organic_impressions.commands.keyword_charts
    python -m organic_impressions.commands.keyword_charts --limit 8
"""

import argparse
import sys

from ..config import AppConfig, configure_logging, load_config
from ..reconcilers.charts import build_keyword_chart_data
from ..sheets.client import KEYWORD_CHARTS_TAB, KEYWORD_VOLUME_TAB, SheetsClient


CHARTS_PER_ROW = 4


def run(config: AppConfig, limit: int | None = None) -> bool:
    """Chart the weekly search volume of the first keywords.

    Args:
        config: Application configuration
        limit: Number of keywords to chart (defaults to the configured count)

    Returns:
        True if successful
    """
    sheets = SheetsClient(config.sheets)

    volume_values = sheets.read_table(KEYWORD_VOLUME_TAB)
    if volume_values is None:
        print(f"[ERROR] '{KEYWORD_VOLUME_TAB}' tab not found. Run fetch_volumes first.")
        return False

    count = limit if limit is not None else config.limits.keyword_chart_count
    chart = build_keyword_chart_data(volume_values, limit=count)
    if not chart:
        print(f"[ERROR] Not enough data in '{KEYWORD_VOLUME_TAB}' to chart")
        return False

    sheets.render_line_charts(KEYWORD_CHARTS_TAB, chart, charts_per_row=CHARTS_PER_ROW)

    print(f"\n{'=' * 60}")
    print(f"Charted {len(chart[0]) - 1} keywords over {len(chart) - 1} weeks")
    print("=" * 60)
    return True


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="Draw keyword search volume charts on the 'Keyword Charts' tab",
    )
    parser.add_argument(
        "--limit",
        type=int,
        help="Number of keywords to chart (default: KEYWORD_CHART_COUNT)",
    )
    parser.add_argument(
        "--test-sheets",
        action="store_true",
        help="Test Google Sheets connection",
    )
    return parser


def main() -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    try:
        config = load_config()
    except Exception as e:
        print(f"[ERROR] Failed to load configuration: {e}")
        return 1

    configure_logging(config.log_level)

    if args.test_sheets:
        print("Testing Google Sheets connection...")
        if SheetsClient(config.sheets).test_connection():
            print("[SUCCESS] Connected to Google Sheets")
            return 0
        print("[FAILED] Could not connect to Google Sheets")
        return 1

    return 0 if run(config, limit=args.limit) else 1


if __name__ == "__main__":
    sys.exit(main())
