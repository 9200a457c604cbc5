#!/usr/bin/env python3
"""Draw the stacked impressions chart on the 'Charts' tab.

Usage:
    python -m organic_impressions.commands.impressions_chart
"""

import argparse
import sys

from ..config import AppConfig, configure_logging, load_config
from ..reconcilers.charts import build_chart_data
from ..sheets.client import CHARTS_TAB, ORGANIC_IMPRESSIONS_TAB, SheetsClient


def run(config: AppConfig) -> bool:
    """Chart the top keywords by total impressions over time.

    Returns:
        True if successful
    """
    sheets = SheetsClient(config.sheets)

    report_values = sheets.read_table(ORGANIC_IMPRESSIONS_TAB)
    if report_values is None:
        print(
            f"[ERROR] '{ORGANIC_IMPRESSIONS_TAB}' tab not found. "
            "Run estimate_impressions first."
        )
        return False

    chart = build_chart_data(report_values, top_n=config.limits.chart_top_keywords)
    if not chart:
        print(f"[ERROR] Not enough data in '{ORGANIC_IMPRESSIONS_TAB}' to chart")
        return False

    sheets.render_stacked_chart(CHARTS_TAB, chart)

    print(f"\n{'=' * 60}")
    print(f"Charted {len(chart[0]) - 2} keywords over {len(chart) - 1} days")
    print("=" * 60)
    return True


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="Draw the organic impressions chart on the 'Charts' tab",
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

    return 0 if run(config) else 1


if __name__ == "__main__":
    sys.exit(main())
