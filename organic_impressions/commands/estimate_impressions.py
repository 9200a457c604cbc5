#!/usr/bin/env python3
"""Recompute the 'Organic Impressions' tab from rank and volume.

Usage:
    python -m organic_impressions.commands.estimate_impressions
"""

import argparse
import sys

from ..config import AppConfig, configure_logging, load_config
from ..reconcilers.impressions import ImpressionEstimator
from ..reconcilers.rank import RANK_BY_DAY_CORNER
from ..reconcilers.volume import VOLUME_CORNER
from ..sheets.client import (
    KEYWORD_VOLUME_TAB,
    ORGANIC_IMPRESSIONS_TAB,
    RANK_BY_DAY_TAB,
    SheetsClient,
)
from ..sheets.table import ColumnarTimeTable


def run(config: AppConfig) -> bool:
    """Estimate daily organic impressions for every tracked keyword.

    Returns:
        True if successful
    """
    sheets = SheetsClient(config.sheets)

    rank_values = sheets.read_table(RANK_BY_DAY_TAB)
    if rank_values is None:
        print(f"[ERROR] '{RANK_BY_DAY_TAB}' tab not found. Run fetch_rankings first.")
        return False

    volume_values = sheets.read_table(KEYWORD_VOLUME_TAB)
    if volume_values is None:
        print(f"[ERROR] '{KEYWORD_VOLUME_TAB}' tab not found. Run fetch_volumes first.")
        return False

    rank_table = ColumnarTimeTable.from_values(
        rank_values, header_rows=1, corner=[RANK_BY_DAY_CORNER]
    )
    volume_table = ColumnarTimeTable.from_values(
        volume_values, header_rows=2, corner=VOLUME_CORNER
    )

    report = ImpressionEstimator().estimate(rank_table, volume_table)
    if not report.dates:
        print("[WARNING] No ranked dates are covered by volume data")

    sheets.write_table(
        ORGANIC_IMPRESSIONS_TAB,
        report.to_values(),
        frozen_rows=1,
        frozen_cols=1,
        user_entered=True,
    )

    print(f"\n{'=' * 60}")
    print(f"Estimated impressions for {len(report.rows)} keywords")
    print(f"Dates: {len(report.dates)}")
    if report.dates:
        print(f"Range: {report.dates[0]} .. {report.dates[-1]}")
    print("=" * 60)
    return True


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="Estimate daily organic impressions into 'Organic Impressions'",
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
