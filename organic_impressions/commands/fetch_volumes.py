#!/usr/bin/env python3
"""Fetch weekly search volume history into the 'Keyword Volume' tab.

Only weeks newer than the tab's newest column are fetched for keywords
already in the tab; keywords new to 'Rank by Day' get the full history.

Usage:
    python -m organic_impressions.commands.fetch_volumes
"""

import argparse
import sys
from datetime import date, timedelta

from ..config import AppConfig, configure_logging, load_config
from ..junglescout.client import JungleScoutClient
from ..reconcilers.volume import VOLUME_CORNER, HistoricalVolumeReconciler
from ..sheets.client import KEYWORD_VOLUME_TAB, RANK_BY_DAY_TAB, SheetsClient
from ..sheets.table import ColumnarTimeTable


def run(config: AppConfig, today: date | None = None) -> bool:
    """Bring the Keyword Volume tab up to date.

    Args:
        config: App configuration
        today: End of the history range (defaults to today)

    Returns:
        True if successful
    """
    today = today or date.today()
    start = today - timedelta(days=config.limits.history_days)

    sheets = SheetsClient(config.sheets)
    settings = sheets.read_settings()
    if settings is None:
        print(f"[ERROR] No primary ASIN found in '{config.sheets.master_tab_name}' tab")
        return False

    rank_values = sheets.read_table(RANK_BY_DAY_TAB)
    if rank_values is None:
        print(f"[ERROR] '{RANK_BY_DAY_TAB}' tab not found. Run fetch_rankings first.")
        return False

    keywords = ColumnarTimeTable.from_values(rank_values).labels
    if not keywords:
        print(f"[INFO] No keywords in '{RANK_BY_DAY_TAB}'; nothing to fetch")
        return True

    print(f"\n{'=' * 60}")
    print(f"Fetching search volume for {len(keywords)} keywords")
    print(f"Range: {start.isoformat()} to {today.isoformat()}")
    print(f"Marketplace: {settings.marketplace}")
    print("=" * 60)

    volume_table = ColumnarTimeTable.from_values(
        sheets.read_table(KEYWORD_VOLUME_TAB), header_rows=2, corner=VOLUME_CORNER
    )

    client = JungleScoutClient(config.junglescout)
    reconciler = HistoricalVolumeReconciler(
        client.get_historical_search_volume, settings.marketplace
    )
    result = reconciler.reconcile(volume_table, keywords, start, today)

    sheets.write_table(
        KEYWORD_VOLUME_TAB, volume_table.to_values(), frozen_rows=2, frozen_cols=1
    )

    print(f"\n{'=' * 60}")
    print(f"Week columns added: {result.columns_added}")
    print(f"New keywords: {len(result.new_keywords)}")
    print(f"Updated keywords: {len(result.updated_keywords)}")
    if result.failed_keywords:
        print(f"[WARNING] No data for {len(result.failed_keywords)} keywords:")
        for keyword in result.failed_keywords[:10]:
            print(f"  - {keyword}")
    print("=" * 60)
    return True


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="Fetch weekly search volume into 'Keyword Volume'",
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
