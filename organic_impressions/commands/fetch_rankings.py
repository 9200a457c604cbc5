#!/usr/bin/env python3
"""Fetch keyword rankings and merge them into the rank tabs.

Appends new observations to 'Raw Rank Data' and sets each keyword's organic
rank for the day in 'Rank by Day'. Safe to re-run: observations already
logged for a keyword are skipped.

Usage:
    python -m organic_impressions.commands.fetch_rankings
"""

import argparse
import sys
from datetime import date

from ..config import AppConfig, configure_logging, load_config
from ..fetcher import PaginatedFetcher, below_volume_floor, is_unranked
from ..junglescout.client import JungleScoutClient
from ..parsers import parse_keyword_attributes
from ..reconcilers.rank import RANK_BY_DAY_CORNER, RankReconciler
from ..sheets.client import RANK_BY_DAY_TAB, RAW_RANK_DATA_TAB, SheetsClient
from ..sheets.table import ColumnarTimeTable


def run(config: AppConfig, today: date | None = None) -> bool:
    """Fetch today's ranking snapshot and merge it.

    Args:
        config: App configuration
        today: Reference day for the recency window (defaults to today)

    Returns:
        True if successful
    """
    today = today or date.today()

    sheets = SheetsClient(config.sheets)
    settings = sheets.read_settings()
    if settings is None:
        print(f"[ERROR] No primary ASIN found in '{config.sheets.master_tab_name}' tab")
        return False

    print(f"\n{'=' * 60}")
    print(f"Fetching rankings for {settings.primary_asin}")
    print(f"Competitors: {', '.join(settings.competitor_asins) or 'none'}")
    print(f"Marketplace: {settings.marketplace}")
    print(f"Minimum monthly search volume: {settings.min_monthly_search_volume}")
    print(f"Ranked keywords only: {settings.ranked_keywords_only}")
    print("=" * 60)

    client = JungleScoutClient(config.junglescout)
    fetcher = PaginatedFetcher(client.fetch_page)
    result = fetcher.fetch_all(
        client.keywords_by_asin_url(settings.marketplace, config.limits.page_size),
        client.keywords_by_asin_body(settings.asins),
        stop_when=below_volume_floor(settings.min_monthly_search_volume),
        skip_when=is_unranked if settings.ranked_keywords_only else None,
    )

    if result.failed:
        print(
            f"[WARNING] Ranking fetch failed ({result.error.error_code}); "
            f"merging {len(result.records)} records received before the failure"
        )
    elif result.stopped_early:
        print("  Stopped at a keyword below the minimum exact search volume")

    records = [parse_keyword_attributes(r) for r in result.records]
    print(f"  Received {len(records)} keywords")

    reconciler = RankReconciler(
        settings.primary_asin,
        settings.competitor_asins,
        recency_days=config.limits.rank_recency_days,
    )
    observations = reconciler.observations_from_records(records)

    raw_log = sheets.read_table(RAW_RANK_DATA_TAB) or []
    accepted = reconciler.accept(observations, raw_log, today)

    if not accepted:
        print("[INFO] No new ranking data to save")
        return True

    header = reconciler.raw_log_header(raw_log[0] if raw_log else None)
    sheets.append_rows(
        RAW_RANK_DATA_TAB,
        [reconciler.raw_log_row(obs, header) for obs in accepted],
        header=header,
    )
    print(f"  Saved {len(accepted)} rows to '{RAW_RANK_DATA_TAB}'")

    rank_table = ColumnarTimeTable.from_values(
        sheets.read_table(RANK_BY_DAY_TAB), header_rows=1, corner=[RANK_BY_DAY_CORNER]
    )
    updated = reconciler.merge_pivot(rank_table, accepted)
    sheets.write_table(RANK_BY_DAY_TAB, rank_table.to_values(), frozen_rows=1, frozen_cols=1)

    print(f"\n{'=' * 60}")
    print(f"Updated {updated} ranks in '{RANK_BY_DAY_TAB}'")
    print(f"Keywords tracked: {len(rank_table)}")
    print("=" * 60)
    return True


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="Fetch keyword rankings into 'Raw Rank Data' and 'Rank by Day'",
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
