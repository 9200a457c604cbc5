#!/usr/bin/env python3
"""Fetch the keyword list for the tracked ASINs into the ASINs tab.

Keywords are written to the block starting at D5, sorted by exact search
volume and cut off at the minimum volume set in the tab.

Usage:
    python -m organic_impressions.commands.fetch_keywords
    python -m organic_impressions.commands.fetch_keywords --yes
"""

import argparse
import sys
from collections.abc import Callable

from ..config import AppConfig, configure_logging, load_config
from ..fetcher import PaginatedFetcher, below_volume_floor, is_unranked
from ..junglescout.client import JungleScoutClient
from ..parsers import parse_keyword_attributes
from ..sheets.client import KEYWORD_DATA_RANGE, SheetsClient
from ..sheets.formatters import format_keyword_row, keyword_list_headers


def run(
    config: AppConfig,
    assume_yes: bool = False,
    confirm: Callable[[str], str] = input,
) -> bool:
    """Fetch keywords and replace the keyword block.

    Args:
        config: App configuration
        assume_yes: Overwrite an existing keyword list without asking
        confirm: Prompt function used when a list already exists

    Returns:
        True if successful
    """
    sheets = SheetsClient(config.sheets)
    settings = sheets.read_settings()
    if settings is None:
        print(f"[ERROR] No primary ASIN found in '{config.sheets.master_tab_name}' tab")
        return False

    if sheets.has_keyword_list() and not assume_yes:
        answer = confirm(
            f"Fetching keywords will overwrite existing data in {KEYWORD_DATA_RANGE}. "
            "Proceed? [y/N] "
        )
        if answer.strip().lower() not in ("y", "yes"):
            print("[INFO] Keyword fetching aborted")
            return False

    print(f"\n{'=' * 60}")
    print(f"Fetching keywords for {', '.join(settings.asins)}")
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
        max_records=config.limits.max_keywords,
        skip_when=is_unranked if settings.ranked_keywords_only else None,
    )

    if result.failed:
        print(
            f"[WARNING] Keyword fetch failed ({result.error.error_code}); "
            f"writing {len(result.records)} keywords received before the failure"
        )
    if result.reached_limit:
        print(f"  Reached the maximum of {config.limits.max_keywords} keywords")

    rows = [format_keyword_row(parse_keyword_attributes(r)) for r in result.records]
    if not rows:
        print("[WARNING] No keywords matched the current settings")

    sheets.write_keyword_list(keyword_list_headers(), rows)

    print(f"\n{'=' * 60}")
    print(f"Wrote {len(rows)} keywords to '{config.sheets.master_tab_name}'")
    print(f"Pages fetched: {result.pages}")
    print("=" * 60)
    return True


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="Fetch the keyword list for the tracked ASINs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Fetch keywords, asking before overwriting an existing list
    python -m organic_impressions.commands.fetch_keywords

    # Overwrite without asking (for scheduled runs)
    python -m organic_impressions.commands.fetch_keywords --yes

    # Test connections only
    python -m organic_impressions.commands.fetch_keywords --test-sheets
        """,
    )
    parser.add_argument(
        "--yes",
        "-y",
        action="store_true",
        help="Overwrite an existing keyword list without asking",
    )
    parser.add_argument(
        "--test-sheets",
        action="store_true",
        help="Test Google Sheets and Jungle Scout connections",
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
        if not SheetsClient(config.sheets).test_connection():
            print("[FAILED] Could not connect to Google Sheets")
            return 1
        print("[SUCCESS] Connected to Google Sheets")

        print("Testing Jungle Scout connection...")
        status = JungleScoutClient(config.junglescout).test_connection()
        if not status["success"]:
            print(f"[FAILED] {status['message']}")
            return 1
        print(f"[SUCCESS] {status['message']}")
        return 0

    return 0 if run(config, assume_yes=args.yes) else 1


if __name__ == "__main__":
    sys.exit(main())
