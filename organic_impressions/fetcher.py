"""Cursor-paginated retrieval with early termination.

Keyword feeds are sorted by exact search volume, highest first, so the first
record below the volume floor ends the whole walk: every later record, on this
page or any following one, is guaranteed to be lower.
"""

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any

from .junglescout.models import APIResponse


logger = logging.getLogger(__name__)

Record = dict[str, Any]
PageSource = Callable[[str, dict[str, Any]], APIResponse]
RecordPredicate = Callable[[Record], bool]


@dataclass
class FetchResult:
    """Outcome of a paginated fetch."""
    records: list[Record] = field(default_factory=list)
    stopped_early: bool = False
    reached_limit: bool = False
    pages: int = 0
    error: APIResponse | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class PaginatedFetcher:
    """Walks a JSON:API cursor chain one blocking request at a time."""

    def __init__(self, page_source: PageSource):
        self.page_source = page_source
        self.last_error: APIResponse | None = None

    def iter_pages(
        self, initial_url: str, body: dict[str, Any]
    ) -> Iterator[list[Record]]:
        """Yield the record list of each page until the chain ends.

        A failed page ends iteration and is kept in ``last_error``.
        """
        self.last_error = None
        url: str | None = initial_url

        while url:
            response = self.page_source(url, body)
            if not response.success:
                logger.error(
                    "Page request failed with status %s: %s",
                    response.error_code, response.error_message,
                )
                self.last_error = response
                return

            payload = response.data or {}
            items = payload.get("data") or []
            logger.info("Received %d records", len(items))
            yield [item.get("attributes", {}) or {} for item in items]

            url = (payload.get("links") or {}).get("next")

    def fetch_all(
        self,
        initial_url: str,
        body: dict[str, Any],
        stop_when: RecordPredicate,
        max_records: int | None = None,
        skip_when: RecordPredicate | None = None,
    ) -> FetchResult:
        """Collect records across pages.

        Args:
            initial_url: First page URL
            body: Request body sent with every page
            stop_when: First record matching this ends the entire fetch
            max_records: Hard cap on accepted records
            skip_when: Matching records are dropped without stopping

        Returns:
            FetchResult with accepted records in page order
        """
        result = FetchResult()

        if max_records is not None and max_records <= 0:
            result.reached_limit = True
            return result

        pages = self.iter_pages(initial_url, body)
        for page in pages:
            result.pages += 1
            for record in page:
                if stop_when(record):
                    logger.info(
                        "Stopping fetch at %r (volume %s)",
                        record.get("name"), record.get("monthly_search_volume_exact"),
                    )
                    result.stopped_early = True
                    break

                if skip_when is not None and skip_when(record):
                    continue

                result.records.append(record)
                if max_records is not None and len(result.records) >= max_records:
                    logger.info("Reached the maximum number of records (%d)", max_records)
                    result.reached_limit = True
                    break

            if result.stopped_early or result.reached_limit:
                pages.close()
                break

        result.error = self.last_error
        if result.error is not None:
            logger.error(
                "Fetch aborted after %d pages; keeping %d records",
                result.pages, len(result.records),
            )
        elif not (result.stopped_early or result.reached_limit):
            logger.info("No more pages to fetch")

        return result


def below_volume_floor(floor: int) -> RecordPredicate:
    """Stop predicate: exact monthly volume missing or under ``floor``."""
    def predicate(record: Record) -> bool:
        volume = record.get("monthly_search_volume_exact")
        return volume is None or volume < floor
    return predicate


def is_unranked(record: Record) -> bool:
    """Skip predicate: neither an organic nor a sponsored rank."""
    return not record.get("organic_rank") and not record.get("sponsored_rank")
