"""Jungle Scout API client for keyword rankings and historical volume."""

import logging
from datetime import date
from typing import Any

import requests

from .. import parsers
from ..config import JungleScoutConfig
from ..models import WeeklyVolume
from .models import APIResponse


logger = logging.getLogger(__name__)

# Jungle Scout endpoints
KEYWORDS_BY_ASIN_ENDPOINT = "/keywords/keywords_by_asin_query"
HISTORICAL_VOLUME_ENDPOINT = "/keywords/historical_search_volume"

# Records arrive sorted by this field, highest first
VOLUME_SORT = "-monthly_search_volume_exact"


class JungleScoutClient:
    """Client for the Jungle Scout keyword API."""

    def __init__(self, config: JungleScoutConfig):
        self.config = config
        self._session = requests.Session()

    def _get_headers(self) -> dict[str, str]:
        """Get headers required for Jungle Scout requests."""
        return {
            "Authorization": self.config.authorization,
            "Content-Type": "application/json",
            "Accept": "application/vnd.junglescout.v1+json",
            "X_API_Type": "junglescout",
        }

    def _make_request(
        self,
        method: str,
        url: str,
        params: dict[str, str] | None = None,
        body: dict[str, Any] | None = None,
    ) -> APIResponse:
        """Make authenticated request to the Jungle Scout API."""
        try:
            response = self._session.request(
                method=method,
                url=url,
                headers=self._get_headers(),
                params=params,
                json=body,
                timeout=self.config.timeout,
            )

            if response.status_code == 200:
                return APIResponse.from_success(response.json())
            else:
                return APIResponse.from_error(
                    code=str(response.status_code),
                    message=response.text,
                )

        except (requests.RequestException, ValueError) as e:
            return APIResponse.from_error(code="REQUEST_ERROR", message=str(e))

    def keywords_by_asin_url(self, marketplace: str, page_size: int = 100) -> str:
        """First page URL of the keywords-by-ASIN query, volume-sorted."""
        return (
            f"{self.config.base_url}{KEYWORDS_BY_ASIN_ENDPOINT}"
            f"?marketplace={marketplace}&sort={VOLUME_SORT}&page[size]={page_size}"
        )

    @staticmethod
    def keywords_by_asin_body(asins: list[str]) -> dict[str, Any]:
        """Request body for the keywords-by-ASIN query."""
        return {
            "data": {
                "type": "keywords_by_asin_query",
                "attributes": {
                    "asins": asins,
                    "include_variants": True,
                    "min_word_count": 1,
                    "max_word_count": 10,
                    "min_organic_product_count": 1,
                    "sort": VOLUME_SORT,
                },
            },
        }

    def fetch_page(self, url: str, body: dict[str, Any]) -> APIResponse:
        """POST one page of a paginated query.

        On success ``data`` is the JSON:API body with ``data`` and ``links``.
        """
        return self._make_request("POST", url, body=body)

    def get_historical_search_volume(
        self,
        keyword: str,
        marketplace: str,
        start_date: date,
        end_date: date,
    ) -> list[WeeklyVolume]:
        """Fetch weekly exact search volume estimates for a keyword.

        Args:
            keyword: Keyword to look up
            marketplace: Marketplace code (e.g., 'us')
            start_date: First day of the range
            end_date: Last day of the range

        Returns:
            List of WeeklyVolume in API order; empty on any failure
        """
        params = {
            "keyword": keyword,
            "marketplace": marketplace,
            "start_date": start_date.isoformat(),
            "end_date": end_date.isoformat(),
        }
        url = f"{self.config.base_url}{HISTORICAL_VOLUME_ENDPOINT}"

        response = self._make_request("GET", url, params=params)
        if not response.success:
            logger.error(
                "Historical volume request failed for %r: %s %s",
                keyword, response.error_code, response.error_message,
            )
            return []

        items = (response.data or {}).get("data")
        if not isinstance(items, list):
            return []
        return parsers.parse_weekly_volumes(items)

    def test_connection(self, marketplace: str = "us") -> dict[str, Any]:
        """Test Jungle Scout connection with a single small query.

        Returns dict with success status and details.
        """
        url = self.keywords_by_asin_url(marketplace, page_size=1)
        response = self.fetch_page(url, self.keywords_by_asin_body(["B000000000"]))

        if response.success or response.error_code in ("400", "422"):
            # Validation errors still mean the API is reachable and authorized
            return {
                "success": True,
                "message": "Successfully connected to Jungle Scout",
                "marketplace": marketplace,
            }

        return {
            "success": False,
            "message": f"API connection failed: {response.error_message}",
            "error_code": response.error_code,
        }
