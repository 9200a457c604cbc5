"""Google Sheets client for the tracker tabs."""

import logging
from typing import Any

import gspread
from google.oauth2.service_account import Credentials
from gspread.utils import rowcol_to_a1

from ..config import SheetsConfig
from ..models import TrackerSettings
from ..parsers import _parse_int


logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
]

# Tab names
RANK_BY_DAY_TAB = "Rank by Day"
KEYWORD_VOLUME_TAB = "Keyword Volume"
RAW_RANK_DATA_TAB = "Raw Rank Data"
ORGANIC_IMPRESSIONS_TAB = "Organic Impressions"
CHARTS_TAB = "Charts"
KEYWORD_CHARTS_TAB = "Keyword Charts"

# Settings cells on the ASINs tab
PRIMARY_ASIN_CELL = "B3"
COMPETITOR_ASINS_RANGE = "B6:B14"
MARKETPLACE_CELL = "B17"
MIN_VOLUME_CELL = "B20"
RANKED_ONLY_CELL = "B23"

# Keyword list block on the ASINs tab
KEYWORD_HEADER_ROW = 5
KEYWORD_FIRST_COL = 4  # D
KEYWORD_BLOCK_RANGE = "D5:J"
KEYWORD_DATA_RANGE = "D7:D"

# Keyword volume line chart grid
LINE_CHART_WIDTH = 298
LINE_CHART_HEIGHT = 180
CHART_SLOT_ROWS = 9
CHART_SLOT_COLS = 3


class SheetsClient:
    """Client for Google Sheets operations."""

    def __init__(self, config: SheetsConfig):
        self.config = config
        self._client: gspread.Client | None = None
        self._spreadsheet: gspread.Spreadsheet | None = None

    def _get_client(self) -> gspread.Client:
        """Get or create authenticated gspread client."""
        if self._client is None:
            credentials = Credentials.from_service_account_file(
                self.config.credentials_path,
                scopes=SCOPES,
            )
            self._client = gspread.authorize(credentials)
        return self._client

    def _get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get or open the spreadsheet."""
        if self._spreadsheet is None:
            client = self._get_client()
            self._spreadsheet = client.open_by_key(self.config.spreadsheet_id)
        return self._spreadsheet

    def get_worksheet(self, name: str) -> gspread.Worksheet | None:
        """Get a worksheet by name, or None if the tab doesn't exist."""
        spreadsheet = self._get_spreadsheet()
        try:
            return spreadsheet.worksheet(name)
        except gspread.WorksheetNotFound:
            return None

    def get_or_create_worksheet(
        self,
        name: str,
        rows: int = 1000,
        cols: int = 26,
        frozen_rows: int = 0,
        frozen_cols: int = 0,
    ) -> gspread.Worksheet:
        """Get existing worksheet or create new one with frozen headers."""
        worksheet = self.get_worksheet(name)
        if worksheet is not None:
            return worksheet

        spreadsheet = self._get_spreadsheet()
        worksheet = spreadsheet.add_worksheet(title=name, rows=rows, cols=cols)
        if frozen_rows or frozen_cols:
            worksheet.freeze(rows=frozen_rows, cols=frozen_cols)
        logger.info("%s tab created", name)
        return worksheet

    # --- ASINs tab ---

    def read_settings(self) -> TrackerSettings | None:
        """Read tracker settings from the master tab in one request.

        Returns:
            TrackerSettings, or None if the tab or primary ASIN is missing
        """
        worksheet = self.get_worksheet(self.config.master_tab_name)
        if worksheet is None:
            return None

        primary, competitors, marketplace, min_volume, ranked_only = worksheet.batch_get(
            [
                PRIMARY_ASIN_CELL,
                COMPETITOR_ASINS_RANGE,
                MARKETPLACE_CELL,
                MIN_VOLUME_CELL,
                RANKED_ONLY_CELL,
            ]
        )

        primary_asin = _first_cell(primary).strip().upper()
        if not primary_asin:
            return None

        competitor_asins = [
            str(row[0]).strip().upper()
            for row in competitors
            if row and str(row[0]).strip()
        ]

        # Non-numeric or non-positive floors fall back to 1
        floor = _parse_int(_first_cell(min_volume))

        return TrackerSettings(
            primary_asin=primary_asin,
            competitor_asins=competitor_asins,
            marketplace=_first_cell(marketplace).strip().lower() or "us",
            min_monthly_search_volume=floor if floor > 0 else 1,
            ranked_keywords_only=_first_cell(ranked_only).strip().lower() == "yes",
        )

    def has_keyword_list(self) -> bool:
        """Check whether the keyword block on the master tab holds data."""
        rows = self.read_region(self.config.master_tab_name, KEYWORD_DATA_RANGE)
        return any(row and str(row[0]).strip() for row in rows)

    def write_keyword_list(self, headers: list[Any], rows: list[list[Any]]) -> None:
        """Replace the keyword block on the master tab.

        Headers go in rows 5 and 6 (the block header spans both), data from
        row 7.
        """
        worksheet = self.get_worksheet(self.config.master_tab_name)
        if worksheet is None:
            raise gspread.WorksheetNotFound(self.config.master_tab_name)

        worksheet.batch_clear([KEYWORD_BLOCK_RANGE])
        self.write_region(
            self.config.master_tab_name,
            KEYWORD_HEADER_ROW,
            KEYWORD_FIRST_COL,
            [headers, headers] + rows,
            user_entered=True,
        )

    # --- Table store ---

    def read_table(self, tab_name: str) -> list[list[Any]] | None:
        """Read all values from a tab.

        Returns:
            All values from the tab, or None if tab doesn't exist
        """
        worksheet = self.get_worksheet(tab_name)
        if worksheet is None:
            return None
        return worksheet.get_all_values()

    def read_region(self, tab_name: str, range_name: str) -> list[list[Any]]:
        """Read one A1 range in a single request."""
        worksheet = self.get_worksheet(tab_name)
        if worksheet is None:
            return []
        return worksheet.get(range_name)

    def write_region(
        self,
        tab_name: str,
        row: int,
        col: int,
        values: list[list[Any]],
        user_entered: bool = False,
    ) -> None:
        """Write a block of values with its top-left corner at (row, col).

        Args:
            tab_name: Tab name
            row: Top row (1-indexed)
            col: Left column (1-indexed)
            values: Rows of values
            user_entered: Let Sheets parse formulas and dates
        """
        if not values:
            return
        worksheet = self.get_or_create_worksheet(tab_name)
        width = max(len(r) for r in values)
        self._ensure_size(worksheet, row + len(values) - 1, col + width - 1)
        worksheet.update(
            values=values,
            range_name=rowcol_to_a1(row, col),
            value_input_option="USER_ENTERED" if user_entered else "RAW",
        )

    def write_table(
        self,
        tab_name: str,
        values: list[list[Any]],
        frozen_rows: int = 1,
        frozen_cols: int = 1,
        user_entered: bool = False,
    ) -> None:
        """Replace a tab's contents with ``values`` in one write.

        Args:
            tab_name: Tab name (e.g., 'Rank by Day')
            values: Full grid including header rows
            frozen_rows: Header rows to freeze when the tab is created
            frozen_cols: Label columns to freeze when the tab is created
            user_entered: Let Sheets parse formulas and dates
        """
        worksheet = self.get_or_create_worksheet(
            tab_name, frozen_rows=frozen_rows, frozen_cols=frozen_cols
        )
        worksheet.clear()
        if not values:
            return

        width = max(len(r) for r in values)
        self._ensure_size(worksheet, len(values), width)
        worksheet.update(
            values=values,
            range_name="A1",
            value_input_option="USER_ENTERED" if user_entered else "RAW",
        )

    def append_rows(
        self,
        tab_name: str,
        rows: list[list[Any]],
        header: list[Any] | None = None,
    ) -> None:
        """Append rows after the last row of a tab.

        Args:
            tab_name: Tab name
            rows: Rows to append
            header: Header row to (re)write first when it differs
        """
        worksheet = self.get_or_create_worksheet(tab_name, frozen_rows=1)

        if header:
            existing = worksheet.row_values(1)
            if existing != [str(h) for h in header]:
                self._ensure_size(worksheet, 1, len(header))
                worksheet.update(values=[header], range_name="A1")

        if rows:
            worksheet.append_rows(
                rows,
                value_input_option="RAW",
                insert_data_option="INSERT_ROWS",
                table_range="A1",
            )

    # --- Charts ---

    def render_stacked_chart(
        self,
        tab_name: str,
        values: list[list[Any]],
        title: str = "Keyword Impressions Over Time",
    ) -> None:
        """Write chart data to a tab and draw a stacked column chart over it.

        Existing content and charts on the tab are removed first.
        """
        spreadsheet = self._get_spreadsheet()
        worksheet = self.get_or_create_worksheet(tab_name)
        worksheet.clear()

        requests = self._delete_chart_requests(spreadsheet, worksheet)

        if not values or len(values[0]) < 2:
            if requests:
                spreadsheet.batch_update({"requests": requests})
            return

        self._ensure_size(worksheet, len(values), len(values[0]))
        worksheet.update(values=values, range_name="A1", value_input_option="USER_ENTERED")

        num_rows = len(values)
        num_cols = len(values[0])

        def source(col: int) -> dict[str, Any]:
            return {
                "sourceRange": {
                    "sources": [{
                        "sheetId": worksheet.id,
                        "startRowIndex": 0,
                        "endRowIndex": num_rows,
                        "startColumnIndex": col,
                        "endColumnIndex": col + 1,
                    }]
                }
            }

        requests.append({
            "addChart": {
                "chart": {
                    "spec": {
                        "title": title,
                        "basicChart": {
                            "chartType": "COLUMN",
                            "stackedType": "STACKED",
                            "legendPosition": "BOTTOM_LEGEND",
                            "headerCount": 1,
                            "axis": [
                                {"position": "BOTTOM_AXIS", "title": "Date"},
                                {"position": "LEFT_AXIS", "title": "Impressions"},
                            ],
                            "domains": [{"domain": source(0)}],
                            "series": [
                                {"series": source(col), "targetAxis": "LEFT_AXIS"}
                                for col in range(1, num_cols)
                            ],
                        },
                    },
                    "position": {
                        "overlayPosition": {
                            "anchorCell": {
                                "sheetId": worksheet.id,
                                "rowIndex": num_rows + 4,
                                "columnIndex": 1,
                            },
                            "widthPixels": 1000,
                            "heightPixels": 500,
                        }
                    },
                }
            }
        })
        spreadsheet.batch_update({"requests": requests})

    def render_line_charts(
        self,
        tab_name: str,
        values: list[list[Any]],
        charts_per_row: int = 4,
    ) -> None:
        """Write chart data to a tab and draw one line chart per series column.

        Column A is the week axis; each following column gets a small chart
        titled with its header. Charts sit in a grid to the right of the data.
        Existing content and charts on the tab are removed first.
        """
        spreadsheet = self._get_spreadsheet()
        worksheet = self.get_or_create_worksheet(tab_name)
        worksheet.clear()

        requests = self._delete_chart_requests(spreadsheet, worksheet)

        if not values or len(values[0]) < 2:
            if requests:
                spreadsheet.batch_update({"requests": requests})
            return

        num_rows = len(values)
        num_cols = len(values[0])
        # Chart anchors must fall inside the grid too
        grid_rows = ((num_cols - 2) // charts_per_row + 1) * CHART_SLOT_ROWS + 1
        grid_cols = num_cols + 1 + charts_per_row * CHART_SLOT_COLS
        self._ensure_size(worksheet, max(num_rows, grid_rows), grid_cols)
        worksheet.update(values=values, range_name="A1", value_input_option="RAW")

        def source(col: int) -> dict[str, Any]:
            return {
                "sourceRange": {
                    "sources": [{
                        "sheetId": worksheet.id,
                        "startRowIndex": 1,
                        "endRowIndex": num_rows,
                        "startColumnIndex": col,
                        "endColumnIndex": col + 1,
                    }]
                }
            }

        for i, col in enumerate(range(1, num_cols)):
            requests.append({
                "addChart": {
                    "chart": {
                        "spec": {
                            "title": str(values[0][col]),
                            "basicChart": {
                                "chartType": "LINE",
                                "legendPosition": "NO_LEGEND",
                                "axis": [
                                    {"position": "BOTTOM_AXIS", "title": "Week Ending"},
                                    {"position": "LEFT_AXIS", "title": "Search Volume"},
                                ],
                                "domains": [{"domain": source(0)}],
                                "series": [{
                                    "series": source(col),
                                    "targetAxis": "LEFT_AXIS",
                                }],
                            },
                        },
                        "position": {
                            "overlayPosition": {
                                "anchorCell": {
                                    "sheetId": worksheet.id,
                                    "rowIndex": (i // charts_per_row) * CHART_SLOT_ROWS + 1,
                                    "columnIndex": num_cols + 1 + (i % charts_per_row) * CHART_SLOT_COLS,
                                },
                                "widthPixels": LINE_CHART_WIDTH,
                                "heightPixels": LINE_CHART_HEIGHT,
                            }
                        },
                    }
                }
            })
        spreadsheet.batch_update({"requests": requests})
        logger.info("Drew %d line charts on %s", num_cols - 1, tab_name)

    def _delete_chart_requests(
        self, spreadsheet: gspread.Spreadsheet, worksheet: gspread.Worksheet
    ) -> list[dict[str, Any]]:
        """batch_update requests removing every chart on ``worksheet``."""
        metadata = spreadsheet.fetch_sheet_metadata(
            params={"fields": "sheets(properties.sheetId,charts.chartId)"}
        )
        return [
            {"deleteEmbeddedObject": {"objectId": chart["chartId"]}}
            for sheet in metadata.get("sheets", [])
            if sheet.get("properties", {}).get("sheetId") == worksheet.id
            for chart in sheet.get("charts", [])
        ]

    def _ensure_size(self, worksheet: gspread.Worksheet, rows: int, cols: int) -> None:
        """Grow the worksheet grid so a write of rows x cols fits."""
        if rows > worksheet.row_count:
            worksheet.add_rows(rows - worksheet.row_count)
        if cols > worksheet.col_count:
            worksheet.add_cols(cols - worksheet.col_count)

    def test_connection(self) -> bool:
        """Test connection to Google Sheets."""
        try:
            spreadsheet = self._get_spreadsheet()
            _ = spreadsheet.title
            return True
        except Exception:
            return False


def _first_cell(values: list[list[Any]]) -> str:
    """First cell of a batch_get result, or ""."""
    if values and values[0]:
        return str(values[0][0])
    return ""
