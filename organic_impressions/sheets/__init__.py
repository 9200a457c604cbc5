"""Google Sheets table store."""

from .client import SheetsClient
from .table import ColumnarTimeTable, count_period_gap

__all__ = ["SheetsClient", "ColumnarTimeTable", "count_period_gap"]
