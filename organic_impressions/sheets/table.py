"""In-memory model of a date-columned sheet tab.

Layout::

    corner   | key[0][0] | key[1][0] | ...      <- header row 1
    (corner) | key[0][1] | key[1][1] | ...      <- header row 2 (optional)
    label    | cell      | cell      | ...
    label    | cell      | cell      | ...

Rows are keyed by their label (exact string match), columns by the tuple of
their header values. All merge logic runs against this structure; the
spreadsheet is only touched through one batched read and one batched write.
"""

import math
from datetime import date
from typing import Any

from ..parsers import normalize_date


ColumnKey = tuple[str, ...]


class ColumnarTimeTable:
    """Sheet-like table keyed by row label and date column key."""

    def __init__(self, header_rows: int = 1, corner: list[str] | None = None):
        if header_rows < 1:
            raise ValueError("header_rows must be at least 1")
        self.header_rows = header_rows
        self.corner = list(corner or [""] * header_rows)
        self.corner += [""] * (header_rows - len(self.corner))

        self._labels: list[str] = []
        self._keys: list[ColumnKey] = []
        self._cells: list[list[Any]] = []
        self._row_index: dict[str, int] = {}
        self._col_index: dict[ColumnKey, int] = {}

    @classmethod
    def from_values(
        cls,
        values: list[list[Any]] | None,
        header_rows: int = 1,
        corner: list[str] | None = None,
    ) -> "ColumnarTimeTable":
        """Load a table from a full sheet value grid.

        Header cells that parse as dates are normalized to ``yyyy-mm-dd``.
        Rows with a blank label and duplicate labels are dropped; columns
        with an all-blank header are dropped.
        """
        table = cls(header_rows=header_rows, corner=corner)
        if not values:
            return table

        headers = [list(values[i]) if i < len(values) else [] for i in range(header_rows)]
        width = max(
            [len(r) for r in headers] + [len(r) for r in values[header_rows:]] + [1]
        )
        headers = [h + [""] * (width - len(h)) for h in headers]

        if any(str(h[0]).strip() for h in headers):
            table.corner = [str(h[0]) for h in headers]

        kept_columns = []
        for col in range(1, width):
            key = tuple(_header_text(h[col]) for h in headers)
            if not any(key) or key in table._col_index:
                continue
            table._col_index[key] = len(table._keys)
            table._keys.append(key)
            kept_columns.append(col)

        for raw in values[header_rows:]:
            row = list(raw) + [""] * (width - len(raw))
            label = str(row[0]).strip() if row else ""
            if not label or label in table._row_index:
                continue
            table._row_index[label] = len(table._labels)
            table._labels.append(label)
            table._cells.append([row[c] for c in kept_columns])

        return table

    # --- Rows ---

    @property
    def labels(self) -> list[str]:
        return list(self._labels)

    def find_row(self, label: str) -> int | None:
        return self._row_index.get(label)

    def find_or_append_row(self, label: str) -> int:
        """Return the row index for ``label``, appending a blank row if new."""
        index = self._row_index.get(label)
        if index is not None:
            return index

        index = len(self._labels)
        self._labels.append(label)
        self._cells.append([""] * len(self._keys))
        self._row_index[label] = index
        return index

    def row_values(self, row: int) -> list[Any]:
        return list(self._cells[row])

    def has_data(self, label: str) -> bool:
        """True when the row exists and at least one cell is non-blank."""
        index = self._row_index.get(label)
        if index is None:
            return False
        return any(_is_filled(v) for v in self._cells[index])

    # --- Columns ---

    @property
    def column_keys(self) -> list[ColumnKey]:
        return list(self._keys)

    @property
    def latest_key(self) -> ColumnKey | None:
        """Key of the column nearest the label column."""
        return self._keys[0] if self._keys else None

    def find_column(self, key: ColumnKey | str) -> int | None:
        return self._col_index.get(_as_key(key))

    def find_or_append_column(self, key: ColumnKey | str) -> int:
        """Return the column index for ``key``, appending at the right if new."""
        key = _as_key(key)
        index = self._col_index.get(key)
        if index is not None:
            return index

        self._check_key(key)
        index = len(self._keys)
        self._keys.append(key)
        self._col_index[key] = index
        for row in self._cells:
            row.append("")
        return index

    def insert_period_columns(self, keys: list[ColumnKey]) -> int:
        """Insert blank columns right after the label column.

        ``keys`` must be ordered newest first; existing keys are skipped.

        Returns:
            Number of columns inserted
        """
        new_keys = []
        for key in keys:
            key = _as_key(key)
            self._check_key(key)
            if key not in self._col_index and key not in new_keys:
                new_keys.append(key)

        if not new_keys:
            return 0

        self._keys = new_keys + self._keys
        self._col_index = {k: i for i, k in enumerate(self._keys)}
        for i, row in enumerate(self._cells):
            self._cells[i] = [""] * len(new_keys) + row
        return len(new_keys)

    # --- Cells ---

    def get(self, row: int, col: int) -> Any:
        return self._cells[row][col]

    def set(self, row: int, col: int, value: Any) -> None:
        self._cells[row][col] = value

    def to_values(self) -> list[list[Any]]:
        """Full grid (headers included) for a single batched write."""
        values = []
        for h in range(self.header_rows):
            values.append([self.corner[h]] + [key[h] for key in self._keys])
        for label, row in zip(self._labels, self._cells):
            values.append([label] + list(row))
        return values

    def _check_key(self, key: ColumnKey) -> None:
        if len(key) != self.header_rows:
            raise ValueError(
                f"Column key {key!r} does not match {self.header_rows} header rows"
            )

    def __len__(self) -> int:
        return len(self._labels)


def count_period_gap(known_end: date, newest_end: date, period_days: int = 7) -> int:
    """Number of whole periods to add so ``known_end`` catches up.

    A partial period counts as a whole one. Zero when not behind.
    """
    if newest_end <= known_end:
        return 0
    return math.ceil((newest_end - known_end).days / period_days)


def _as_key(key: ColumnKey | str) -> ColumnKey:
    if isinstance(key, str):
        return (key,)
    return tuple(key)


def _header_text(value: Any) -> str:
    text = str(value).strip() if value is not None else ""
    if not text:
        return ""
    return normalize_date(text) or text


def _is_filled(value: Any) -> bool:
    return value is not None and str(value).strip() != ""
