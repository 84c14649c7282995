"""Sparse text grid backing the editable line-item table."""
from __future__ import annotations

from typing import Iterator, Optional

from .models import COL_ROW_NUMBER, COLUMN_COUNT, Position


def placeholder_text(row: int, col: int) -> str:
    """Default text of a freshly materialised cell."""

    if col == COL_ROW_NUMBER:
        return str(row)
    return f"({row}, {col})"


class GridStore:
    """Map of ``(row, column)`` to raw cell text.

    The store only ever grows. Rows hidden by the table's visible count keep
    their cells so that showing them again restores what was typed.
    """

    def __init__(self) -> None:
        self._cells: dict[Position, str] = {}

    def get(self, row: int, col: int) -> Optional[str]:
        return self._cells.get((row, col))

    def set(self, row: int, col: int, text: str) -> None:
        self._cells[(row, col)] = text

    def ensure_row(self, row: int) -> None:
        """Materialise the fixed cells of ``row`` without touching existing text."""

        for col in range(COLUMN_COUNT):
            self._cells.setdefault((row, col), placeholder_text(row, col))

    def has_row(self, row: int) -> bool:
        return any((row, col) in self._cells for col in range(COLUMN_COUNT))

    def rows(self) -> list[int]:
        return sorted({row for row, _ in self._cells})

    def row_cells(self, row: int) -> dict[int, str]:
        return {
            col: self._cells[(row, col)]
            for col in range(COLUMN_COUNT)
            if (row, col) in self._cells
        }

    def cells(self) -> Iterator[tuple[Position, str]]:
        for position in sorted(self._cells):
            yield position, self._cells[position]

    def __len__(self) -> int:
        return len(self._cells)
