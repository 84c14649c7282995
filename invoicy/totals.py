"""Position-indexed cache of row totals and the grand total derived from it."""
from __future__ import annotations

from typing import Iterator

from .grid import GridStore
from .models import COL_TOTAL, Position, Total
from .projection import format_total, project_row


def total_position(row: int) -> Position:
    return (row, COL_TOTAL)


class TotalsCache:
    """At most one :class:`Total` per position.

    Entries are never evicted: a row hidden by deleting it from the visible
    table still contributes its last computed total.
    """

    def __init__(self) -> None:
        self._entries: dict[Position, Total] = {}

    def upsert(self, position: Position, value: float) -> None:
        self._entries[position] = Total(position=position, value=float(value))

    def get(self, position: Position) -> float | None:
        entry = self._entries.get(position)
        return entry.value if entry else None

    def grand_total(self) -> float:
        return sum(entry.value for entry in self._entries.values())

    def entries(self) -> list[Total]:
        return [self._entries[position] for position in sorted(self._entries)]

    def __iter__(self) -> Iterator[Total]:
        return iter(self.entries())

    def __len__(self) -> int:
        return len(self._entries)


def refresh_totals(grid: GridStore, cache: TotalsCache, visible_rows: int) -> float:
    """Recompute the total of every visible row and return the grand total.

    Each row's total cell text is overwritten with the computed value and the
    matching cache entry is replaced.
    """

    for row in range(visible_rows):
        if not grid.has_row(row):
            continue
        item = project_row(grid, row)
        grid.set(row, COL_TOTAL, format_total(item.total))
        cache.upsert(total_position(row), item.total)
    return cache.grand_total()
