"""Convert grid rows into typed line items."""
from __future__ import annotations

import math
from typing import Optional

from .grid import GridStore
from .models import COL_DESCRIPTION, COL_PRICE, COL_QUANTITY, LineItem


def parse_cell_number(text: Optional[str]) -> float:
    """Parse a numeric cell, treating empty or non-numeric text as ``0.0``."""

    if text is None:
        return 0.0
    value = text.strip()
    # Plain ASCII decimal notation only; no digit separators.
    if not value or not value.isascii() or "_" in value:
        return 0.0
    try:
        number = float(value)
    except ValueError:
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def format_total(value: float) -> str:
    """Render a computed total for display in the total column."""

    text = repr(float(value))
    if text.endswith(".0"):
        text = text[:-2]
    return text


def project_row(
    grid: GridStore,
    row: int,
    *,
    entry_id: str = "",
    cust_id: str = "",
    estimate_number: int = 0,
) -> LineItem:
    """Build the :class:`LineItem` for ``row``.

    The total is always ``quantity * price``; whatever text sits in the total
    cell is ignored.
    """

    quantity = parse_cell_number(grid.get(row, COL_QUANTITY))
    price = parse_cell_number(grid.get(row, COL_PRICE))
    return LineItem(
        entry_id=entry_id,
        cust_id=cust_id,
        estimate_number=estimate_number,
        row_number=row,
        description=grid.get(row, COL_DESCRIPTION) or "",
        quantity=quantity,
        price=price,
        total=quantity * price,
    )


def project_rows(grid: GridStore, visible_rows: int) -> list[LineItem]:
    return [project_row(grid, row) for row in range(visible_rows) if grid.has_row(row)]
