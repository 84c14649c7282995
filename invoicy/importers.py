"""Load line items from CSV files into the grid."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Union

import pandas as pd

from .grid import GridStore
from .models import COL_DESCRIPTION, COL_PRICE, COL_QUANTITY

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = {
    "description": COL_DESCRIPTION,
    "quantity": COL_QUANTITY,
    "price": COL_PRICE,
}


def import_line_items_csv(
    grid: GridStore, source: Union[str, Path, IO], *, start_row: int = 0
) -> int:
    """Write each CSV record into consecutive grid rows from ``start_row``.

    Headers are matched case-insensitively; cell text is copied verbatim so
    the usual numeric fallback applies when totals are computed.
    """

    frame = pd.read_csv(source, dtype=str, keep_default_na=False)
    frame.columns = [str(column).strip().lower() for column in frame.columns]
    missing = sorted(set(REQUIRED_COLUMNS) - set(frame.columns))
    if missing:
        raise ValueError(f"CSV is missing required columns: {', '.join(missing)}")

    count = 0
    for offset, record in enumerate(frame.to_dict("records")):
        row = start_row + offset
        grid.ensure_row(row)
        for name, col in REQUIRED_COLUMNS.items():
            grid.set(row, col, str(record[name]).strip())
        count += 1
    logger.info("Imported %d CSV row(s) starting at row %d", count, start_row)
    return count
