import io

import pytest

from invoicy.grid import GridStore
from invoicy.importers import import_line_items_csv


def test_csv_rows_land_in_consecutive_grid_rows():
    grid = GridStore()
    source = io.StringIO("Description,QUANTITY,Price\nHinges,4,2.5\nScrews, 100 ,abc\n")

    count = import_line_items_csv(grid, source, start_row=2)

    assert count == 2
    assert grid.rows() == [2, 3]
    assert grid.get(2, 1) == "Hinges"
    assert grid.get(3, 2) == "100"
    assert grid.get(3, 3) == "abc"
    assert grid.get(3, 0) == "3"


def test_csv_without_required_columns_is_rejected():
    grid = GridStore()
    with pytest.raises(ValueError, match="price"):
        import_line_items_csv(grid, io.StringIO("description,quantity\nHinges,4\n"))
    assert len(grid) == 0
