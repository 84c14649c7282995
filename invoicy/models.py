"""Record types shared by the grid, the ledger store and the renderer."""
from __future__ import annotations

from dataclasses import dataclass

# Fixed column ordinals of the line-item grid.
COL_ROW_NUMBER = 0
COL_DESCRIPTION = 1
COL_QUANTITY = 2
COL_PRICE = 3
COL_TOTAL = 4

COLUMN_COUNT = 5
COLUMN_HEADINGS = ("Row #", "Description", "Quantity", "Unit Price", "Total")

Position = tuple[int, int]


@dataclass(frozen=True)
class LineItem:
    """One invoice row, derived from the grid or loaded from the store."""

    entry_id: str
    cust_id: str
    estimate_number: int
    row_number: int
    description: str
    quantity: float
    price: float
    total: float


@dataclass(frozen=True)
class Total:
    position: Position
    value: float


@dataclass
class Contact:
    """The business issuing the invoice."""

    company: str = ""
    address: str = ""
    city: str = ""
    postal_code: str = ""
    country: str = ""
    name: str = ""
    telephone: str = ""
    email: str = ""
    website: str = ""

    def block_lines(self) -> list[str]:
        locality = " ".join(part for part in (self.city, self.postal_code) if part)
        lines = [
            self.company,
            self.name,
            self.address,
            locality,
            self.country,
            self.telephone,
            self.email,
            self.website,
        ]
        return [line for line in lines if line]


@dataclass
class Customer:
    """The business an invoice is addressed to."""

    company: str = ""
    address: str = ""
    city: str = ""
    postal_code: str = ""
    country: str = ""
    email: str = ""

    def block_lines(self) -> list[str]:
        locality = " ".join(part for part in (self.city, self.postal_code) if part)
        lines = [self.company, self.address, locality, self.country, self.email]
        return [line for line in lines if line]
