"""Customer codes, estimate numbering and entry identifiers."""
from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from .errors import CustomerCodeError
from .models import LineItem

CUSTOMER_CODE_LENGTH = 4


def generate_customer_code(company_name: str) -> str:
    """Return the upper-cased four character prefix of ``company_name``.

    Raises :class:`CustomerCodeError` when the name is too short instead of
    silently truncating.
    """

    if len(company_name) < CUSTOMER_CODE_LENGTH:
        raise CustomerCodeError(company_name, CUSTOMER_CODE_LENGTH)
    return company_name.upper()[:CUSTOMER_CODE_LENGTH]


def next_estimate_number(history: Iterable[LineItem], customer_code: str) -> int:
    numbers = [item.estimate_number for item in history if item.cust_id == customer_code]
    return max(numbers) + 1 if numbers else 1


def compose_entry_id(customer_code: str, estimate_number: int, row_number: int) -> str:
    return f"{customer_code}-{estimate_number}-{row_number}"


def stamp_line_items(
    items: Iterable[LineItem], customer_code: str, estimate_number: int
) -> list[LineItem]:
    """Attach customer, estimate and entry identifiers to projected rows."""

    return [
        replace(
            item,
            cust_id=customer_code,
            estimate_number=estimate_number,
            entry_id=compose_entry_id(customer_code, estimate_number, item.row_number),
        )
        for item in items
    ]


def sanitize_name(value: str) -> str:
    return "".join(ch if ch.isalnum() else "_" for ch in value.lower())


def suggest_file_name(company_name: str, estimate_number: int) -> str:
    """Default PDF name (without extension) for a customer's estimate."""

    return f"{sanitize_name(company_name)}-{estimate_number}"
