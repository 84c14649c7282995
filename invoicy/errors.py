"""Exception types raised by the invoicing core."""
from __future__ import annotations


class InvoicyError(Exception):
    """Base class for application errors."""


class CustomerCodeError(InvoicyError, ValueError):
    """Raised when a company name is too short to derive a customer code."""

    def __init__(self, company: str, minimum: int):
        self.company = company
        self.minimum = minimum
        super().__init__(
            f"Company name {company!r} needs at least {minimum} characters "
            "to derive a customer code."
        )


class StoreError(InvoicyError):
    """Raised when the local database rejects a read or write."""


class LogoError(InvoicyError):
    """Raised when an uploaded logo cannot be accepted."""


class RenderError(InvoicyError):
    """Raised when the invoice content cannot be laid out as a PDF."""
