"""Core of the Invoicy estimate and invoice generator."""

from .config import AppConfig, configure_logging, load_config
from .errors import CustomerCodeError, InvoicyError, LogoError, RenderError, StoreError
from .grid import GridStore
from .identity import compose_entry_id, generate_customer_code, next_estimate_number
from .models import Contact, Customer, LineItem, Total
from .projection import project_row
from .repositories import Database, LedgerRepository
from .session import InvoiceResult, InvoiceSession, TickResult
from .totals import TotalsCache, refresh_totals

__all__ = [
    "AppConfig",
    "configure_logging",
    "load_config",
    "CustomerCodeError",
    "InvoicyError",
    "LogoError",
    "RenderError",
    "StoreError",
    "GridStore",
    "compose_entry_id",
    "generate_customer_code",
    "next_estimate_number",
    "Contact",
    "Customer",
    "LineItem",
    "Total",
    "project_row",
    "Database",
    "LedgerRepository",
    "InvoiceResult",
    "InvoiceSession",
    "TickResult",
    "TotalsCache",
    "refresh_totals",
]
