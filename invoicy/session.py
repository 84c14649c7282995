"""Editing session: the state behind one invoice form and its commands.

The session owns the grid, the totals cache and the contact/customer
selections, and is handed an already-open :class:`Database`. The UI layer
calls :meth:`InvoiceSession.tick` on every refresh and
:meth:`InvoiceSession.generate_invoice` when the user asks for a document.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import IO, Optional, Union

from .config import AppConfig
from .document import RenderCell, render_invoice
from .errors import CustomerCodeError, RenderError, StoreError
from .forms import RecordSelection, validate_text_input
from .grid import GridStore
from .identity import (
    generate_customer_code,
    next_estimate_number,
    stamp_line_items,
    suggest_file_name,
)
from .importers import import_line_items_csv
from .models import COLUMN_COUNT, Contact, Customer, LineItem
from .projection import project_rows
from .repositories import (
    ContactRepository,
    CredentialRepository,
    CustomerRepository,
    Database,
    LedgerRepository,
)
from .security import CredentialService, PasswordService
from .totals import TotalsCache, refresh_totals

logger = logging.getLogger(__name__)

NO_CUSTOMER_MESSAGE = "Select a customer first."


@dataclass
class TickResult:
    grand_total: float
    estimate_number: int
    customer_code: Optional[str] = None
    message: Optional[str] = None


@dataclass
class InvoiceResult:
    """Outcome of one "generate invoice" command."""

    grand_total: float
    estimate_number: Optional[int] = None
    path: Optional[Path] = None
    saved_entry_ids: list[str] = field(default_factory=list)
    failed_entry_ids: list[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class InvoiceSession:
    def __init__(self, db: Database, config: AppConfig):
        self.config = config
        self.ledger = LedgerRepository(db)
        self.contact_store = ContactRepository(db)
        self.customer_store = CustomerRepository(db)
        self.credentials = CredentialService(CredentialRepository(db), PasswordService())

        self.grid = GridStore()
        self.totals = TotalsCache()
        self.row_count = 0
        self.contacts: RecordSelection[Contact] = RecordSelection()
        self.customers: RecordSelection[Customer] = RecordSelection()
        self.contact_draft = Contact()
        self.customer_draft = Customer()
        self.history: list[LineItem] = []
        self.estimate_number = 1
        self.grand_total = 0.0

        for _ in range(config.default_rows):
            self.add_row()

    @classmethod
    def open(cls, db: Database, config: AppConfig) -> "InvoiceSession":
        """Create a session and load contacts, customers and history.

        Store errors here propagate: the form cannot start without its data.
        """

        session = cls(db, config)
        session.contacts.records = session.contact_store.list_all()
        session.customers.records = session.customer_store.list_all()
        session.history = session.ledger.load_all_line_items()
        return session

    # ------------------------------------------------------------------
    # Grid editing
    # ------------------------------------------------------------------

    def add_row(self) -> int:
        row = self.row_count
        self.grid.ensure_row(row)
        self.row_count += 1
        return row

    def delete_row(self) -> None:
        # Cells and cached totals of the hidden row are kept.
        if self.row_count > 0:
            self.row_count -= 1

    def set_cell(self, row: int, col: int, text: str) -> None:
        if not 0 <= col < COLUMN_COUNT:
            raise IndexError(f"column {col} is outside the grid")
        self.grid.set(row, col, text)

    def import_csv(self, source: Union[str, Path, IO]) -> int:
        count = import_line_items_csv(self.grid, source, start_row=self.row_count)
        self.row_count += count
        return count

    def render_cells(self) -> list[RenderCell]:
        cells: list[RenderCell] = []
        for row in range(self.row_count):
            for col, text in self.grid.row_cells(row).items():
                cells.append((text, (row, col)))
        return cells

    # ------------------------------------------------------------------
    # Contacts and customers
    # ------------------------------------------------------------------

    def select_contact(self, index: int) -> Contact:
        return self.contacts.select(index)

    def select_customer(self, index: int) -> Optional[str]:
        """Select a customer; return a message when no code can be derived."""

        customer = self.customers.select(index)
        try:
            code = generate_customer_code(customer.company)
        except CustomerCodeError as exc:
            return str(exc)
        self.estimate_number = next_estimate_number(self.history, code)
        return None

    def last_issued_estimate(self) -> Optional[int]:
        """Last estimate number stored for the selected customer, if any."""

        customer = self.customers.selected()
        if customer is None:
            return None
        try:
            return self.customer_store.last_estimate_number(customer.company)
        except StoreError:
            logger.warning("Last estimate of %r unavailable", customer.company, exc_info=True)
            return None

    def save_contact_draft(self) -> Optional[str]:
        error = validate_text_input(self.contact_draft.company)
        if error:
            return error
        contact = replace(self.contact_draft, company=self.contact_draft.company.strip())
        message = None
        try:
            self.contact_store.upsert(contact)
        except StoreError as exc:
            logger.error("Contact %r not saved", contact.company, exc_info=True)
            message = str(exc)
        self.contacts.add(contact, key=contact.company)
        self.contact_draft = Contact()
        return message

    def save_customer_draft(self) -> Optional[str]:
        error = validate_text_input(self.customer_draft.company)
        if error:
            return error
        customer = replace(self.customer_draft, company=self.customer_draft.company.strip())
        message = None
        try:
            self.customer_store.upsert(customer)
        except StoreError as exc:
            logger.error("Customer %r not saved", customer.company, exc_info=True)
            message = str(exc)
        index = self.customers.add(customer, key=customer.company)
        self.customer_draft = Customer()
        return message or self.select_customer(index)

    # ------------------------------------------------------------------
    # Per-refresh recomputation
    # ------------------------------------------------------------------

    def refresh_history(self) -> list[LineItem]:
        try:
            self.history = self.ledger.load_all_line_items()
        except StoreError:
            logger.warning("Keeping previous line-item history", exc_info=True)
        return self.history

    def current_customer_code(self) -> str:
        customer = self.customers.selected()
        if customer is None:
            raise LookupError(NO_CUSTOMER_MESSAGE)
        return generate_customer_code(customer.company)

    def tick(self) -> TickResult:
        self.grand_total = refresh_totals(self.grid, self.totals, self.row_count)
        self.refresh_history()
        try:
            code = self.current_customer_code()
        except (LookupError, CustomerCodeError) as exc:
            return TickResult(self.grand_total, self.estimate_number, message=str(exc))
        self.estimate_number = next_estimate_number(self.history, code)
        return TickResult(self.grand_total, self.estimate_number, customer_code=code)

    def suggested_file_name(self) -> str:
        customer = self.customers.selected()
        company = customer.company if customer else "invoice"
        return suggest_file_name(company, self.estimate_number)

    # ------------------------------------------------------------------
    # Generate invoice
    # ------------------------------------------------------------------

    def line_items(self, customer_code: str, estimate_number: int) -> list[LineItem]:
        return stamp_line_items(
            project_rows(self.grid, self.row_count), customer_code, estimate_number
        )

    def generate_invoice(self, path: Optional[Path] = None) -> InvoiceResult:
        """Total, stamp, persist and render the current grid."""

        self.grand_total = refresh_totals(self.grid, self.totals, self.row_count)
        result = InvoiceResult(grand_total=self.grand_total)

        customer = self.customers.selected()
        if customer is None:
            result.error = NO_CUSTOMER_MESSAGE
            return result
        try:
            code = generate_customer_code(customer.company)
        except CustomerCodeError as exc:
            result.error = str(exc)
            return result

        self.refresh_history()
        estimate = next_estimate_number(self.history, code)
        self.estimate_number = estimate
        result.estimate_number = estimate

        for item in self.line_items(code, estimate):
            try:
                self.ledger.upsert_line_item(item)
            except StoreError:
                logger.error("Line item %s not saved", item.entry_id, exc_info=True)
                result.failed_entry_ids.append(item.entry_id)
            else:
                result.saved_entry_ids.append(item.entry_id)

        if path is None:
            path = self.config.invoice_dir / f"{suggest_file_name(customer.company, estimate)}.pdf"
        try:
            result.path = render_invoice(
                path,
                cells=self.render_cells(),
                contact=self.contacts.selected() or Contact(),
                customer=customer,
                estimate_number=estimate,
                grand_total=self.grand_total,
                logo_path=self.config.logo_path,
                valid_days=self.config.valid_days,
            )
        except RenderError as exc:
            logger.error("Invoice not rendered to %s", path, exc_info=True)
            result.error = str(exc)
        except OSError as exc:
            logger.error("Invoice not written to %s", path, exc_info=True)
            result.error = f"Unable to write invoice: {exc}"

        try:
            self.customer_store.upsert(customer, estimate)
        except StoreError:
            logger.error("Customer %r not updated", customer.company, exc_info=True)
        return result
