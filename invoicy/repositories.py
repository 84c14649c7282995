"""SQLite persistence for line items, contacts, customers and credentials."""
from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import pandas as pd
from pandas.errors import DatabaseError as FrameQueryError

from .config import AppConfig
from .errors import StoreError
from .models import Contact, Customer, LineItem

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS customers (
    company TEXT PRIMARY KEY,
    address TEXT NOT NULL,
    city TEXT NOT NULL,
    postal_code TEXT NOT NULL,
    country TEXT NOT NULL,
    email TEXT NOT NULL DEFAULT '',
    estimate_number INTEGER
);

CREATE TABLE IF NOT EXISTS contacts (
    company TEXT PRIMARY KEY,
    address TEXT NOT NULL,
    city TEXT NOT NULL,
    postal_code TEXT NOT NULL,
    country TEXT NOT NULL,
    name TEXT NOT NULL,
    telephone TEXT NOT NULL,
    email TEXT NOT NULL,
    website TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS data (
    entry_id TEXT PRIMARY KEY,
    cust_id TEXT NOT NULL,
    estimate_number INTEGER NOT NULL,
    row_number INTEGER NOT NULL,
    description TEXT NOT NULL,
    quantity REAL,
    price REAL,
    total REAL
);
CREATE INDEX IF NOT EXISTS idx_data_cust ON data(cust_id);

CREATE TABLE IF NOT EXISTS credentials (
    email TEXT PRIMARY KEY,
    password_hash TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT (datetime('now'))
);
"""

LINE_ITEM_COLUMNS = (
    "entry_id",
    "cust_id",
    "estimate_number",
    "row_number",
    "description",
    "quantity",
    "price",
    "total",
)


@contextmanager
def _store_errors(action: str) -> Iterator[None]:
    try:
        yield
    except (sqlite3.Error, FrameQueryError) as exc:
        raise StoreError(f"Unable to {action}: {exc}") from exc


class Database:
    """Simple SQLite database wrapper opened once at startup."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_config(cls, config: AppConfig) -> "Database":
        return cls(config.db_path)

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    @contextmanager
    def begin(self) -> Iterator[sqlite3.Connection]:
        with self.connect() as conn:
            try:
                yield conn
                conn.commit()
            except Exception:
                conn.rollback()
                raise

    def init_schema(self) -> None:
        with _store_errors("create the schema"), self.begin() as conn:
            conn.executescript(SCHEMA)
        logger.info("Database schema ready at %s", self.db_path)

    def fetch_df(self, query: str, params: Optional[tuple] = None) -> pd.DataFrame:
        with _store_errors("run a report query"), self.connect() as conn:
            return pd.read_sql_query(query, conn, params=params)


# ---------------------------------------------------------------------------
# Line items
# ---------------------------------------------------------------------------


def _line_item_from_row(row: sqlite3.Row) -> LineItem:
    return LineItem(
        entry_id=row["entry_id"],
        cust_id=row["cust_id"],
        estimate_number=int(row["estimate_number"]),
        row_number=int(row["row_number"]),
        description=row["description"],
        quantity=float(row["quantity"] or 0.0),
        price=float(row["price"] or 0.0),
        total=float(row["total"] or 0.0),
    )


class LedgerRepository:
    """Durable line-item history keyed by entry id (last write wins)."""

    def __init__(self, db: Database):
        self._db = db

    def upsert_line_item(self, item: LineItem) -> None:
        with _store_errors(f"save line item {item.entry_id}"), self._db.begin() as conn:
            conn.execute(
                f"""
                INSERT OR REPLACE INTO data ({", ".join(LINE_ITEM_COLUMNS)})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    item.entry_id,
                    item.cust_id,
                    item.estimate_number,
                    item.row_number,
                    item.description,
                    item.quantity,
                    item.price,
                    item.total,
                ),
            )
        logger.info("Line item %s saved", item.entry_id)

    def load_all_line_items(self) -> list[LineItem]:
        with _store_errors("load line items"), self._db.connect() as conn:
            rows = conn.execute(
                f"""
                SELECT {", ".join(LINE_ITEM_COLUMNS)}
                FROM data
                ORDER BY cust_id, estimate_number, row_number
                """
            ).fetchall()
        return [_line_item_from_row(row) for row in rows]

    def history_frame(self) -> pd.DataFrame:
        return self._db.fetch_df(
            f"SELECT {', '.join(LINE_ITEM_COLUMNS)} FROM data "
            "ORDER BY cust_id, estimate_number, row_number"
        )


def estimate_summary(frame: pd.DataFrame) -> pd.DataFrame:
    """Collapse line-item history into one row per customer estimate."""

    columns = ["cust_id", "estimate_number", "items", "total"]
    if frame.empty:
        return pd.DataFrame(columns=columns)
    summary = (
        frame.groupby(["cust_id", "estimate_number"], as_index=False)
        .agg(items=("entry_id", "count"), total=("total", "sum"))
        .sort_values(["cust_id", "estimate_number"])
        .reset_index(drop=True)
    )
    return summary[columns]


# ---------------------------------------------------------------------------
# Contacts and customers
# ---------------------------------------------------------------------------


class ContactRepository:
    def __init__(self, db: Database):
        self._db = db

    def upsert(self, contact: Contact) -> None:
        with _store_errors(f"save contact {contact.company!r}"), self._db.begin() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO contacts
                    (company, address, city, postal_code, country, name, telephone, email, website)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    contact.company,
                    contact.address,
                    contact.city,
                    contact.postal_code,
                    contact.country,
                    contact.name,
                    contact.telephone,
                    contact.email,
                    contact.website,
                ),
            )
        logger.info("Contact %r saved", contact.company)

    def list_all(self) -> list[Contact]:
        with _store_errors("load contacts"), self._db.connect() as conn:
            rows = conn.execute(
                """
                SELECT company, address, city, postal_code, country, name, telephone, email, website
                FROM contacts
                ORDER BY company
                """
            ).fetchall()
        return [Contact(**dict(row)) for row in rows]


class CustomerRepository:
    def __init__(self, db: Database):
        self._db = db

    def upsert(self, customer: Customer, estimate_number: Optional[int] = None) -> None:
        """Insert or update ``customer``.

        Without ``estimate_number`` the last issued number already stored for
        the company is kept.
        """

        with _store_errors(f"save customer {customer.company!r}"), self._db.begin() as conn:
            conn.execute(
                """
                INSERT INTO customers
                    (company, address, city, postal_code, country, email, estimate_number)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(company) DO UPDATE SET
                    address=excluded.address,
                    city=excluded.city,
                    postal_code=excluded.postal_code,
                    country=excluded.country,
                    email=excluded.email,
                    estimate_number=COALESCE(excluded.estimate_number, customers.estimate_number)
                """,
                (
                    customer.company,
                    customer.address,
                    customer.city,
                    customer.postal_code,
                    customer.country,
                    customer.email,
                    estimate_number,
                ),
            )
        logger.info("Customer %r saved", customer.company)

    def list_all(self) -> list[Customer]:
        with _store_errors("load customers"), self._db.connect() as conn:
            rows = conn.execute(
                """
                SELECT company, address, city, postal_code, country, email
                FROM customers
                ORDER BY company
                """
            ).fetchall()
        return [Customer(**dict(row)) for row in rows]

    def last_estimate_number(self, company: str) -> Optional[int]:
        with _store_errors(f"load customer {company!r}"), self._db.connect() as conn:
            row = conn.execute(
                "SELECT estimate_number FROM customers WHERE company=?",
                (company,),
            ).fetchone()
        if not row or row["estimate_number"] is None:
            return None
        return int(row["estimate_number"])


class CredentialRepository:
    """E-mail credentials; only password hashes are stored."""

    def __init__(self, db: Database):
        self._db = db

    def save(self, email: str, password_hash: str) -> None:
        with _store_errors(f"save credentials for {email!r}"), self._db.begin() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO credentials(email, password_hash) VALUES (?, ?)",
                (email, password_hash),
            )

    def fetch_hash(self, email: str) -> Optional[str]:
        with _store_errors(f"load credentials for {email!r}"), self._db.connect() as conn:
            row = conn.execute(
                "SELECT password_hash FROM credentials WHERE email=?",
                (email,),
            ).fetchone()
        return row["password_hash"] if row else None
