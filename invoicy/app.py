"""Streamlit front end for the invoice form."""
from __future__ import annotations

import tempfile
from dataclasses import fields
from pathlib import Path
from typing import Mapping, MutableMapping, Optional

import pandas as pd
import streamlit as st

from .config import configure_logging, load_config
from .errors import LogoError
from .models import (
    COL_DESCRIPTION,
    COL_PRICE,
    COL_QUANTITY,
    COL_ROW_NUMBER,
    COL_TOTAL,
    COLUMN_HEADINGS,
)
from .logo import install_logo
from .repositories import Database, estimate_summary
from .session import InvoiceSession

EDITABLE_COLUMNS = (COL_DESCRIPTION, COL_QUANTITY, COL_PRICE)
LAST_INVOICE_KEY = "last_invoice_path"


def grid_frame(session: InvoiceSession) -> pd.DataFrame:
    """Visible grid rows as a frame whose columns follow the table headings."""

    records = []
    for row in range(session.row_count):
        cells = session.grid.row_cells(row)
        records.append(
            {
                heading: cells.get(col, "")
                for col, heading in enumerate(COLUMN_HEADINGS)
            }
        )
    return pd.DataFrame(records, columns=list(COLUMN_HEADINGS))


def apply_grid_edits(session: InvoiceSession, frame: pd.DataFrame) -> int:
    """Copy edited cells back into the grid; return how many changed."""

    changed = 0
    for row, record in enumerate(frame.to_dict("records")):
        if row >= session.row_count:
            break
        for col in EDITABLE_COLUMNS:
            text = record.get(COLUMN_HEADINGS[col])
            text = "" if text is None or (isinstance(text, float) and pd.isna(text)) else str(text)
            if session.grid.get(row, col) != text:
                session.set_cell(row, col, text)
                changed += 1
    return changed


def remember_invoice(state: MutableMapping, path: Path) -> None:
    state[LAST_INVOICE_KEY] = str(path)


def remembered_invoice(state: Mapping) -> Optional[Path]:
    """Last generated invoice that still exists, kept across reruns."""

    value = state.get(LAST_INVOICE_KEY)
    if not value:
        return None
    path = Path(value)
    return path if path.exists() else None


def _get_session() -> InvoiceSession:
    if "invoice_session" not in st.session_state:
        config = load_config()
        configure_logging(config.log_level)
        db = Database.from_config(config)
        db.init_schema()
        st.session_state["invoice_session"] = InvoiceSession.open(db, config)
    return st.session_state["invoice_session"]


def _draft_form(title: str, draft, key: str) -> bool:
    with st.form(key):
        st.caption(title)
        values = {}
        for item in fields(draft):
            label = item.name.replace("_", " ").title()
            values[item.name] = st.text_input(label, value=getattr(draft, item.name))
        submitted = st.form_submit_button("Save", use_container_width=True)
    if submitted:
        for name, value in values.items():
            setattr(draft, name, value)
    return submitted


def _sidebar(session: InvoiceSession) -> None:
    with st.sidebar:
        st.subheader("Contact")
        if session.contacts.records:
            choice = st.selectbox(
                "Select Contact",
                range(len(session.contacts)),
                index=session.contacts.index,
                format_func=lambda idx: session.contacts.labels()[idx],
            )
            session.select_contact(choice)
        if _draft_form("+ contact", session.contact_draft, "contact_form"):
            error = session.save_contact_draft()
            if error:
                st.error(error)

        st.subheader("Customer")
        if session.customers.records:
            choice = st.selectbox(
                "Select Customer",
                range(len(session.customers)),
                index=session.customers.index,
                format_func=lambda idx: session.customers.labels()[idx],
            )
            if choice != session.customers.index:
                error = session.select_customer(choice)
                if error:
                    st.error(error)
            last = session.last_issued_estimate()
            if last is not None:
                st.caption(f"Last estimate issued: {last}")
        if _draft_form("+ customer", session.customer_draft, "customer_form"):
            error = session.save_customer_draft()
            if error:
                st.error(error)

        st.subheader("Logo")
        upload = st.file_uploader("Upload logo", type=["jpg", "jpeg"])
        if upload is not None and st.button("Use this logo"):
            with tempfile.NamedTemporaryFile(suffix=".jpg", delete=False) as handle:
                handle.write(upload.getbuffer())
                temp_path = Path(handle.name)
            try:
                install_logo(temp_path, session.config)
                st.success(f"Selected file: {upload.name}")
            except LogoError as exc:
                st.error(str(exc))
            finally:
                temp_path.unlink(missing_ok=True)

        st.subheader("Email")
        with st.form("email_form"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            if st.form_submit_button("Submit"):
                error = session.credentials.register(email, password)
                if error:
                    st.error(error)
                else:
                    st.success("Credentials saved.")


def _table(session: InvoiceSession) -> None:
    edited = st.data_editor(
        grid_frame(session),
        hide_index=True,
        use_container_width=True,
        disabled=[COLUMN_HEADINGS[COL_ROW_NUMBER], COLUMN_HEADINGS[COL_TOTAL]],
        key=f"grid_editor_{session.row_count}",
    )
    if apply_grid_edits(session, edited):
        st.rerun()

    left, right, _ = st.columns([1, 1, 4])
    if left.button("Add Row"):
        session.add_row()
        st.rerun()
    if right.button("Delete Row"):
        session.delete_row()
        st.rerun()

    items_csv = st.file_uploader("Import items CSV", type=["csv"])
    if items_csv is not None and st.button("Import rows"):
        try:
            count = session.import_csv(items_csv)
        except ValueError as exc:
            st.error(str(exc))
        else:
            st.success(f"Imported {count} row(s).")
            st.rerun()


def _generate(session: InvoiceSession) -> None:
    file_name = st.text_input("File name", value=session.suggested_file_name())
    if st.button("Generate Invoice", type="primary"):
        target = session.config.invoice_dir / f"{file_name or session.suggested_file_name()}.pdf"
        result = session.generate_invoice(target)
        if result.error:
            st.error(result.error)
            return
        if result.failed_entry_ids:
            st.warning(f"{len(result.failed_entry_ids)} row(s) could not be saved.")
        st.progress(100)
        remember_invoice(st.session_state, result.path)

    path = remembered_invoice(st.session_state)
    if path is not None:
        st.success(f"File saved to: {path}")
        st.download_button(
            "Download PDF",
            data=path.read_bytes(),
            file_name=path.name,
            mime="application/pdf",
        )


def main() -> None:
    st.set_page_config(page_title="Invoicy", page_icon="🧾", layout="wide")
    session = _get_session()
    _sidebar(session)

    tick = session.tick()
    st.title("Estimate")
    if tick.message:
        st.info(tick.message)
    st.caption(f"Estimate No.: {tick.estimate_number}")
    _table(session)
    st.metric("Grand Total", f"{tick.grand_total:,.2f}")
    _generate(session)

    with st.expander("Estimate history"):
        st.dataframe(
            estimate_summary(session.ledger.history_frame()),
            hide_index=True,
            use_container_width=True,
        )
