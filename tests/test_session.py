import logging

import pytest

from invoicy.errors import RenderError, StoreError
from invoicy.models import Contact, Customer


def _add_customer(session, company="Acme Corporation"):
    session.customer_draft = Customer(company=company, city="Paris")
    return session.save_customer_draft()


def _fill(session, rows):
    while session.row_count < len(rows):
        session.add_row()
    for row, (description, quantity, price) in enumerate(rows):
        session.set_cell(row, 1, description)
        session.set_cell(row, 2, quantity)
        session.set_cell(row, 3, price)


def test_new_session_shows_default_rows(session):
    assert session.row_count == 1
    assert session.grid.get(0, 0) == "0"
    assert session.estimate_number == 1


def test_tick_recomputes_totals_and_reports_missing_customer(session):
    _fill(session, [("Doors", "3", "4.5")])

    tick = session.tick()

    assert tick.grand_total == pytest.approx(13.5)
    assert tick.customer_code is None
    assert tick.message == "Select a customer first."


def test_generate_invoice_persists_rows_and_renders_pdf(session):
    assert _add_customer(session) is None
    session.contact_draft = Contact(company="Northwind", name="Ana")
    assert session.save_contact_draft() is None
    _fill(session, [("Doors", "3", "4.5"), ("Labour", "2", "10")])

    result = session.generate_invoice()

    assert result.ok
    assert result.estimate_number == 1
    assert result.saved_entry_ids == ["ACME-1-0", "ACME-1-1"]
    assert result.failed_entry_ids == []
    assert result.grand_total == pytest.approx(33.5)
    assert result.path.name == "acme_corporation-1.pdf"
    assert result.path.read_bytes().startswith(b"%PDF")

    history = session.ledger.load_all_line_items()
    assert [item.total for item in history] == [pytest.approx(13.5), pytest.approx(20.0)]
    assert session.customer_store.last_estimate_number("Acme Corporation") == 1


def test_estimate_number_advances_per_customer(session, tmp_path):
    _add_customer(session)
    _fill(session, [("Doors", "1", "1")])
    session.generate_invoice(tmp_path / "first.pdf")

    assert session.tick().estimate_number == 2
    second = session.generate_invoice(tmp_path / "second.pdf")
    assert second.saved_entry_ids == ["ACME-2-0"]

    _add_customer(session, "Widget Works")
    tick = session.tick()
    assert tick.customer_code == "WIDG"
    assert tick.estimate_number == 1


def test_short_company_name_aborts_generation(session):
    message = _add_customer(session, "Ace")

    assert "Ace" in message
    result = session.generate_invoice()

    assert not result.ok
    assert "Ace" in result.error
    assert result.path is None
    assert session.ledger.load_all_line_items() == []


def test_blank_company_draft_is_not_saved(session):
    session.customer_draft = Customer(company="   ")

    assert session.save_customer_draft() == "Input cannot be empty"
    assert len(session.customers) == 0


def test_persistence_failure_is_logged_not_raised(session, monkeypatch, caplog, tmp_path):
    _add_customer(session)
    _fill(session, [("Doors", "1", "5")])

    def _fail(item):
        raise StoreError("disk full")

    monkeypatch.setattr(session.ledger, "upsert_line_item", _fail)
    with caplog.at_level(logging.ERROR, logger="invoicy.session"):
        result = session.generate_invoice(tmp_path / "out.pdf")

    assert result.ok
    assert result.failed_entry_ids == ["ACME-1-0"]
    assert result.path.exists()
    assert "ACME-1-0" in caplog.text


def test_history_load_failure_keeps_previous_history(session, monkeypatch):
    _add_customer(session)
    _fill(session, [("Doors", "1", "5")])
    session.generate_invoice()
    previous = session.refresh_history()

    def _fail():
        raise StoreError("locked")

    monkeypatch.setattr(session.ledger, "load_all_line_items", _fail)

    assert session.refresh_history() == previous
    assert session.tick().estimate_number == 2


def test_deleted_row_keeps_cells_and_cached_total(session):
    _fill(session, [("Doors", "3", "4.5"), ("Labour", "2", "10")])
    session.tick()

    session.delete_row()
    tick = session.tick()

    assert session.row_count == 1
    assert session.grid.get(1, 1) == "Labour"
    assert tick.grand_total == pytest.approx(33.5)
    assert all(position[0] == 0 for _, position in session.render_cells())

    session.add_row()
    assert session.grid.get(1, 1) == "Labour"


def test_delete_row_never_goes_negative(session):
    session.delete_row()
    session.delete_row()

    assert session.row_count == 0


def test_import_csv_appends_rows(session, tmp_path):
    csv_path = tmp_path / "items.csv"
    csv_path.write_text("Description,Quantity,Price\nBolts,10,0.25\nNuts,x,1\n")

    count = session.import_csv(csv_path)

    assert count == 2
    assert session.row_count == 3
    assert session.grid.get(1, 1) == "Bolts"
    assert session.tick().grand_total == pytest.approx(2.5)


def test_email_credentials_store_only_a_hash(session):
    assert session.credentials.register("me@example.com", "s3cret") is None
    stored = session.credentials.credentials.fetch_hash("me@example.com")

    assert "s3cret" not in stored
    assert session.credentials.check("me@example.com", "s3cret")
    assert not session.credentials.check("me@example.com", "wrong")
    assert session.credentials.register("", "x") == "Input cannot be empty"


@pytest.mark.parametrize(
    "error",
    [OSError("read-only file system"), RenderError("A table row is too tall to fit on one page.")],
)
def test_render_failure_is_reported_after_rows_are_saved(
    session, monkeypatch, caplog, tmp_path, error
):
    _add_customer(session)
    _fill(session, [("Doors", "1", "5")])

    def _fail(path, **kwargs):
        raise error

    monkeypatch.setattr("invoicy.session.render_invoice", _fail)
    with caplog.at_level(logging.ERROR, logger="invoicy.session"):
        result = session.generate_invoice(tmp_path / "out.pdf")

    assert not result.ok
    assert str(error) in result.error
    assert result.path is None
    assert result.saved_entry_ids == ["ACME-1-0"]
    assert "out.pdf" in caplog.text
    assert session.customer_store.last_estimate_number("Acme Corporation") == 1


def test_overlong_description_returns_an_error_result(session, tmp_path):
    _add_customer(session)
    _fill(session, [("word " * 20000, "1", "5")])

    result = session.generate_invoice(tmp_path / "tall.pdf")

    assert result.error == "A table row is too tall to fit on one page."
    assert result.saved_entry_ids == ["ACME-1-0"]
    assert not (tmp_path / "tall.pdf").exists()


def test_resaving_customer_keeps_last_estimate(session):
    _add_customer(session)
    _fill(session, [("Doors", "1", "5")])
    session.generate_invoice()

    assert _add_customer(session) is None
    assert session.last_issued_estimate() == 1
    assert session.customers.selected().city == "Paris"


def test_last_issued_estimate_without_selection(session):
    assert session.last_issued_estimate() is None


def test_set_cell_rejects_unknown_column(session):
    with pytest.raises(IndexError):
        session.set_cell(0, 5, "nope")
    assert session.grid.get(0, 5) is None
