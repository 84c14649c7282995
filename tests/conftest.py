import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from invoicy.config import AppConfig
from invoicy.repositories import Database
from invoicy.session import InvoiceSession


def build_config(tmp_path: Path, **overrides) -> AppConfig:
    values = dict(
        data_dir=tmp_path,
        db_url=f"sqlite:///{tmp_path / 'test.db'}",
        logo_path=tmp_path / "images" / "logo.jpg",
        invoice_dir=tmp_path / "invoices",
        max_logo_bytes=5_000_000,
        valid_days=7,
        default_rows=1,
        log_level="INFO",
    )
    values.update(overrides)
    return AppConfig(**values)


@pytest.fixture()
def config(tmp_path):
    return build_config(tmp_path)


@pytest.fixture()
def database(config):
    db = Database.from_config(config)
    db.init_schema()
    return db


@pytest.fixture()
def session(database, config):
    return InvoiceSession.open(database, config)


@pytest.fixture()
def make_config(tmp_path):
    def _make(**overrides):
        return build_config(tmp_path, **overrides)

    return _make
