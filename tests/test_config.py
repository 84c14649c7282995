import logging
import os

import pytest

from invoicy.config import configure_logging, load_config


ENV_NAMES = (
    "INVOICY_DB_URL",
    "INVOICY_LOGO_PATH",
    "INVOICY_INVOICE_DIR",
    "INVOICY_MAX_LOGO_BYTES",
    "INVOICY_VALID_DAYS",
    "INVOICY_DEFAULT_ROWS",
    "INVOICY_LOG_LEVEL",
)


@pytest.fixture()
def clean_env(monkeypatch, tmp_path):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("INVOICY_DATA_DIR", str(tmp_path / "data"))
    yield monkeypatch
    for name in ENV_NAMES:
        os.environ.pop(name, None)


def test_load_config_defaults_under_data_dir(clean_env, tmp_path):
    config = load_config()

    data_dir = tmp_path / "data"
    assert config.data_dir == data_dir
    assert config.db_path == data_dir / "invoicy.db"
    assert config.logo_path == data_dir / "images" / "logo.jpg"
    assert config.invoice_dir.is_dir()
    assert config.valid_days == 7
    assert config.default_rows == 1
    assert config.log_level == "INFO"


def test_malformed_integers_fall_back_to_defaults(clean_env):
    clean_env.setenv("INVOICY_VALID_DAYS", "soon")
    clean_env.setenv("INVOICY_MAX_LOGO_BYTES", "1024")

    config = load_config()

    assert config.valid_days == 7
    assert config.max_logo_bytes == 1024


def test_dotenv_file_is_read(clean_env, tmp_path):
    (tmp_path / ".env").write_text("INVOICY_DEFAULT_ROWS=3\n")

    assert load_config().default_rows == 3


def test_only_sqlite_urls_are_supported(clean_env):
    clean_env.setenv("INVOICY_DB_URL", "postgresql://localhost/invoicy")

    with pytest.raises(ValueError):
        _ = load_config().db_path


def test_configure_logging_installs_one_handler():
    root = logging.getLogger()
    before_handlers = list(root.handlers)
    before_level = root.level

    try:
        configure_logging("debug")
        configure_logging("warning")

        assert len(root.handlers) == len(before_handlers) + 1
        assert root.level == logging.WARNING
    finally:
        for handler in root.handlers[:]:
            if handler not in before_handlers:
                root.removeHandler(handler)
        root.setLevel(before_level)
