"""Application configuration helpers."""
from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv

APP_STORAGE_SUBDIR = "invoicy"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class AppConfig:
    """Hold runtime configuration options for the invoicing app."""

    data_dir: Path
    db_url: str
    logo_path: Path
    invoice_dir: Path
    max_logo_bytes: int
    valid_days: int
    default_rows: int
    log_level: str

    @property
    def db_path(self) -> Path:
        prefix = "sqlite:///"
        if self.db_url.startswith(prefix):
            return Path(self.db_url[len(prefix):]).expanduser()
        if "://" in self.db_url:
            raise ValueError("Only SQLite URLs are supported.")
        return Path(self.db_url).expanduser()


def get_storage_dir() -> Path:
    """Return the default writable directory for application data."""

    if sys.platform.startswith("win"):
        base_dir = Path(os.getenv("APPDATA", Path.home()))
    elif sys.platform == "darwin":
        base_dir = Path.home() / "Library" / "Application Support"
    else:
        base_dir = Path(os.getenv("XDG_DATA_HOME", Path.home() / ".local" / "share"))
    return base_dir / APP_STORAGE_SUBDIR


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, ""))
    except ValueError:
        return default


def _path_env(name: str, default: Path) -> Path:
    value = os.getenv(name)
    return Path(value).expanduser() if value else default


def load_config() -> AppConfig:
    """Load settings from ``.env`` and environment variables with sane defaults."""

    load_dotenv(find_dotenv(usecwd=True))
    data_dir = _path_env("INVOICY_DATA_DIR", get_storage_dir())
    data_dir.mkdir(parents=True, exist_ok=True)

    db_url = os.getenv("INVOICY_DB_URL") or f"sqlite:///{(data_dir / 'invoicy.db').as_posix()}"
    logo_path = _path_env("INVOICY_LOGO_PATH", data_dir / "images" / "logo.jpg")
    invoice_dir = _path_env("INVOICY_INVOICE_DIR", data_dir / "invoices")
    logo_path.parent.mkdir(parents=True, exist_ok=True)
    invoice_dir.mkdir(parents=True, exist_ok=True)

    return AppConfig(
        data_dir=data_dir,
        db_url=db_url,
        logo_path=logo_path,
        invoice_dir=invoice_dir,
        max_logo_bytes=_int_env("INVOICY_MAX_LOGO_BYTES", 5_000_000),
        valid_days=_int_env("INVOICY_VALID_DAYS", 7),
        default_rows=max(_int_env("INVOICY_DEFAULT_ROWS", 1), 0),
        log_level=(os.getenv("INVOICY_LOG_LEVEL") or "INFO").strip().upper(),
    )


def configure_logging(level: Optional[str] = None) -> None:
    """Install a single stream handler on the root logger.

    Called once by the entry point. Repeated calls only adjust the level.
    """

    root = logging.getLogger()
    resolved = logging.getLevelName((level or "INFO").upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO
    root.setLevel(resolved)
    if any(getattr(handler, "_invoicy", False) for handler in root.handlers):
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._invoicy = True  # type: ignore[attr-defined]
    root.addHandler(handler)
