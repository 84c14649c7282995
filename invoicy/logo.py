"""Install the logo shown on generated invoices."""
from __future__ import annotations

import logging
import shutil
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from .config import AppConfig
from .errors import LogoError

logger = logging.getLogger(__name__)


def install_logo(source: Path, config: AppConfig) -> Path:
    """Copy a JPEG logo to the configured logo path.

    Raises :class:`LogoError` when the file is too large or is not a JPEG.
    """

    source = Path(source)
    size = source.stat().st_size
    if size > config.max_logo_bytes:
        logger.warning("Rejected logo %s: %d bytes exceeds the limit", source, size)
        raise LogoError(
            f"File size exceeds the limit of {config.max_logo_bytes} bytes."
        )
    try:
        with Image.open(source) as image:
            image_format = image.format
            image.verify()
    except (UnidentifiedImageError, OSError) as exc:
        logger.warning("Rejected logo %s: %s", source, exc)
        raise LogoError("Logo must be a readable JPEG image.") from exc
    if image_format != "JPEG":
        logger.warning("Rejected logo %s: format %s", source, image_format)
        raise LogoError("Logo must be a JPEG image.")

    destination = config.logo_path
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, destination)
    logger.info("Logo installed at %s", destination)
    return destination
