"""
Movie image storage on the local filesystem.

Files live under ``<STATIC_DIR>/<MOVIE_IMAGES_DIR>/`` with a generated unique
name, and are served by the StaticFiles mount at ``STATIC_URL``.
"""
import logging
import shutil
import uuid
from pathlib import Path
from typing import BinaryIO

from app.core.config import settings

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}
_COPY_CHUNK_SIZE = 1024 * 1024


class InvalidImageError(Exception):
    """Raised when an uploaded file is not an accepted image."""


def _static_root() -> Path:
    return Path(settings.STATIC_DIR).resolve()


def public_image_url(local_path: str) -> str:
    """Build the public URL of a file stored under the static root."""
    base = settings.PUBLIC_BASE_URL.rstrip("/")
    prefix = "/" + settings.STATIC_URL.strip("/")
    return f"{base}{prefix}/{local_path}"


def save_movie_image(source: BinaryIO, filename: str, movie_id: int) -> tuple[str, str]:
    """
    Persist an uploaded image for *movie_id*.

    Returns:
        (public_url, local_path) where local_path is relative to STATIC_DIR.

    Raises:
        InvalidImageError: the file name has no accepted image extension.
    """
    extension = Path(filename or "").suffix.lower()
    if extension not in ALLOWED_IMAGE_EXTENSIONS:
        raise InvalidImageError(
            f"Unsupported image type '{extension or filename}'. "
            f"Allowed: {', '.join(sorted(ALLOWED_IMAGE_EXTENSIONS))}"
        )

    target_dir = _static_root() / settings.MOVIE_IMAGES_DIR
    target_dir.mkdir(parents=True, exist_ok=True)

    stored_name = f"{movie_id}_{uuid.uuid4().hex}{extension}"
    target = target_dir / stored_name

    if hasattr(source, "seek"):
        source.seek(0)
    with target.open("wb") as buffer:
        shutil.copyfileobj(source, buffer, length=_COPY_CHUNK_SIZE)

    local_path = f"{settings.MOVIE_IMAGES_DIR.strip('/')}/{stored_name}"
    logger.info("Stored image for movie %s at %s", movie_id, local_path)
    return public_image_url(local_path), local_path


def delete_movie_image(local_path: str | None) -> bool:
    """
    Remove a stored image. Returns True when a file was deleted.

    Paths resolving outside the static root are ignored.
    """
    if not local_path:
        return False

    root = _static_root()
    target = (root / local_path).resolve()
    if root not in target.parents:
        logger.warning("Refusing to delete image outside static root: %s", local_path)
        return False

    try:
        target.unlink()
    except FileNotFoundError:
        return False
    logger.info("Deleted image %s", local_path)
    return True
