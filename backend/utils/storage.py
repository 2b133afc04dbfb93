# backend/utils/storage.py
import logging
import os
import shutil
import uuid
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from config import settings
from services.errors import InvalidInputError, StoreError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp"}


def upload_dir() -> Path:
    path = Path(settings.UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def _file_size(file: UploadFile) -> int:
    file.file.seek(0, os.SEEK_END)
    size = file.file.tell()
    file.file.seek(0)
    return size


def validate_image(file: UploadFile) -> None:
    """Reject uploads that are not a supported image or are too large."""
    if file.content_type not in ALLOWED_IMAGE_TYPES:
        raise InvalidInputError("Invalid file type. Allowed: JPEG, PNG, WEBP")
    if _file_size(file) > settings.MAX_IMAGE_BYTES:
        raise InvalidInputError(f"Image must be {settings.MAX_IMAGE_BYTES // (1024 * 1024)} MB or smaller")


def save_image(file: UploadFile) -> str:
    """Store an uploaded image and return the URL it is served under."""
    validate_image(file)

    ext = Path(file.filename or "").suffix.lower() or ".bin"
    unique_filename = f"{uuid.uuid4()}{ext}"
    save_path = upload_dir() / unique_filename
    try:
        with open(save_path, "wb") as buffer:
            shutil.copyfileobj(file.file, buffer)
    except OSError as e:
        logger.error("Image save error for %s: %s", save_path, e)
        raise StoreError("Could not store the uploaded image") from e
    finally:
        file.file.close()

    return f"{settings.UPLOAD_URL_PREFIX.rstrip('/')}/{unique_filename}"


def _path_for_url(image_url: str) -> Optional[Path]:
    prefix = settings.UPLOAD_URL_PREFIX.rstrip("/") + "/"
    if not image_url or not image_url.startswith(prefix):
        return None
    name = image_url[len(prefix):]
    # Only plain file names inside the upload directory
    if not name or "/" in name or name in {".", ".."}:
        return None
    return upload_dir() / name


def delete_image(image_url: Optional[str]) -> bool:
    """Remove a stored image. Failures are logged, never raised."""
    path = _path_for_url(image_url)
    if path is None:
        return False
    try:
        path.unlink()
        return True
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.warning("Could not delete stored image %s: %s", path, e)
        return False
