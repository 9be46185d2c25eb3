from __future__ import annotations

import logging
from pathlib import Path
from uuid import uuid4

from fastapi import UploadFile

from menu_builder.core.config import MAX_UPLOAD_SIZE_BYTES, UPLOADS_DIR
from menu_builder.core.errors import ValidationFailed

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {"image/png", "image/jpeg", "image/gif", "image/webp"}
ALLOWED_IMAGE_SUFFIXES = {".png", ".jpg", ".jpeg", ".gif", ".webp"}


class LocalImageStorage:
    """Writes uploaded images under the static uploads directory.

    ``store`` returns the path the app serves the file from, e.g.
    ``/uploads/<hex>.png``; callers prefix it with their public base URL.
    """

    def __init__(self, directory: str | Path = UPLOADS_DIR, url_prefix: str = "/uploads") -> None:
        self.directory = Path(directory)
        self.url_prefix = url_prefix.rstrip("/")

    def store(self, data: bytes, filename: str) -> str:
        suffix = Path(filename or "").suffix.lower()
        if suffix not in ALLOWED_IMAGE_SUFFIXES:
            suffix = ""
        stored_name = f"{uuid4().hex}{suffix}"

        self.directory.mkdir(parents=True, exist_ok=True)
        (self.directory / stored_name).write_bytes(data)
        logger.info("stored image name=%s bytes=%s", stored_name, len(data))
        return f"{self.url_prefix}/{stored_name}"


def read_image_upload(file: UploadFile, max_bytes: int = MAX_UPLOAD_SIZE_BYTES) -> bytes:
    if not file.filename:
        raise ValidationFailed("Invalid file")

    content_type = (file.content_type or "").split(";")[0].strip().lower()
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise ValidationFailed("Unsupported file type, expected an image")

    data = file.file.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise ValidationFailed(f"File exceeds {max_bytes // (1024 * 1024)}MB")
    if not data:
        raise ValidationFailed("Empty file")
    return data
