"""
Upload Service
==============

Stores uploaded images under the configured upload directory and
returns the public URL they are served from (`/uploads/...`).

Only image content types are accepted and files larger than
MAX_UPLOAD_SIZE are rejected.
"""

import uuid
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from app.core.config import settings
from app.core.exceptions import FileUploadError
from app.core.logging import get_logger

logger = get_logger(__name__)

UPLOAD_URL_PREFIX = "/uploads/"

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}


def _extension(file: UploadFile) -> str:
    suffix = Path(file.filename or "").suffix.lower()
    if suffix in ALLOWED_EXTENSIONS:
        return suffix
    # Fall back on the subtype, e.g. image/png
    subtype = (file.content_type or "").split("/")[-1].lower()
    return f".{subtype}" if f".{subtype}" in ALLOWED_EXTENSIONS else ".jpg"


def save_image(file: UploadFile, folder: str, prefix: str) -> str:
    """
    Validate and store an uploaded image.

    Args:
        file: The uploaded file
        folder: Sub-directory of the upload dir, e.g. "members"
        prefix: File name prefix, e.g. "member"

    Returns:
        Public URL of the stored file

    Raises:
        FileUploadError: Missing file, non-image content or oversize file
    """
    if file is None or not file.filename:
        raise FileUploadError("No file provided")

    if not (file.content_type or "").startswith("image/"):
        raise FileUploadError("Only image files are allowed")

    content = file.file.read(settings.MAX_UPLOAD_SIZE + 1)
    if len(content) > settings.MAX_UPLOAD_SIZE:
        raise FileUploadError(
            f"File too large (max {settings.MAX_UPLOAD_SIZE // (1024 * 1024)} MB)"
        )

    target_dir = settings.upload_path / folder
    target_dir.mkdir(parents=True, exist_ok=True)

    filename = f"{prefix}-{uuid.uuid4().hex}{_extension(file)}"
    (target_dir / filename).write_bytes(content)

    logger.info("file_uploaded", folder=folder, filename=filename, size=len(content))
    return f"{UPLOAD_URL_PREFIX}{folder}/{filename}"


def delete_upload(url: Optional[str]) -> None:
    """Remove a previously stored file given its public URL."""
    if not url or not url.startswith(UPLOAD_URL_PREFIX):
        return

    relative = url[len(UPLOAD_URL_PREFIX):]
    path = (settings.upload_path / relative).resolve()

    # Never touch anything outside the upload directory
    if settings.upload_path.resolve() not in path.parents:
        return

    path.unlink(missing_ok=True)
    logger.info("file_deleted", path=relative)
