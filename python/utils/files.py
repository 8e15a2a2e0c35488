"""
Upload helpers: content-type/size checks and filename sanitizing.
"""

import os
import re
from typing import Optional

from fastapi import UploadFile

from core.exceptions import ValidationError

ALLOWED_CONTENT_TYPES = {
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/bmp",
    "image/gif",
    "image/webp",
}

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


def validate_upload(file: Optional[UploadFile], field: str, max_bytes: int) -> None:
    """
    Check an uploaded file part before reading it.

    Raises:
        ValidationError: missing part, missing filename, unsupported type or oversize
    """
    if file is None:
        raise ValidationError(f"File '{field}' is required", field=field)

    if not file.filename:
        raise ValidationError(f"File '{field}' must have a filename", field=field)

    content_type = (file.content_type or "").lower()
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise ValidationError(
            f"Unsupported file type for '{field}': {content_type or 'unknown'}. "
            f"Allowed: {', '.join(sorted(ALLOWED_CONTENT_TYPES))}",
            field=field
        )

    if file.size is not None and file.size > max_bytes:
        raise ValidationError(
            f"File '{field}' exceeds maximum size of {max_bytes // (1024 * 1024)}MB",
            field=field
        )


async def read_upload(file: Optional[UploadFile], field: str, max_bytes: int) -> bytes:
    """Validate and read an upload. Empty payloads are rejected."""
    validate_upload(file, field, max_bytes)

    data = await file.read()
    if not data:
        raise ValidationError(f"File '{field}' is empty", field=field)
    if len(data) > max_bytes:
        raise ValidationError(
            f"File '{field}' exceeds maximum size of {max_bytes // (1024 * 1024)}MB",
            field=field
        )
    return data


def sanitize_filename(filename: Optional[str], max_length: int = 50) -> str:
    """
    Reduce an upload filename to [A-Za-z0-9_-] without its extension.

    Returns "unknown" when nothing usable is left.
    """
    if not filename:
        return "unknown"

    stem, _ = os.path.splitext(os.path.basename(filename))
    cleaned = _UNSAFE_CHARS.sub("_", stem)[:max_length]
    return cleaned or "unknown"
