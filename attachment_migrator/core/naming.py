"""Content-addressed naming for published attachments."""

from __future__ import annotations

import hashlib

from .types import FileType

HASH_LENGTH = 32


def content_hash(url: str) -> str:
    """Return the first 32 hex characters of the SHA-256 of the URL.

    The source URL is hashed rather than the bytes, so the same reference
    keeps its name even when compression settings change the payload.
    """
    return hashlib.sha256(url.encode("utf-8")).hexdigest()[:HASH_LENGTH]


def content_path(directory: str, url: str, file_type: FileType) -> str:
    """Build the destination path ``directory/<hash>.<ext>`` for a URL."""
    filename = f"{content_hash(url)}.{file_type.extension}"
    directory = directory.strip("/")
    if not directory:
        return filename
    return f"{directory}/{filename}"
