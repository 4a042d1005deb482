"""
Core domain models and pure logic.

This package contains the data types, the reference extractor and the
content namer. Nothing in here touches the network or the disk.
"""

from .types import (
    FileType,
    MigrationResult,
    Payload,
    PublishedObject,
    Reference,
    ReplacementMapping,
)
from .extractor import extract_references, unique_urls
from .naming import content_hash, content_path

__all__ = [
    "FileType",
    "MigrationResult",
    "Payload",
    "PublishedObject",
    "Reference",
    "ReplacementMapping",
    "extract_references",
    "unique_urls",
    "content_hash",
    "content_path",
]
