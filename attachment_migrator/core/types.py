"""
Core data types for the Attachment Migrator.

This module defines the values passed along the pipeline:
- Reference: An embedded image found in the source text
- FileType: Closed set of detected payload types
- Payload: Downloaded (and possibly transformed) bytes with their type
- PublishedObject: Where a payload ended up in the destination store
- ReplacementMapping: Original and published location of one reference
- MigrationResult: Everything a run produces
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class FileType(Enum):
    """Detected type of a payload, carrying its canonical file extension.

    UNKNOWN is used whenever detection fails; it maps to the generic
    ``bin`` extension so naming never has to special-case it.
    """

    JPEG = "jpg"
    PNG = "png"
    GIF = "gif"
    WEBP = "webp"
    BMP = "bmp"
    TIFF = "tif"
    ICO = "ico"
    AVIF = "avif"
    HEIC = "heic"
    SVG = "svg"
    PDF = "pdf"
    MP4 = "mp4"
    MOV = "mov"
    WEBM = "webm"
    ZIP = "zip"
    UNKNOWN = "bin"

    @property
    def extension(self) -> str:
        return self.value


@dataclass(frozen=True)
class Reference:
    """An embedded image reference found in the source text.

    Attributes:
        original_text: The exact markup that matched (markdown or <img> tag)
        url: The http(s) URL the markup points at; identity of the reference
        start: Offset of original_text in the source text
        end: Offset just past the end of original_text
        url_offset: Offset of url inside original_text
    """
    original_text: str
    url: str
    start: int = 0
    end: int = 0
    url_offset: int = 0


@dataclass(frozen=True)
class Payload:
    """Immutable file content with its detected type.

    Transforms never mutate a payload; they return a new one.

    Attributes:
        data: Raw file bytes
        file_type: Detected type, FileType.UNKNOWN if detection failed
        content_type: Content-Type header returned by the origin, if any
    """
    data: bytes
    file_type: FileType = FileType.UNKNOWN
    content_type: str | None = None

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        return self.file_type.extension

    def replace(self, data: bytes, file_type: FileType | None = None) -> Payload:
        """Return a new payload with different bytes (and optionally type)."""
        return Payload(
            data=data,
            file_type=file_type or self.file_type,
            content_type=self.content_type,
        )


@dataclass(frozen=True)
class PublishedObject:
    """Result of publishing one payload.

    Attributes:
        path: Content-addressed path inside the destination repository
        url: Public URL of the object (``./path`` in dry run)
        existed_before_run: True if the object was already there and nothing was uploaded
    """
    path: str
    url: str
    existed_before_run: bool = False


@dataclass(frozen=True)
class ReplacementMapping:
    """Maps one unique reference to its published location."""
    original_text: str
    original_url: str
    published_url: str


@dataclass
class MigrationResult:
    """Everything produced by migrating one text.

    Attributes:
        references: All references in document order, duplicates included
        mappings: One mapping per unique URL, in first-occurrence order
        body: Rendered replacement body (one block per mapping)
        text: Source text with every reference URL rewritten in place
    """
    references: list[Reference] = field(default_factory=list)
    mappings: list[ReplacementMapping] = field(default_factory=list)
    body: str = ""
    text: str = ""
