"""
File type detection for downloaded attachments.

Images are identified from their content with Pillow. Anything Pillow
cannot open falls back to the Content-Type reported by the origin, resolved
to an extension with the mimetypes registry, and then to FileType.UNKNOWN.
Detection never raises.
"""

from __future__ import annotations

import io
import mimetypes

from PIL import Image, UnidentifiedImageError

from ..core.types import FileType

_PIL_TYPES: dict[str, FileType] = {
    "JPEG": FileType.JPEG,
    "MPO": FileType.JPEG,
    "PNG": FileType.PNG,
    "GIF": FileType.GIF,
    "WEBP": FileType.WEBP,
    "BMP": FileType.BMP,
    "DIB": FileType.BMP,
    "TIFF": FileType.TIFF,
    "ICO": FileType.ICO,
    "AVIF": FileType.AVIF,
    "HEIF": FileType.HEIC,
}

# Extensions mimetypes may answer with that differ from FileType's own
_EXTENSION_ALIASES: dict[str, FileType] = {
    "jpeg": FileType.JPEG,
    "jpe": FileType.JPEG,
    "tiff": FileType.TIFF,
    "heif": FileType.HEIC,
    "qt": FileType.MOV,
}

# Types missing from the registry on older interpreters
_EXTRA_MIME_TYPES: dict[str, str] = {
    "image/avif": ".avif",
    "image/heic": ".heic",
    "image/heif": ".heif",
    "image/webp": ".webp",
    "image/bmp": ".bmp",
    "image/x-icon": ".ico",
    "video/webm": ".webm",
    "application/zip": ".zip",
    "application/x-zip-compressed": ".zip",
}


def _build_registry() -> mimetypes.MimeTypes:
    # Built-in table only; system mime.types files vary between hosts
    registry = mimetypes.MimeTypes()
    for mime, extension in _EXTRA_MIME_TYPES.items():
        if registry.guess_extension(mime) is None:
            registry.add_type(mime, extension)
    return registry


_REGISTRY = _build_registry()
_BY_EXTENSION: dict[str, FileType] = {
    **{file_type.extension: file_type for file_type in FileType if file_type is not FileType.UNKNOWN},
    **_EXTENSION_ALIASES,
}


def detect_image_type(data: bytes) -> FileType | None:
    """Identify an image from its bytes, or None if Pillow cannot read it."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            image_format = image.format
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError):
        return None
    if image_format is None:
        return None
    return _PIL_TYPES.get(image_format.upper())


def file_type_from_content_type(content_type: str) -> FileType:
    """Map a Content-Type header value onto a FileType.

    Parameters such as ``charset`` are ignored.
    """
    mime = content_type.split(";", 1)[0].strip().lower()
    if not mime:
        return FileType.UNKNOWN
    extension = _REGISTRY.guess_extension(mime, strict=False)
    if extension is None:
        return FileType.UNKNOWN
    return _BY_EXTENSION.get(extension.lstrip(".").lower(), FileType.UNKNOWN)


def detect_file_type(data: bytes, content_type: str | None = None) -> FileType:
    """Detect the type of a payload.

    Args:
        data: Payload bytes
        content_type: Optional Content-Type header value

    Returns:
        The detected FileType, FileType.UNKNOWN if nothing matched
    """
    image_type = detect_image_type(data)
    if image_type is not None:
        return image_type
    if content_type:
        return file_type_from_content_type(content_type)
    return FileType.UNKNOWN
