"""Conversion of payloads into broadly displayable formats."""

from __future__ import annotations

import logging

from PIL import Image

from ..core.types import FileType, Payload
from ..utils.logging import log_event
from .imaging import encode_image, open_image

# WebP still renders poorly in some mail clients and markdown viewers.
COMPATIBLE_FORMATS: dict[FileType, FileType] = {
    FileType.WEBP: FileType.JPEG,
}


def normalize_format(payload: Payload, enabled: bool, logger: logging.Logger | None = None) -> Payload:
    """Convert the payload to a compatible format when a rule applies.

    Args:
        payload: The downloaded payload
        enabled: Whether normalization is turned on
        logger: Logger for events

    Returns:
        A new converted payload, or the input unchanged
    """
    if not enabled:
        return payload
    target = COMPATIBLE_FORMATS.get(payload.file_type)
    if target is None:
        return payload

    try:
        data = encode_image(open_image(payload.data), target)
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        log_event(
            logger,
            "Format conversion skipped",
            level=logging.WARNING,
            event="normalize_skipped",
            source_type=payload.file_type.name,
            error=f"{type(exc).__name__}: {exc}",
        )
        return payload

    log_event(
        logger,
        "Format converted",
        level=logging.DEBUG,
        event="normalized",
        source_type=payload.file_type.name,
        target_type=target.name,
        size_before=payload.size,
        size_after=len(data),
    )
    return payload.replace(data, target)
