"""
Convergent image compression to a size budget.

The compressor walks one encoder parameter in fixed steps until the encoded
image fits the size threshold or the parameter leaves its range:
- JPEG and WebP: quality from 95 down to 10 in steps of 5 (at most 18 encodes)
- PNG: zlib compression level from 0 up to 9 (at most 10 encodes)

An optional resize (bounding box, aspect ratio kept, never upscaled) runs
once before the search. Not meeting the budget is not an error: the last
encode is returned. The result is never larger than the input.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging

from PIL import Image

from ..config import MediaConfig
from ..core.types import FileType, Payload
from ..utils.logging import log_event
from .imaging import encode_image, open_image

QUALITY_START = 95
QUALITY_FLOOR = 10
QUALITY_STEP = 5

LEVEL_START = 0
LEVEL_CEILING = 9
LEVEL_STEP = 1

# TODO: video attachments (mp4/mov) are uploaded as-is; compress them with ffmpeg.
COMPRESSIBLE_TYPES = frozenset({FileType.JPEG, FileType.PNG, FileType.WEBP})


@dataclass(frozen=True)
class CompressionSettings:
    """Parameters of one compression pass.

    Attributes:
        size_threshold: Target size in bytes
        max_width: Optional bounding width applied before the search
        max_height: Optional bounding height applied before the search
    """

    size_threshold: int
    max_width: int | None = None
    max_height: int | None = None

    @classmethod
    def from_config(cls, cfg: MediaConfig) -> CompressionSettings:
        return cls(
            size_threshold=cfg.size_threshold or 0,
            max_width=cfg.resize_max_width,
            max_height=cfg.resize_max_height,
        )


def compress_payload(
    payload: Payload,
    settings: CompressionSettings,
    logger: logging.Logger | None = None,
) -> Payload:
    """Compress an image payload towards the size threshold.

    Args:
        payload: The payload to compress
        settings: Threshold and optional resize bounds
        logger: Logger for events

    Returns:
        A new compressed payload, or the input if nothing smaller was produced
    """
    if payload.file_type not in COMPRESSIBLE_TYPES:
        log_event(
            logger,
            "Compression not supported for this type yet",
            level=logging.DEBUG,
            event="compress_unsupported",
            file_type=payload.file_type.name,
        )
        return payload

    try:
        image = open_image(payload.data)
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        log_event(
            logger,
            "Compression skipped, image could not be decoded",
            level=logging.WARNING,
            event="compress_skipped",
            file_type=payload.file_type.name,
            error=f"{type(exc).__name__}: {exc}",
        )
        return payload

    candidate = payload
    resized = resize_image(image, settings.max_width, settings.max_height)
    if resized is not None:
        image = resized
        candidate = payload.replace(encode_image(image, payload.file_type))
        log_event(
            logger,
            "Image resized",
            level=logging.DEBUG,
            event="resized",
            width=image.width,
            height=image.height,
            size=candidate.size,
        )

    if payload.file_type is FileType.PNG:
        result, steps = search_compression_level(image, candidate, settings.size_threshold, logger)
    else:
        result, steps = search_quality(image, candidate, settings.size_threshold, logger)

    if result.size > payload.size:
        result = payload
    log_event(
        logger,
        "Compression done",
        level=logging.DEBUG,
        event="compress_done",
        file_type=payload.file_type.name,
        size_before=payload.size,
        size_after=result.size,
        steps=steps,
        converged=result.size <= settings.size_threshold,
    )
    return result


def resize_image(
    image: Image.Image,
    max_width: int | None,
    max_height: int | None,
) -> Image.Image | None:
    """Shrink an image into a bounding box, keeping its aspect ratio.

    Returns:
        A resized copy, or None when no bound is set or the image already fits
    """
    if not max_width and not max_height:
        return None
    bound = (max_width or image.width, max_height or image.height)
    if image.width <= bound[0] and image.height <= bound[1]:
        return None
    resized = image.copy()
    resized.thumbnail(bound, Image.Resampling.LANCZOS)
    return resized


def search_quality(
    image: Image.Image,
    candidate: Payload,
    threshold: int,
    logger: logging.Logger | None = None,
) -> tuple[Payload, int]:
    """Lower JPEG/WebP quality until the encode fits the threshold.

    Returns:
        Tuple of (last candidate, number of encodes performed)
    """
    quality = QUALITY_START
    steps = 0
    while candidate.size > threshold and quality >= QUALITY_FLOOR:
        candidate = candidate.replace(encode_image(image, candidate.file_type, quality=quality))
        steps += 1
        log_event(
            logger,
            "Compression step",
            level=logging.DEBUG,
            event="compress_step",
            file_type=candidate.file_type.name,
            quality=quality,
            size=candidate.size,
        )
        quality -= QUALITY_STEP
    return candidate, steps


def search_compression_level(
    image: Image.Image,
    candidate: Payload,
    threshold: int,
    logger: logging.Logger | None = None,
) -> tuple[Payload, int]:
    """Raise the PNG compression level until the encode fits the threshold.

    Returns:
        Tuple of (last candidate, number of encodes performed)
    """
    level = LEVEL_START
    steps = 0
    while candidate.size > threshold and level <= LEVEL_CEILING:
        candidate = candidate.replace(encode_image(image, FileType.PNG, compress_level=level))
        steps += 1
        log_event(
            logger,
            "Compression step",
            level=logging.DEBUG,
            event="compress_step",
            file_type=FileType.PNG.name,
            compress_level=level,
            size=candidate.size,
        )
        level += LEVEL_STEP
    return candidate, steps
