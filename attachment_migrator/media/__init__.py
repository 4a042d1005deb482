"""
Payload inspection and transforms.

This package detects payload types and implements the two optional
transforms applied before publishing: format normalization and
convergent compression.
"""

from .detect import detect_file_type, detect_image_type
from .normalizer import normalize_format
from .compressor import CompressionSettings, compress_payload

__all__ = [
    "detect_file_type",
    "detect_image_type",
    "normalize_format",
    "CompressionSettings",
    "compress_payload",
]
