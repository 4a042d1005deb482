"""Pillow helpers shared by the normalizer and the compressor."""

from __future__ import annotations

import io

from PIL import Image

from ..core.types import FileType

PIL_FORMATS: dict[FileType, str] = {
    FileType.JPEG: "JPEG",
    FileType.PNG: "PNG",
    FileType.GIF: "GIF",
    FileType.WEBP: "WEBP",
    FileType.BMP: "BMP",
    FileType.TIFF: "TIFF",
}


def open_image(data: bytes) -> Image.Image:
    """Decode image bytes fully so the buffer can be discarded."""
    image = Image.open(io.BytesIO(data))
    image.load()
    return image


def encode_image(image: Image.Image, file_type: FileType, **params) -> bytes:
    """Encode an image in the given format with encoder parameters.

    Args:
        image: Decoded image
        file_type: Target type; must be a raster type Pillow can write
        **params: Encoder options such as quality or compress_level

    Returns:
        Encoded bytes
    """
    output = io.BytesIO()
    prepared = _prepare_mode(image, file_type)
    prepared.save(output, format=PIL_FORMATS[file_type], **params)
    return output.getvalue()


def _prepare_mode(image: Image.Image, file_type: FileType) -> Image.Image:
    # JPEG has no alpha channel: flatten onto white
    if file_type is FileType.JPEG:
        if image.mode in ("RGBA", "LA", "P"):
            rgba = image.convert("RGBA")
            background = Image.new("RGB", rgba.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.split()[-1])
            return background
        if image.mode not in ("RGB", "L", "CMYK"):
            return image.convert("RGB")
        return image
    if file_type is FileType.WEBP and image.mode not in ("RGB", "RGBA"):
        return image.convert("RGBA" if "A" in image.mode or image.mode == "P" else "RGB")
    if file_type is FileType.PNG and image.mode == "CMYK":
        return image.convert("RGB")
    return image
