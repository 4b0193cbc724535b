"""Image codec built on Pillow.

Formats are identified from magic bytes before any decoding is attempted, so
callers branch on a :class:`SniffResult` rather than on failed decodes.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from enum import Enum

from PIL import Image, ImageOps, UnidentifiedImageError

from ..exceptions import ElementError

_WHITE = (255, 255, 255)


class ImageFormat(str, Enum):
    JPEG = "jpeg"
    PNG = "png"
    GIF = "gif"
    BMP = "bmp"
    TIFF = "tiff"
    WEBP = "webp"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class SniffResult:
    format: ImageFormat

    @property
    def supported(self) -> bool:
        return self.format is not ImageFormat.UNKNOWN


_SIGNATURES: tuple[tuple[bytes, ImageFormat], ...] = (
    (b"\xff\xd8\xff", ImageFormat.JPEG),
    (b"\x89PNG\r\n\x1a\n", ImageFormat.PNG),
    (b"GIF87a", ImageFormat.GIF),
    (b"GIF89a", ImageFormat.GIF),
    (b"BM", ImageFormat.BMP),
    (b"II*\x00", ImageFormat.TIFF),
    (b"MM\x00*", ImageFormat.TIFF),
)


def sniff_image_format(data: bytes) -> SniffResult:
    """Identify ``data`` by its leading bytes."""

    if len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return SniffResult(ImageFormat.WEBP)
    for signature, image_format in _SIGNATURES:
        if data.startswith(signature):
            return SniffResult(image_format)
    return SniffResult(ImageFormat.UNKNOWN)


def decode_image(data: bytes, *, index: int | None = None) -> Image.Image:
    """Decode a sniffed image buffer; raises :class:`ElementError` on failure."""

    sniffed = sniff_image_format(data)
    if not sniffed.supported:
        raise ElementError("Unsupported or unrecognised image format", index=index)
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError, ValueError, SyntaxError) as exc:
        raise ElementError(f"Failed to decode {sniffed.format.value} image: {exc}", index=index) from exc
    # Honour camera orientation tags before measuring.
    return ImageOps.exif_transpose(image)


def flatten(image: Image.Image, *, grayscale: bool = False) -> Image.Image:
    """Return an RGB (or L) copy with any alpha composited on white."""

    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, _WHITE)
        background.paste(rgba, mask=rgba.getchannel("A"))
        image = background
    if grayscale:
        return image.convert("L")
    if image.mode not in ("RGB", "L"):
        return image.convert("RGB")
    return image


def encode_jpeg(image: Image.Image, quality: int, *, grayscale: bool = False, index: int | None = None) -> bytes:
    """Encode ``image`` as JPEG at ``quality`` (0-100)."""

    output = io.BytesIO()
    try:
        flatten(image, grayscale=grayscale).save(output, format="JPEG", quality=quality, optimize=True)
    except (OSError, ValueError) as exc:
        raise ElementError(f"Failed to encode image as JPEG: {exc}", index=index) from exc
    return output.getvalue()


def downsample(image: Image.Image, ratio: float) -> Image.Image:
    """Shrink ``image`` by ``ratio`` (0 < ratio < 1); never enlarges."""

    if ratio >= 1:
        return image
    new_size = (max(1, int(image.width * ratio)), max(1, int(image.height * ratio)))
    if new_size == image.size:
        return image
    return image.resize(new_size, Image.LANCZOS)


__all__ = [
    "ImageFormat",
    "SniffResult",
    "sniff_image_format",
    "decode_image",
    "flatten",
    "encode_jpeg",
    "downsample",
]
