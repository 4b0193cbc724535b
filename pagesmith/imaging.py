"""Turn a list of raster images into a paged document.

Images are decoded and re-encoded to JPEG up front (optionally on a thread
pool); a failed image is logged and leaves an empty slot, so later images keep
their page position. Pages are then drawn with reportlab.
"""

from __future__ import annotations

import io
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Sequence

from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas as rl_canvas

from .backends.pillow_backend import decode_image, encode_jpeg
from .config import EngineConfig
from .core.layout import Rect, fit_image, layout_cells, margin_box, page_dimensions_for, parse_hex_color
from .core.utils import CancellationToken, check_cancelled, get_logger
from .decorations import draw_page_number, draw_timestamp, draw_watermark
from .exceptions import DecodeError, ElementError, EncodeError, InvalidOptionsError
from .options import ImageAssemblyOptions

LOGGER = get_logger("pagesmith.imaging")


@dataclass(frozen=True)
class PreparedImage:
    index: int
    data: bytes
    width: int
    height: int


def prepare_image(data: bytes, index: int, quality: int) -> PreparedImage:
    """Decode, orient and JPEG-encode one image; raises :class:`ElementError`."""

    image = decode_image(data, index=index)
    encoded = encode_jpeg(image, quality, index=index)
    return PreparedImage(index=index, data=encoded, width=image.width, height=image.height)


def prepare_images(
    images: Sequence[bytes],
    quality: int,
    *,
    max_workers: int = 1,
    cancel: Optional[CancellationToken] = None,
) -> List[Optional[PreparedImage]]:
    """Prepare every image, keeping input order; failed slots are ``None``."""

    def _prepare(index: int) -> Optional[PreparedImage]:
        check_cancelled(cancel)
        try:
            return prepare_image(images[index], index, quality)
        except ElementError as exc:
            LOGGER.warning("Skipping image %d: %s", index + 1, exc.message)
            return None

    if max_workers > 1 and len(images) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            return list(pool.map(_prepare, range(len(images))))
    return [_prepare(index) for index in range(len(images))]


class ImageDocumentRenderer:
    """Draws prepared images onto pages laid out by :class:`ImageAssemblyOptions`."""

    def __init__(self, options: ImageAssemblyOptions, config: Optional[EngineConfig] = None) -> None:
        self.options = options
        self.config = config or EngineConfig()
        try:
            self.page_size = page_dimensions_for(
                options.page_size or self.config.default_page_size,
                options.orientation,
                options.custom_size,
            )
            box = margin_box(self.page_size, options.margin)
        except ValueError as exc:
            raise InvalidOptionsError(str(exc)) from exc
        self.cells: List[Rect] = layout_cells(box, options.images_per_page)

    def render(
        self,
        prepared: Sequence[Optional[PreparedImage]],
        *,
        cancel: Optional[CancellationToken] = None,
    ) -> bytes:
        options = self.options
        per_page = options.images_per_page
        page_total = math.ceil(len(prepared) / per_page)

        buffer = io.BytesIO()
        canvas = rl_canvas.Canvas(buffer, pagesize=(self.page_size.width, self.page_size.height))
        self._apply_metadata(canvas)
        moment = self.config.clock() if options.add_timestamp else None

        for page_index in range(page_total):
            check_cancelled(cancel)
            chunk = prepared[page_index * per_page : (page_index + 1) * per_page]
            self._draw_background(canvas)
            for slot, item in enumerate(chunk):
                if item is None:
                    continue
                try:
                    self._draw_image(canvas, item, self.cells[slot])
                except Exception as exc:
                    LOGGER.warning("Could not place image %d: %s", item.index + 1, exc)
            self._draw_decorations(canvas, page_index + 1, moment)
            canvas.showPage()

        try:
            canvas.save()
        except Exception as exc:
            raise EncodeError(f"Failed to serialize image document: {exc}") from exc
        return buffer.getvalue()

    def _apply_metadata(self, canvas: rl_canvas.Canvas) -> None:
        metadata = self.options.metadata
        if metadata.title:
            canvas.setTitle(metadata.title)
        if metadata.author:
            canvas.setAuthor(metadata.author)
        if metadata.subject:
            canvas.setSubject(metadata.subject)
        if metadata.keywords:
            canvas.setKeywords(metadata.keywords)
        canvas.setCreator(metadata.creator or self.config.creator)
        canvas.setProducer(self.config.producer)

    def _draw_background(self, canvas: rl_canvas.Canvas) -> None:
        if not self.options.background_color:
            return
        canvas.saveState()
        canvas.setFillColorRGB(*parse_hex_color(self.options.background_color))
        canvas.rect(0, 0, self.page_size.width, self.page_size.height, stroke=0, fill=1)
        canvas.restoreState()

    def _draw_image(self, canvas: rl_canvas.Canvas, item: PreparedImage, cell: Rect) -> None:
        placement = fit_image(item.width, item.height, cell, self.options.layout)
        canvas.drawImage(
            ImageReader(io.BytesIO(item.data)),
            placement.x,
            placement.y,
            width=placement.width,
            height=placement.height,
        )
        if self.options.add_border and self.options.border_width > 0:
            frame = placement.inflate(self.options.border_width)
            canvas.saveState()
            canvas.setStrokeColorRGB(*parse_hex_color(self.options.border_color))
            canvas.setLineWidth(self.options.border_width)
            canvas.rect(frame.x, frame.y, frame.width, frame.height, stroke=1, fill=0)
            canvas.restoreState()

    def _draw_decorations(self, canvas: rl_canvas.Canvas, number: int, moment) -> None:
        options = self.options
        if options.add_page_numbers:
            draw_page_number(canvas, self.page_size, number, options.page_numbers, self.config.font_name)
        if moment is not None:
            draw_timestamp(canvas, self.page_size, moment, self.config.font_name)
        if options.watermark is not None:
            draw_watermark(canvas, self.page_size, options.watermark, self.config.bold_font_name)


def assemble_images(
    images: Sequence[bytes],
    options: Optional[ImageAssemblyOptions] = None,
    config: Optional[EngineConfig] = None,
    *,
    cancel: Optional[CancellationToken] = None,
) -> bytes:
    """Build a document with ``ceil(len(images) / images_per_page)`` pages."""

    options = options or ImageAssemblyOptions()
    config = config or EngineConfig()
    if not images:
        raise InvalidOptionsError("At least one image is required")

    renderer = ImageDocumentRenderer(options, config)
    prepared = prepare_images(
        images,
        options.image_quality,
        max_workers=config.max_workers,
        cancel=cancel,
    )
    if not any(prepared):
        raise DecodeError(f"None of the {len(images)} image(s) could be decoded")

    skipped = sum(1 for item in prepared if item is None)
    if skipped:
        LOGGER.info("Assembled document with %d image(s) skipped", skipped)
    return renderer.render(prepared, cancel=cancel)


__all__ = [
    "PreparedImage",
    "prepare_image",
    "prepare_images",
    "ImageDocumentRenderer",
    "assemble_images",
]
