"""Drawing routines for page stamps.

Each ``draw_*`` function paints onto a reportlab canvas in page coordinates.
:func:`render_page` turns a list of such calls into a single pypdf page
that :func:`stamp_page` merges on top of an existing page.
"""

from __future__ import annotations

import io
from datetime import datetime
from typing import Callable, Iterable

from pypdf import PdfReader
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas as rl_canvas

from .core.layout import Anchor, PageSize, parse_hex_color, text_position, to_roman
from .options import WATERMARK_CENTER, NumberStyle, PageNumberOptions, TitlePage, Watermark

DrawFn = Callable[[rl_canvas.Canvas, PageSize], None]

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def page_number_text(number: int, style: NumberStyle = NumberStyle.ARABIC) -> str:
    if NumberStyle(style) is NumberStyle.ROMAN:
        return to_roman(number)
    return str(number)


def draw_page_number(
    canvas: rl_canvas.Canvas,
    size: PageSize,
    number: int,
    options: PageNumberOptions,
    font_name: str = "Helvetica",
) -> None:
    text = page_number_text(number, options.style)
    text_width = stringWidth(text, font_name, options.font_size)
    x, y = text_position(size.width, size.height, text_width, options.position)
    canvas.saveState()
    canvas.setFont(font_name, options.font_size)
    canvas.setFillColorRGB(*parse_hex_color(options.color))
    canvas.drawString(x, y, text)
    canvas.restoreState()


def draw_watermark(
    canvas: rl_canvas.Canvas,
    size: PageSize,
    watermark: Watermark,
    font_name: str = "Helvetica-Bold",
) -> None:
    text_width = stringWidth(watermark.text, font_name, watermark.font_size)
    if watermark.position == WATERMARK_CENTER:
        x = (size.width - text_width) / 2
        y = size.height / 2
    else:
        x, y = text_position(size.width, size.height, text_width, watermark.position)

    canvas.saveState()
    canvas.setFont(font_name, watermark.font_size)
    canvas.setFillColorRGB(*parse_hex_color(watermark.color))
    canvas.setFillAlpha(watermark.opacity)
    canvas.translate(x, y)
    canvas.rotate(watermark.rotation)
    canvas.drawString(0, 0, watermark.text)
    canvas.restoreState()


def draw_timestamp(
    canvas: rl_canvas.Canvas,
    size: PageSize,
    moment: datetime,
    font_name: str = "Helvetica",
    anchor: Anchor = Anchor.BOTTOM_LEFT,
) -> None:
    text = moment.strftime(TIMESTAMP_FORMAT)
    font_size = 8
    x, y = text_position(size.width, size.height, stringWidth(text, font_name, font_size), anchor)
    canvas.saveState()
    canvas.setFont(font_name, font_size)
    canvas.setFillColorRGB(0.5, 0.5, 0.5)
    canvas.drawString(x, y, text)
    canvas.restoreState()


def draw_title_page(
    canvas: rl_canvas.Canvas,
    size: PageSize,
    title_page: TitlePage,
    font_name: str = "Helvetica",
    bold_font_name: str = "Helvetica-Bold",
) -> None:
    centre = size.width / 2
    baseline = size.height * 0.6
    lines = (
        (title_page.title, bold_font_name, 28, 0.0),
        (title_page.author, font_name, 16, 0.25),
        (title_page.subject, font_name, 14, 0.4),
    )
    canvas.saveState()
    for text, font, font_size, grey in lines:
        if not text:
            continue
        canvas.setFont(font, font_size)
        canvas.setFillColorRGB(grey, grey, grey)
        canvas.drawCentredString(centre, baseline, text)
        baseline -= font_size * 1.8
    canvas.restoreState()


def render_page(size: PageSize, draws: Iterable[DrawFn]):
    """Render ``draws`` on a fresh page of ``size`` and return it as a pypdf page."""

    buffer = io.BytesIO()
    canvas = rl_canvas.Canvas(buffer, pagesize=(size.width, size.height))
    for draw in draws:
        draw(canvas, size)
    canvas.showPage()
    canvas.save()
    return PdfReader(io.BytesIO(buffer.getvalue())).pages[0]


def stamp_page(page, draws: Iterable[DrawFn]) -> None:
    """Merge the drawings on top of ``page`` as it is displayed.

    A ``/Rotate`` entry is folded into the content first so the overlay lines
    up with the rotated view; a shifted mediabox is honoured by translation.
    """

    if page.rotation % 360:
        page.transfer_rotation_to_content()
    mediabox = page.mediabox
    size = PageSize(float(mediabox.width), float(mediabox.height))
    overlay = render_page(size, draws)
    left, bottom = float(mediabox.left), float(mediabox.bottom)
    if left or bottom:
        page.merge_translated_page(overlay, left, bottom)
    else:
        page.merge_page(overlay)


__all__ = [
    "DrawFn",
    "page_number_text",
    "draw_page_number",
    "draw_watermark",
    "draw_timestamp",
    "draw_title_page",
    "render_page",
    "stamp_page",
]
