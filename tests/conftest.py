from __future__ import annotations

import io
from typing import Callable, Sequence

import pytest
from PIL import Image
from pypdf import PdfWriter
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas


def _write(writer: PdfWriter) -> bytes:
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


@pytest.fixture()
def blank_pdf_factory() -> Callable[..., bytes]:
    """Documents made of pages without any content stream."""

    def _create(
        pages: int = 1, width: float = 200, height: float = 200, title: str | None = None, rotate: int = 0
    ) -> bytes:
        writer = PdfWriter()
        for _ in range(pages):
            page = writer.add_blank_page(width=width, height=height)
            if rotate:
                page.rotate(rotate)
        if title is not None:
            writer.add_metadata({"/Title": title, "/Author": "pagesmith-tests"})
        return _write(writer)

    return _create


@pytest.fixture()
def text_pdf_factory() -> Callable[..., bytes]:
    """Documents whose page N shows the text ``"<prefix> N"``."""

    def _create(pages: int = 1, prefix: str = "Page", size: Sequence[float] = (300, 400), title: str | None = None) -> bytes:
        buffer = io.BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=tuple(size))
        if title is not None:
            pdf.setTitle(title)
        for number in range(1, pages + 1):
            pdf.setFont("Helvetica", 14)
            pdf.drawString(50, size[1] / 2, f"{prefix} {number}")
            pdf.showPage()
        pdf.save()
        return buffer.getvalue()

    return _create


@pytest.fixture()
def outlined_pdf() -> bytes:
    """Six pages with chapters at pages 1, 3 and 5; chapter 1 has a nested section on page 2."""

    writer = PdfWriter()
    for _ in range(6):
        writer.add_blank_page(width=200, height=200)
    chapter_one = writer.add_outline_item("Chapter 1", 0)
    writer.add_outline_item("Section 1.1", 1, parent=chapter_one)
    writer.add_outline_item("Chapter 2", 2)
    writer.add_outline_item("Chapter 3", 4)
    writer.add_metadata({"/Title": "Outlined"})
    return _write(writer)


@pytest.fixture()
def image_factory() -> Callable[..., bytes]:
    def _create(
        color: tuple[int, ...] = (200, 30, 30),
        size: tuple[int, int] = (120, 80),
        mode: str = "RGB",
        fmt: str = "PNG",
    ) -> bytes:
        image = Image.new(mode, size, color)
        buffer = io.BytesIO()
        image.save(buffer, format=fmt)
        return buffer.getvalue()

    return _create


@pytest.fixture()
def image_heavy_pdf() -> bytes:
    """One page holding a large noisy image stored losslessly."""

    noise = Image.effect_noise((600, 600), 80).convert("RGB")
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=(612, 792))
    pdf.drawImage(ImageReader(noise), 50, 100, width=500, height=500)
    pdf.showPage()
    pdf.save()
    return buffer.getvalue()
