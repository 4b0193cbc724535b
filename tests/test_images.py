from __future__ import annotations

import io
from datetime import datetime

import pytest
from pypdf import PdfReader

from pagesmith import EngineConfig, ImageAssemblyOptions, Watermark, images_to_pdf
from pagesmith.exceptions import DecodeError, InvalidOptionsError
from pagesmith.imaging import prepare_images
from pagesmith.types import DocumentMetadata

COLORS = [(200, 30, 30), (30, 200, 30), (30, 30, 200), (200, 200, 30), (30, 200, 200)]


def _reader(data: bytes) -> PdfReader:
    return PdfReader(io.BytesIO(data))


@pytest.fixture()
def colored_images(image_factory) -> list[bytes]:
    return [image_factory(color=color) for color in COLORS]


def test_one_image_per_page_by_default(colored_images) -> None:
    reader = _reader(images_to_pdf(colored_images[:3]))
    assert len(reader.pages) == 3
    assert all(len(page.images) == 1 for page in reader.pages)
    width, height = float(reader.pages[0].mediabox.width), float(reader.pages[0].mediabox.height)
    assert (width, height) == (595, 842)


def test_images_per_page_grid(colored_images) -> None:
    reader = _reader(images_to_pdf(colored_images, ImageAssemblyOptions(images_per_page=2)))
    assert len(reader.pages) == 3
    assert [len(page.images) for page in reader.pages] == [2, 2, 1]


def test_undecodable_image_leaves_gap(colored_images) -> None:
    images = [colored_images[0], b"not an image", colored_images[1]]
    reader = _reader(images_to_pdf(images, ImageAssemblyOptions(images_per_page=2)))
    assert len(reader.pages) == 2
    assert [len(page.images) for page in reader.pages] == [1, 1]


def test_all_images_failing_is_fatal() -> None:
    with pytest.raises(DecodeError):
        images_to_pdf([b"junk", b"more junk"])


def test_no_images_is_invalid() -> None:
    with pytest.raises(InvalidOptionsError):
        images_to_pdf([])


def test_landscape_letter(colored_images) -> None:
    options = ImageAssemblyOptions(page_size="letter", orientation="landscape")
    page = _reader(images_to_pdf(colored_images[:1], options)).pages[0]
    assert (float(page.mediabox.width), float(page.mediabox.height)) == (792, 612)


def test_default_page_size_comes_from_config(colored_images) -> None:
    config = EngineConfig(default_page_size="A5")
    page = _reader(images_to_pdf(colored_images[:1], config=config)).pages[0]
    assert (float(page.mediabox.width), float(page.mediabox.height)) == (420, 595)


def test_margin_larger_than_page(colored_images) -> None:
    with pytest.raises(InvalidOptionsError):
        images_to_pdf(colored_images[:1], ImageAssemblyOptions(page_size="A5", margin=300))


def test_decorations_and_metadata(colored_images) -> None:
    config = EngineConfig(clock=lambda: datetime(2024, 5, 17, 9, 30, 0), producer="image-tests")
    options = ImageAssemblyOptions(
        add_page_numbers=True,
        add_timestamp=True,
        watermark=Watermark(text="PROOF"),
        background_color="#f0f0f0",
        add_border=True,
        metadata=DocumentMetadata(title="Album", author="Lens"),
    )
    reader = _reader(images_to_pdf(colored_images[:2], options, config=config))

    second = reader.pages[1].extract_text()
    assert "2" in second
    assert "2024-05-17 09:30:00" in second
    assert reader.metadata.title == "Album"
    assert reader.metadata.author == "Lens"
    assert reader.metadata.producer == "image-tests"


def test_prepare_images_keeps_order_in_parallel(colored_images) -> None:
    inputs = [colored_images[0], b"bad", colored_images[2]]
    prepared = prepare_images(inputs, 80, max_workers=3)
    assert [item.index if item else None for item in prepared] == [0, None, 2]


def test_invalid_assembly_options() -> None:
    with pytest.raises(InvalidOptionsError):
        ImageAssemblyOptions(images_per_page=0)
    with pytest.raises(InvalidOptionsError):
        ImageAssemblyOptions(layout="tile")
    with pytest.raises(InvalidOptionsError):
        ImageAssemblyOptions(margin=-1)
