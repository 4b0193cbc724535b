from __future__ import annotations

import io

import pytest
from pypdf import PdfReader

from pagesmith import (
    AssemblyEngine,
    EngineConfig,
    MergeOptions,
    NamedSource,
    PageNumberOptions,
    SplitOptions,
    TitlePage,
    merge_documents,
    split_document,
)
from pagesmith.exceptions import DecodeError, InvalidOptionsError


def _reader(data: bytes) -> PdfReader:
    return PdfReader(io.BytesIO(data))


def _stamps(page) -> list[tuple[str, float, float]]:
    found: list[tuple[str, float, float]] = []

    def visitor(text, cm, tm, font_dict, font_size):
        if text.strip():
            found.append((text.strip(), tm[4] * cm[0] + cm[4], tm[5] * cm[3] + cm[5]))

    page.extract_text(visitor_text=visitor)
    return found


def test_merge_concatenates_pages(blank_pdf_factory) -> None:
    data = merge_documents([blank_pdf_factory(pages=2), blank_pdf_factory(pages=3)])
    assert len(_reader(data).pages) == 5


def test_merge_requires_two_sources(blank_pdf_factory) -> None:
    with pytest.raises(InvalidOptionsError):
        merge_documents([blank_pdf_factory()])


def test_merge_fails_fast_on_bad_source(blank_pdf_factory) -> None:
    with pytest.raises(DecodeError):
        merge_documents([blank_pdf_factory(), b"definitely not a pdf"])


@pytest.mark.parametrize(
    "width, height, rotate, shown",
    [(612, 792, 0, (612, 792)), (200, 400, 90, (400, 200)), (200, 400, 270, (400, 200))],
)
def test_page_numbers_bottom_right(blank_pdf_factory, width, height, rotate, shown) -> None:
    options = MergeOptions(add_page_numbers=True, page_numbers=PageNumberOptions(position="bottom-right"))
    data = merge_documents(
        [
            blank_pdf_factory(pages=1, width=width, height=height, rotate=rotate),
            blank_pdf_factory(pages=1, width=width, height=height, rotate=rotate),
        ],
        options,
    )
    reader = _reader(data)
    assert len(reader.pages) == 2

    for expected, page in zip(("1", "2"), reader.pages):
        assert page.rotation == 0
        assert (round(float(page.mediabox.width)), round(float(page.mediabox.height))) == shown
        stamps = _stamps(page)
        assert [text for text, _, _ in stamps] == [expected]
        _, x, y = stamps[0]
        assert x > shown[0] - 60
        assert y < 60


def test_bookmarks_use_source_names(blank_pdf_factory) -> None:
    sources = [
        NamedSource(blank_pdf_factory(pages=2), "alpha"),
        blank_pdf_factory(pages=1),
        NamedSource(blank_pdf_factory(pages=3)),
    ]
    reader = _reader(merge_documents(sources, MergeOptions(add_bookmarks=True)))
    targets = [(item.title, reader.get_destination_page_number(item)) for item in reader.outline]
    assert targets == [("alpha", 0), ("Document 2", 2), ("Document 3", 3)]


def test_title_page_shifts_bookmarks_and_sets_metadata(blank_pdf_factory) -> None:
    options = MergeOptions(
        add_bookmarks=True,
        add_title_page=True,
        title_page=TitlePage(title="Annual Report", author="Finance", subject="2025"),
    )
    reader = _reader(merge_documents([blank_pdf_factory(pages=1), blank_pdf_factory(pages=1)], options))

    assert len(reader.pages) == 3
    assert "Annual Report" in reader.pages[0].extract_text()
    assert [reader.get_destination_page_number(item) for item in reader.outline] == [1, 2]
    assert reader.metadata.title == "Annual Report"
    assert reader.metadata.author == "Finance"


def test_first_source_metadata_is_copied(blank_pdf_factory) -> None:
    reader = _reader(merge_documents([blank_pdf_factory(title="First"), blank_pdf_factory(title="Second")]))
    assert reader.metadata.title == "First"

    reader = _reader(
        merge_documents(
            [blank_pdf_factory(title="First"), blank_pdf_factory(title="Second")],
            MergeOptions(copy_metadata=False),
        )
    )
    assert reader.metadata.title is None


def test_page_order_permutes_sources(text_pdf_factory) -> None:
    first = text_pdf_factory(pages=1, prefix="First")
    second = text_pdf_factory(pages=1, prefix="Second")
    reader = _reader(merge_documents([first, second], MergeOptions(page_order=[1, 0])))
    assert "Second" in reader.pages[0].extract_text()
    assert "First" in reader.pages[1].extract_text()


@pytest.mark.parametrize("order", [[0], [0, 0], [0, 2], [1, 2]])
def test_invalid_page_order(blank_pdf_factory, order) -> None:
    with pytest.raises(InvalidOptionsError):
        merge_documents([blank_pdf_factory(), blank_pdf_factory()], MergeOptions(page_order=order))


def test_remove_blank_pages(blank_pdf_factory, text_pdf_factory) -> None:
    data = merge_documents(
        [blank_pdf_factory(pages=2), text_pdf_factory(pages=2)],
        MergeOptions(remove_blank_pages=True, add_bookmarks=True),
    )
    reader = _reader(data)
    assert len(reader.pages) == 2
    assert [item.title for item in reader.outline] == ["Document 2"]


def test_optimize_for_print_keeps_pages(text_pdf_factory) -> None:
    plain = merge_documents([text_pdf_factory(pages=3), text_pdf_factory(pages=3)])
    optimized = merge_documents(
        [text_pdf_factory(pages=3), text_pdf_factory(pages=3)],
        MergeOptions(optimize_for_print=True),
    )
    reader = _reader(optimized)
    assert len(reader.pages) == len(_reader(plain).pages) == 6
    assert "Page 3" in reader.pages[5].extract_text()


def test_producer_comes_from_config(blank_pdf_factory) -> None:
    engine = AssemblyEngine(EngineConfig(producer="acme-producer"))
    reader = _reader(engine.merge([blank_pdf_factory(), blank_pdf_factory()]))
    assert reader.metadata.producer == "acme-producer"


def test_merge_then_split_by_bookmarks_round_trips(text_pdf_factory) -> None:
    sizes = [2, 1, 3]
    sources = [
        NamedSource(text_pdf_factory(pages=count, prefix=f"Doc{index}"), f"doc{index}")
        for index, count in enumerate(sizes, start=1)
    ]
    merged = merge_documents(sources, MergeOptions(add_bookmarks=True))

    outputs = split_document(merged, SplitOptions(strategy="bookmarks"))

    assert [output.page_count for output in outputs] == sizes
    assert [output.name for output in outputs] == ["doc1.pdf", "doc2.pdf", "doc3.pdf"]
    for index, output in enumerate(outputs, start=1):
        reader = _reader(output.data)
        assert len(reader.pages) == sizes[index - 1]
        assert all(f"Doc{index}" in page.extract_text() for page in reader.pages)
