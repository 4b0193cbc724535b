from __future__ import annotations

import math

import pytest

from pagesmith.core.ranges import (
    PageRange,
    by_bookmark,
    by_max_size_bytes,
    by_page_count,
    coerce_ranges,
    custom,
    parse_page_ranges,
    ranges_cover_exactly,
)
from pagesmith.exceptions import RangeError
from pagesmith.types import Bookmark


@pytest.mark.parametrize("total", [1, 2, 7, 10, 33])
@pytest.mark.parametrize("per_file", [1, 3, 5, 10, 50])
def test_by_page_count_covers_every_page_once(total: int, per_file: int) -> None:
    ranges = by_page_count(total, per_file)

    assert len(ranges) == math.ceil(total / per_file)
    assert ranges_cover_exactly(ranges, total)
    assert all(page_range.length <= per_file for page_range in ranges)
    assert ranges[-1].length <= per_file


def test_by_page_count_labels() -> None:
    ranges = by_page_count(5, 2)
    assert [(r.start, r.end) for r in ranges] == [(1, 2), (3, 4), (5, 5)]
    assert ranges[0].label == "pages_1_to_2"
    assert ranges[2].file_name(3) == "pages_5_to_5.pdf"


def test_by_page_count_rejects_bad_parameters() -> None:
    with pytest.raises(RangeError):
        by_page_count(10, 0)
    with pytest.raises(RangeError):
        by_page_count(0, 3)


def test_by_max_size_bytes_is_greedy() -> None:
    ranges = by_max_size_bytes([40, 40, 40, 40, 40], 100)
    assert [(r.start, r.end) for r in ranges] == [(1, 2), (3, 4), (5, 5)]


def test_by_max_size_bytes_counts_overhead() -> None:
    ranges = by_max_size_bytes([40, 40, 40], 100, overhead=30)
    assert [(r.start, r.end) for r in ranges] == [(1, 1), (2, 2), (3, 3)]


def test_by_max_size_bytes_limit_is_exclusive() -> None:
    ranges = by_max_size_bytes([50, 50, 50], 100)
    assert [(r.start, r.end) for r in ranges] == [(1, 1), (2, 2), (3, 3)]

    ranges = by_max_size_bytes([49, 50, 49], 100)
    assert [(r.start, r.end) for r in ranges] == [(1, 2), (3, 3)]


def test_oversized_page_forms_its_own_chunk() -> None:
    ranges = by_max_size_bytes([10, 500, 10, 10], 100)
    assert [(r.start, r.end) for r in ranges] == [(1, 1), (2, 2), (3, 4)]
    assert ranges_cover_exactly(ranges, 4)


def test_by_max_size_bytes_rejects_bad_limit() -> None:
    with pytest.raises(RangeError):
        by_max_size_bytes([10], 0)


def test_by_bookmark_ranges_end_before_next_bookmark() -> None:
    bookmarks = [Bookmark("Intro", 1), Bookmark("Body", 3), Bookmark("End", 9)]
    ranges = by_bookmark(bookmarks, 10)
    assert [(r.start, r.end, r.label) for r in ranges] == [
        (1, 2, "Intro"),
        (3, 8, "Body"),
        (9, 10, "End"),
    ]


def test_by_bookmark_sorts_and_skips_front_matter() -> None:
    bookmarks = [Bookmark("Second", 6), Bookmark("First", 3)]
    ranges = by_bookmark(bookmarks, 8)
    assert [(r.start, r.end) for r in ranges] == [(3, 5), (6, 8)]


def test_by_bookmark_same_page_later_wins() -> None:
    bookmarks = [Bookmark("A", 1), Bookmark("B", 1), Bookmark("C", 4)]
    ranges = by_bookmark(bookmarks, 5)
    assert [(r.start, r.end, r.label) for r in ranges] == [(1, 3, "B"), (4, 5, "C")]


def test_by_bookmark_without_bookmarks_returns_whole_document() -> None:
    ranges = by_bookmark([], 4)
    assert [(r.start, r.end) for r in ranges] == [(1, 4)]


def test_custom_clamps_and_drops() -> None:
    ranges = custom([PageRange(1, 3), PageRange(4, 20), PageRange(30, 31)], 10)
    assert [(r.start, r.end) for r in ranges] == [(1, 3), (4, 10)]


def test_custom_keeps_overlapping_ranges_in_order() -> None:
    ranges = custom([PageRange(3, 5), PageRange(1, 4)], 6)
    assert [(r.start, r.end) for r in ranges] == [(3, 5), (1, 4)]


def test_custom_without_any_valid_range() -> None:
    with pytest.raises(RangeError):
        custom([PageRange(7, 9)], 5)


def test_page_range_validation() -> None:
    with pytest.raises(RangeError):
        PageRange(0, 3)
    with pytest.raises(RangeError):
        PageRange(4, 2)
    assert list(PageRange(2, 4).pages()) == [2, 3, 4]
    assert PageRange(1, 1).file_name(2) == "split_2.pdf"
    assert PageRange(1, 1, "chapter/one").file_name(1) == "chapter_one.pdf"


def test_coerce_ranges_accepts_mixed_values() -> None:
    ranges = coerce_ranges([{"start": 1, "end": 3}, (4, 4), [0, 2, "intro"], {"start": 5, "end": 2}])
    assert [(r.start, r.end, r.label) for r in ranges] == [(1, 3, None), (4, 4, None), (1, 2, "intro")]


def test_coerce_ranges_rejects_garbage() -> None:
    with pytest.raises(RangeError):
        coerce_ranges(["1-3"])
    with pytest.raises(RangeError):
        coerce_ranges([("a", 2)])


def test_parse_page_ranges() -> None:
    ranges = parse_page_ranges("1-3, 4,7 - 9")
    assert [(r.start, r.end) for r in ranges] == [(1, 3), (4, 4), (7, 9)]

    with pytest.raises(RangeError):
        parse_page_ranges("1-a")
    with pytest.raises(RangeError):
        parse_page_ranges("")
    with pytest.raises(RangeError):
        parse_page_ranges("5-2")
