"""Page range planning for split operations.

All planners return ordered lists of inclusive, 1-based :class:`PageRange`
objects. ``by_page_count``, ``by_max_size_bytes`` and ``by_bookmark`` never
produce overlapping ranges; ``custom`` passes caller ranges through with
bounds clamping and may overlap.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol, Sequence

from ..exceptions import RangeError
from .utils import get_logger

LOGGER = get_logger("pagesmith.ranges")

_RANGE_TOKEN = re.compile(r"^(\d+)(?:\s*-\s*(\d+))?$")


@dataclass(frozen=True)
class PageRange:
    """Represents an inclusive page range."""

    start: int
    end: int
    label: Optional[str] = None

    def __post_init__(self) -> None:
        if self.start < 1 or self.end < 1:
            raise RangeError(f"Page numbers must be positive integers, got {self.start}-{self.end}")
        if self.start > self.end:
            raise RangeError(f"Page range start must be <= end, got {self.start}-{self.end}")

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    def pages(self) -> range:
        """1-based page numbers covered by the range."""
        return range(self.start, self.end + 1)

    def file_name(self, index: int) -> str:
        """Output name for the ``index``-th (1-based) range of a split."""

        base = self.label or f"split_{index}"
        base = base.strip().replace("/", "_").replace("\\", "_") or f"split_{index}"
        return base if base.lower().endswith(".pdf") else f"{base}.pdf"


class BookmarkLike(Protocol):
    title: str
    page_number: int


def _span_label(start: int, end: int) -> str:
    return f"pages_{start}_to_{end}"


def by_page_count(total_pages: int, per_file: int) -> List[PageRange]:
    """Contiguous chunks of ``per_file`` pages; the last chunk may be shorter."""

    if per_file < 1:
        raise RangeError(f"Pages per file must be >= 1, got {per_file}")
    if total_pages < 1:
        raise RangeError("Document has no pages to split")

    ranges = []
    for index in range(math.ceil(total_pages / per_file)):
        start = index * per_file + 1
        end = min(start + per_file - 1, total_pages)
        ranges.append(PageRange(start, end, _span_label(start, end)))
    return ranges


def by_max_size_bytes(
    page_sizes: Sequence[int],
    max_bytes: int,
    *,
    overhead: int = 0,
) -> List[PageRange]:
    """Greedily group pages so each chunk's estimated size stays below ``max_bytes``.

    Args:
        page_sizes: Estimated serialized contribution of each page, in order.
        max_bytes: Size limit for a single output document.
        overhead: Fixed per-document cost added to every chunk.

    A page that alone reaches the limit still becomes its own chunk.
    """

    if max_bytes < 1:
        raise RangeError(f"Maximum size must be >= 1 byte, got {max_bytes}")
    if not page_sizes:
        raise RangeError("Document has no pages to split")

    ranges: List[PageRange] = []
    chunk_start = 1
    chunk_size = overhead
    for page_number, page_size in enumerate(page_sizes, start=1):
        if page_number > chunk_start and chunk_size + page_size >= max_bytes:
            ranges.append(PageRange(chunk_start, page_number - 1, _span_label(chunk_start, page_number - 1)))
            LOGGER.debug("Closed size chunk %s-%s at ~%d bytes", chunk_start, page_number - 1, chunk_size)
            chunk_start = page_number
            chunk_size = overhead
        chunk_size += page_size
        if page_number == chunk_start and chunk_size >= max_bytes:
            LOGGER.warning(
                "Page %s alone is ~%d bytes, not below the %d byte limit", page_number, chunk_size, max_bytes
            )

    last = len(page_sizes)
    ranges.append(PageRange(chunk_start, last, _span_label(chunk_start, last)))
    return ranges


def by_bookmark(bookmarks: Iterable[BookmarkLike], total_pages: int) -> List[PageRange]:
    """One range per top-level bookmark, ending before the next bookmark's page.

    Bookmarks are ordered by target page. When two bookmarks target the same
    page only the later one produces a range. Pages before the first bookmark
    are not emitted. Without bookmarks the whole document is one range.
    """

    if total_pages < 1:
        raise RangeError("Document has no pages to split")

    targets = sorted(
        (bookmark for bookmark in bookmarks if 1 <= bookmark.page_number <= total_pages),
        key=lambda bookmark: bookmark.page_number,
    )
    if not targets:
        LOGGER.info("No usable bookmarks; emitting the whole document as one range")
        return [PageRange(1, total_pages, _span_label(1, total_pages))]

    ranges: List[PageRange] = []
    for current, following in zip(targets, targets[1:] + [None]):
        end = following.page_number - 1 if following is not None else total_pages
        if end < current.page_number:
            LOGGER.debug("Bookmark %r shares page %s with the next one", current.title, current.page_number)
            continue
        ranges.append(PageRange(current.page_number, end, current.title))
    return ranges


def custom(ranges: Iterable[PageRange], total_pages: int) -> List[PageRange]:
    """Clamp caller-supplied ranges to ``1..total_pages``.

    Ranges starting past the end are dropped; ends are clamped. Overlapping
    or unordered ranges are kept in the order given.
    """

    kept: List[PageRange] = []
    for page_range in ranges:
        if page_range.start > total_pages:
            LOGGER.warning(
                "Dropping range %s-%s: document has %s pages", page_range.start, page_range.end, total_pages
            )
            continue
        end = min(page_range.end, total_pages)
        if end != page_range.end:
            LOGGER.warning("Clamping range %s-%s to end at page %s", page_range.start, page_range.end, end)
        clamped = PageRange(page_range.start, end, page_range.label)
        for previous in kept:
            if clamped.start <= previous.end and previous.start <= clamped.end:
                LOGGER.warning(
                    "Range %s-%s overlaps %s-%s; both are kept",
                    clamped.start,
                    clamped.end,
                    previous.start,
                    previous.end,
                )
                break
        kept.append(clamped)

    if not kept:
        raise RangeError(f"No custom range falls inside the document ({total_pages} pages)")
    return kept


def coerce_ranges(items: Iterable[object]) -> List[PageRange]:
    """Build :class:`PageRange` objects from ranges, tuples or mappings.

    Mappings use ``start``/``end`` and an optional ``name`` or ``label``.
    Starts below 1 are raised to 1; items with ``start > end`` are dropped.
    """

    coerced: List[PageRange] = []
    for item in items:
        if isinstance(item, PageRange):
            coerced.append(item)
            continue
        if isinstance(item, dict):
            start, end = item.get("start"), item.get("end")
            label = item.get("name") or item.get("label")
        elif isinstance(item, (tuple, list)) and len(item) in (2, 3):
            start, end = item[0], item[1]
            label = item[2] if len(item) == 3 else None
        else:
            raise RangeError(f"Unsupported range value: {item!r}")
        try:
            start, end = int(start), int(end)
        except (TypeError, ValueError) as exc:
            raise RangeError(f"Range bounds must be integers: {item!r}") from exc
        if start < 1:
            LOGGER.warning("Raising range start %s to page 1", start)
            start = 1
        if end < start:
            LOGGER.warning("Dropping range %s-%s: start is after end", start, end)
            continue
        coerced.append(PageRange(start, end, label))
    return coerced


def parse_page_ranges(text: str) -> List[PageRange]:
    """Parse ``"1-3,4,7-9"`` into :class:`PageRange` objects in the given order."""

    if not text or not text.strip():
        raise RangeError("Ranges string cannot be empty")

    parsed: List[PageRange] = []
    for token in text.split(","):
        token = token.strip()
        match = _RANGE_TOKEN.match(token)
        if not match:
            raise RangeError(f"Invalid range format: '{token}'. Expected 'start-end' or a page number.")
        start = int(match.group(1))
        end = int(match.group(2)) if match.group(2) else start
        parsed.append(PageRange(start, end))
    return parsed


def ranges_cover_exactly(ranges: Sequence[PageRange], total_pages: int) -> bool:
    """True when ``ranges`` cover ``1..total_pages`` once each, in order."""

    expected = 1
    for page_range in ranges:
        if page_range.start != expected:
            return False
        expected = page_range.end + 1
    return expected == total_pages + 1


__all__ = [
    "PageRange",
    "by_page_count",
    "by_max_size_bytes",
    "by_bookmark",
    "custom",
    "coerce_ranges",
    "parse_page_ranges",
    "ranges_cover_exactly",
]
