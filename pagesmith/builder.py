"""Incremental output document construction.

A :class:`DocumentBuilder` moves through ``INIT -> COPYING_PAGES ->
DECORATING -> FINALIZED``. Pages are copied first, decorations are stamped
once every page is in place (page numbers need the final running total) and
the outline and metadata are written on finalize.
"""

from __future__ import annotations

from enum import Enum
from functools import partial
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from .backends import PypdfBackend
from .backends.base import DocumentBackend
from .config import EngineConfig
from .core.layout import PageSize
from .core.ranges import PageRange
from .core.utils import CancellationToken, check_cancelled, get_logger
from .decorations import (
    DrawFn,
    draw_page_number,
    draw_title_page,
    draw_watermark,
    render_page,
    stamp_page,
)
from .document import SourceDocument
from .exceptions import BuildStateError, ElementError
from .options import PageNumberOptions, TitlePage, Watermark
from .types import Bookmark, DocumentMetadata, OutlineEntry

LOGGER = get_logger("pagesmith.builder")


class BuildState(str, Enum):
    INIT = "init"
    COPYING_PAGES = "copying_pages"
    DECORATING = "decorating"
    FINALIZED = "finalized"


class DocumentBuilder:
    """Assemble one output document from copied and rendered pages."""

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        *,
        backend: Optional[DocumentBackend] = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.backend: DocumentBackend = backend or PypdfBackend()
        self.writer = self.backend.new_writer()
        self.state = BuildState.INIT
        self._bookmarks: List[Bookmark] = []
        self._outline: List[OutlineEntry] = []
        self._undecorated: Set[int] = set()
        self._has_title_page = False

    @property
    def page_count(self) -> int:
        return len(self.writer.pages)

    @property
    def bookmarks(self) -> List[Bookmark]:
        return list(self._bookmarks)

    def _require(self, *states: BuildState) -> None:
        if self.state not in states:
            expected = ", ".join(state.value for state in states)
            raise BuildStateError(f"Builder is in state '{self.state.value}', expected one of: {expected}")

    # ------------------------------------------------------------------
    # Page copying
    # ------------------------------------------------------------------
    def add_title_page(self, title_page: TitlePage, size: PageSize) -> None:
        """Render a title page as the first page of the output."""

        self._require(BuildState.INIT)
        if self._has_title_page:
            raise BuildStateError("A title page has already been added")
        page = render_page(
            size,
            [
                partial(
                    draw_title_page,
                    title_page=title_page,
                    font_name=self.config.font_name,
                    bold_font_name=self.config.bold_font_name,
                )
            ],
        )
        self.writer.add_page(page)
        self._undecorated.add(self.page_count)
        self._has_title_page = True
        LOGGER.debug("Added title page %r", title_page.title)

    def add_source(
        self,
        document: SourceDocument,
        *,
        title: Optional[str] = None,
        remove_blank_pages: bool = False,
        cancel: Optional[CancellationToken] = None,
    ) -> int:
        """Append every page of ``document`` and return how many were kept.

        When ``title`` is given a bookmark pointing at the first copied page
        is recorded. A source whose pages were all dropped as blank gets no
        bookmark.
        """

        return self._copy(document, range(1, document.page_count + 1), title, remove_blank_pages, cancel)

    def add_range(
        self,
        document: SourceDocument,
        page_range: PageRange,
        *,
        cancel: Optional[CancellationToken] = None,
    ) -> int:
        if page_range.end > document.page_count:
            raise IndexError(f"Range {page_range.start}-{page_range.end} exceeds {document.page_count} pages")
        return self._copy(document, page_range.pages(), None, False, cancel)

    def _copy(
        self,
        document: SourceDocument,
        page_numbers: Iterable[int],
        title: Optional[str],
        remove_blank_pages: bool,
        cancel: Optional[CancellationToken],
    ) -> int:
        self._require(BuildState.INIT, BuildState.COPYING_PAGES)
        self.state = BuildState.COPYING_PAGES

        first_page = self.page_count + 1
        added = 0
        for page_number in page_numbers:
            check_cancelled(cancel)
            if remove_blank_pages and document.is_blank_page(page_number):
                LOGGER.debug("Dropping blank page %s of %s", page_number, document.name or "<document>")
                continue
            self.writer.add_page(document.page(page_number))
            added += 1

        if title is not None:
            if added:
                self._bookmarks.append(Bookmark(title=title, page_number=first_page))
            else:
                LOGGER.warning("Every page of %r was blank; no bookmark added", title)
        return added

    def add_outline(self, entries: Sequence[OutlineEntry]) -> None:
        """Queue nested outline entries (1-based output page numbers)."""

        self._require(BuildState.COPYING_PAGES, BuildState.DECORATING)
        self._outline.extend(entries)

    # ------------------------------------------------------------------
    # Decorations
    # ------------------------------------------------------------------
    def decorate(
        self,
        *,
        page_numbers: Optional[PageNumberOptions] = None,
        watermark: Optional[Watermark] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> int:
        """Stamp page numbers and watermark on copied pages.

        Numbers are absolute output page numbers, so a title page counts
        toward the total but is never stamped itself. A page that fails to
        stamp is logged and left undecorated. Returns the stamped page count.
        """

        self._require(BuildState.COPYING_PAGES)
        self.state = BuildState.DECORATING

        stamped = 0
        for number, page in enumerate(self.writer.pages, start=1):
            check_cancelled(cancel)
            if number in self._undecorated:
                continue
            draws: List[DrawFn] = []
            if page_numbers is not None:
                draws.append(
                    partial(draw_page_number, number=number, options=page_numbers, font_name=self.config.font_name)
                )
            if watermark is not None:
                draws.append(partial(draw_watermark, watermark=watermark, font_name=self.config.bold_font_name))
            if not draws:
                continue
            try:
                stamp_page(page, draws)
            except Exception as exc:
                error = ElementError(f"Could not decorate page {number}: {exc}", index=number)
                LOGGER.warning("%s", error.message)
                continue
            stamped += 1
        return stamped

    # ------------------------------------------------------------------
    # Finalisation
    # ------------------------------------------------------------------
    def copy_metadata_from(
        self,
        document: SourceDocument,
        *,
        title_suffix: str = "",
        pages_label: Optional[str] = None,
    ) -> None:
        self._require(BuildState.COPYING_PAGES, BuildState.DECORATING)
        document.copy_metadata(self.writer, title_suffix=title_suffix, pages_label=pages_label)

    def finalize(self, metadata: Optional[DocumentMetadata] = None, *, optimize: bool = False) -> bytes:
        """Write outline and metadata, then serialize the document."""

        self._require(BuildState.COPYING_PAGES, BuildState.DECORATING)
        if not self.page_count:
            raise BuildStateError("Cannot finalize a document without pages")

        self._write_bookmarks()
        self._write_outline()
        self._write_metadata(metadata)

        if optimize:
            for page in self.writer.pages:
                page.compress_content_streams()
            self.writer.compress_identical_objects(remove_identicals=True, remove_orphans=True)

        data = self.backend.write(self.writer)
        self.state = BuildState.FINALIZED
        LOGGER.debug("Finalized document with %d page(s), %d bytes", self.page_count, len(data))
        return data

    def _write_bookmarks(self) -> None:
        for bookmark in self._bookmarks:
            self.writer.add_outline_item(bookmark.title, bookmark.page_number - 1)

    def _write_outline(self) -> None:
        # Stack of (depth, outline reference) for the current ancestor chain.
        parents: List[Tuple[int, object]] = []
        for entry in self._outline:
            while parents and parents[-1][0] >= entry.depth:
                parents.pop()
            if not 1 <= entry.page_number <= self.page_count:
                continue
            parent = parents[-1][1] if parents else None
            reference = self.writer.add_outline_item(entry.title, entry.page_number - 1, parent=parent)
            parents.append((entry.depth, reference))

    def _write_metadata(self, metadata: Optional[DocumentMetadata]) -> None:
        existing = self.writer.metadata or {}
        info = dict(metadata.to_pdf_dict()) if metadata else {}
        if "/Creator" not in info and "/Creator" not in existing:
            info["/Creator"] = self.config.creator
        info["/Producer"] = self.config.producer
        self.writer.add_metadata(info)


def rebase_outline(entries: Iterable[OutlineEntry], page_range: PageRange) -> List[OutlineEntry]:
    """Keep entries targeting ``page_range`` and renumber them from 1.

    Entries outside the range are kept as placeholders with page number 0 so
    that nesting of later entries is still resolved against the right parent.
    """

    rebased: List[OutlineEntry] = []
    for entry in entries:
        if page_range.start <= entry.page_number <= page_range.end:
            rebased.append(OutlineEntry(entry.title, entry.page_number - page_range.start + 1, entry.depth))
        else:
            rebased.append(OutlineEntry(entry.title, 0, entry.depth))
    return rebased


def extract_range(
    document: SourceDocument,
    page_range: PageRange,
    *,
    config: Optional[EngineConfig] = None,
    copy_metadata: bool = True,
    preserve_bookmarks: bool = True,
    optimize: bool = False,
    cancel: Optional[CancellationToken] = None,
) -> bytes:
    """Serialize ``page_range`` of ``document`` as a standalone document."""

    builder = DocumentBuilder(config, backend=document.backend)
    builder.add_range(document, page_range, cancel=cancel)
    if preserve_bookmarks:
        builder.add_outline(rebase_outline(document.outline(), page_range))
    if copy_metadata:
        builder.copy_metadata_from(
            document,
            title_suffix=f" - Pages {page_range.start}-{page_range.end}",
            pages_label=f"Pages {page_range.start}-{page_range.end}",
        )
    return builder.finalize(optimize=optimize)


__all__ = ["BuildState", "DocumentBuilder", "rebase_outline", "extract_range"]
