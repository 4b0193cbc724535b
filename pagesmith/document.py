"""Read-only view over a decoded document buffer."""

from __future__ import annotations

from typing import Any, List, Optional

from .backends import BackendDocument, PypdfBackend
from .backends.base import DocumentBackend
from .core.layout import PageSize
from .types import Bookmark, DocumentInfo, DocumentMetadata, OutlineEntry


class SourceDocument:
    """High level helper around a backend-specific document.

    Page numbers are 1-based throughout. Instances are never mutated; the
    builders copy pages out of them.
    """

    def __init__(
        self,
        document: BackendDocument,
        *,
        name: Optional[str] = None,
        backend: Optional[DocumentBackend] = None,
    ) -> None:
        self._document = document
        self.name = name
        self.backend: DocumentBackend = backend or PypdfBackend()
        self._outline_cache: Optional[List[OutlineEntry]] = None
        self._metadata_cache: Optional[DocumentMetadata] = None

    # ------------------------------------------------------------------
    # Basic document information helpers
    # ------------------------------------------------------------------
    @property
    def document(self) -> BackendDocument:
        return self._document

    @property
    def page_count(self) -> int:
        return self._document.num_pages

    @property
    def size_bytes(self) -> int:
        return self._document.file_size

    @property
    def metadata(self) -> DocumentMetadata:
        if self._metadata_cache is None:
            self._metadata_cache = self._document.metadata()
        return self._metadata_cache

    @property
    def is_encrypted(self) -> bool:
        return bool(getattr(self._document, "is_encrypted", False))

    def _index(self, page_number: int) -> int:
        if not 1 <= page_number <= self.page_count:
            raise IndexError(f"Page {page_number} is out of bounds. Document has {self.page_count} pages.")
        return page_number - 1

    def page_dimensions(self, page_number: int) -> PageSize:
        return self._document.page_size(self._index(page_number))

    def outline(self) -> List[OutlineEntry]:
        """Every outline entry, depth-first, with its nesting depth."""
        if self._outline_cache is None:
            self._outline_cache = self._document.outline()
        return list(self._outline_cache)

    def bookmarks(self) -> List[Bookmark]:
        """Top-level bookmarks in outline order."""
        return [Bookmark(entry.title, entry.page_number) for entry in self.outline() if entry.depth == 0]

    # ------------------------------------------------------------------
    # Page access
    # ------------------------------------------------------------------
    def page(self, page_number: int) -> Any:
        return self._document.get_page(self._index(page_number))

    def is_blank_page(self, page_number: int) -> bool:
        return self._document.is_blank(self._index(page_number))

    def estimate_page_size(self, page_number: int) -> int:
        """Approximate bytes ``page_number`` adds to a serialized document."""
        return self._document.estimate_page_size(self._index(page_number))

    def document_overhead(self) -> int:
        """Approximate bytes of an otherwise empty serialized document."""
        return self._document.document_overhead()

    def copy_metadata(self, writer: Any, *, title_suffix: str = "", pages_label: Optional[str] = None) -> None:
        self._document.copy_metadata(writer, title_suffix=title_suffix, pages_label=pages_label)

    # ------------------------------------------------------------------
    # Reporting helpers
    # ------------------------------------------------------------------
    def info(self) -> DocumentInfo:
        return DocumentInfo(
            name=self.name,
            num_pages=self.page_count,
            file_size=self.size_bytes,
            metadata=self.metadata,
            page_sizes=[self.page_dimensions(number) for number in range(1, self.page_count + 1)],
            bookmarks=self.bookmarks(),
            is_encrypted=self.is_encrypted,
        )

    def __repr__(self) -> str:
        return f"SourceDocument(name={self.name!r}, pages={self.page_count})"


def open_document(
    data: bytes,
    name: Optional[str] = None,
    *,
    backend: Optional[DocumentBackend] = None,
) -> SourceDocument:
    """Decode ``data``; raises :class:`~pagesmith.exceptions.DecodeError` on malformed input."""

    codec = backend or PypdfBackend()
    return SourceDocument(codec.load(data, name), name=name, backend=codec)


__all__ = ["SourceDocument", "open_document"]
