"""Codec protocols the engine depends on."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Protocol

from ..core.layout import PageSize
from ..types import DocumentMetadata, OutlineEntry


@dataclass
class BackendDocument:
    """Represents a decoded document with backend-specific helpers.

    Page indexes are 0-based at this level; :class:`~pagesmith.document.SourceDocument`
    exposes the 1-based view.
    """

    num_pages: int
    file_size: int

    def get_page(self, index: int) -> object:
        raise NotImplementedError

    def page_size(self, index: int) -> PageSize:
        raise NotImplementedError

    def metadata(self) -> DocumentMetadata:
        raise NotImplementedError

    def outline(self) -> List[OutlineEntry]:
        raise NotImplementedError

    def is_blank(self, index: int) -> bool:
        raise NotImplementedError

    def estimate_page_size(self, index: int) -> int:
        raise NotImplementedError

    def document_overhead(self) -> int:
        raise NotImplementedError

    def copy_metadata(
        self,
        writer: object,
        *,
        title_suffix: str = "",
        pages_label: str | None = None,
    ) -> None:
        raise NotImplementedError


class DocumentBackend(Protocol):
    """Protocol defining the document codec used by the engine."""

    def load(self, data: bytes, name: Optional[str] = None) -> BackendDocument:
        """Decode ``data`` or raise :class:`~pagesmith.exceptions.DecodeError`."""

    def new_writer(self) -> object:
        """Return a backend writer instance."""

    def write(self, writer: object) -> bytes:
        """Serialize ``writer`` or raise :class:`~pagesmith.exceptions.EncodeError`."""


__all__ = ["BackendDocument", "DocumentBackend"]
