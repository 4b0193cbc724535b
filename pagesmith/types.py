"""
Type definitions and dataclasses for pagesmith.

This module defines the data structures passed in and out of the engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .core.layout import PageSize
from .core.ranges import PageRange


@dataclass(frozen=True)
class Bookmark:
    """
    Named jump target.

    Attributes:
        title: Text shown in the viewer's outline panel
        page_number: 1-based absolute page number in the document it belongs to
    """
    title: str
    page_number: int


@dataclass(frozen=True)
class OutlineEntry:
    """Outline item at any nesting level (``depth`` 0 is top-level)."""

    title: str
    page_number: int
    depth: int = 0


@dataclass(frozen=True)
class DocumentMetadata:
    title: Optional[str] = None
    author: Optional[str] = None
    subject: Optional[str] = None
    creator: Optional[str] = None
    producer: Optional[str] = None
    keywords: Optional[str] = None

    def to_pdf_dict(self) -> Dict[str, str]:
        """Return the non-empty fields keyed by PDF info dictionary names."""
        mapping = {
            "/Title": self.title,
            "/Author": self.author,
            "/Subject": self.subject,
            "/Creator": self.creator,
            "/Producer": self.producer,
            "/Keywords": self.keywords,
        }
        return {key: value for key, value in mapping.items() if value}


@dataclass(frozen=True)
class NamedSource:
    """An input buffer together with the name used for bookmarks and logs."""

    data: bytes
    name: Optional[str] = None


@dataclass
class DocumentInfo:
    """
    Summary of a decoded document.

    Attributes:
        name: Declared source name, if any
        num_pages: Number of pages
        file_size: Buffer size in bytes
        metadata: Title/author/subject and friends
        page_sizes: Mediabox size of every page, in order
        bookmarks: Top-level bookmarks in outline order
        is_encrypted: Whether the buffer was encrypted (and opened with an empty password)
    """
    name: Optional[str]
    num_pages: int
    file_size: int
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)
    page_sizes: List[PageSize] = field(default_factory=list)
    bookmarks: List[Bookmark] = field(default_factory=list)
    is_encrypted: bool = False


@dataclass
class SplitOutput:
    """
    One document produced by a split.

    Attributes:
        name: Output file name suggestion (always ends in ``.pdf``)
        data: Serialized document
        page_count: Number of pages in ``data``
        range: The source page range the output was cut from
    """
    name: str
    data: bytes
    page_count: int
    range: PageRange

    def __str__(self) -> str:
        return f"SplitOutput(name={self.name!r}, pages={self.page_count}, bytes={len(self.data)})"


__all__ = [
    "Bookmark",
    "OutlineEntry",
    "DocumentMetadata",
    "NamedSource",
    "DocumentInfo",
    "SplitOutput",
    "PageRange",
]
