"""pypdf backend implementation for pagesmith."""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from typing import List, Optional

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PdfReadError
from pypdf.generic import ContentStream

from ..core.layout import PageSize
from ..core.utils import get_logger
from ..exceptions import DecodeError, EncodeError
from ..types import DocumentMetadata, OutlineEntry
from .base import BackendDocument, DocumentBackend

LOGGER = get_logger("pagesmith.backends.pypdf")

# Operators that put marks on the page. ``n`` ends a path without painting it.
PAINT_OPERATORS = frozenset(
    {
        b"Tj",
        b"TJ",
        b"'",
        b'"',
        b"S",
        b"s",
        b"f",
        b"F",
        b"f*",
        b"B",
        b"B*",
        b"b",
        b"b*",
        b"Do",
        b"sh",
        b"BI",
        b"INLINE IMAGE",
    }
)


def _text(value: object) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass
class PypdfDocument(BackendDocument):
    reader: PdfReader
    raw_bytes: bytes
    is_encrypted: bool = False
    _overhead: Optional[int] = field(default=None, repr=False)

    def get_page(self, index: int) -> object:
        return self.reader.pages[index]

    def page_size(self, index: int) -> PageSize:
        mediabox = self.reader.pages[index].mediabox
        return PageSize(float(mediabox.width), float(mediabox.height))

    def metadata(self) -> DocumentMetadata:
        info = self.reader.metadata
        if not info:
            return DocumentMetadata()
        return DocumentMetadata(
            title=_text(info.title),
            author=_text(info.author),
            subject=_text(info.subject),
            creator=_text(info.creator),
            producer=_text(info.producer),
            keywords=_text(info.get("/Keywords")),
        )

    def outline(self) -> List[OutlineEntry]:
        try:
            items = self.reader.outline
        except Exception as exc:  # pragma: no cover - malformed outlines vary
            LOGGER.warning("Ignoring unreadable outline: %s", exc)
            return []
        entries: List[OutlineEntry] = []
        self._walk_outline(items, 0, entries)
        return entries

    def _walk_outline(self, items: list, depth: int, entries: List[OutlineEntry]) -> None:
        for item in items:
            if isinstance(item, list):
                self._walk_outline(item, depth + 1, entries)
                continue
            try:
                page_index = self.reader.get_destination_page_number(item)
            except Exception:  # pragma: no cover - broken destinations
                page_index = None
            if page_index is None or page_index < 0:
                LOGGER.debug("Skipping outline item %r without a page target", getattr(item, "title", item))
                continue
            entries.append(OutlineEntry(title=str(item.title), page_number=page_index + 1, depth=depth))

    def is_blank(self, index: int) -> bool:
        page = self.reader.pages[index]
        try:
            contents = page.get_contents()
        except Exception as exc:
            LOGGER.debug("Page %s contents unreadable, keeping it: %s", index + 1, exc)
            return False
        if contents is None:
            return True
        try:
            if not isinstance(contents, ContentStream):
                contents = ContentStream(contents, self.reader)
            operations = contents.operations
        except Exception as exc:
            LOGGER.debug("Page %s content stream unparsable, keeping it: %s", index + 1, exc)
            return False
        return not any(operator in PAINT_OPERATORS for _, operator in operations)

    def estimate_page_size(self, index: int) -> int:
        writer = PdfWriter()
        writer.add_page(self.reader.pages[index])
        buffer = io.BytesIO()
        writer.write(buffer)
        return max(len(buffer.getvalue()) - self.document_overhead(), 0)

    def document_overhead(self) -> int:
        if self._overhead is None:
            buffer = io.BytesIO()
            PdfWriter().write(buffer)
            self._overhead = len(buffer.getvalue())
        return self._overhead

    def copy_metadata(self, writer: PdfWriter, *, title_suffix: str = "", pages_label: str | None = None) -> None:
        """Copy title/author/subject/creator to ``writer``, decorating the title."""

        metadata = self.metadata()
        metadata_dict = {}

        if metadata.title:
            metadata_dict["/Title"] = f"{metadata.title}{title_suffix}"
        if metadata.author:
            metadata_dict["/Author"] = metadata.author
        if metadata.subject:
            metadata_dict["/Subject"] = metadata.subject
        if metadata.creator:
            metadata_dict["/Creator"] = metadata.creator

        if pages_label:
            metadata_dict["/Keywords"] = pages_label

        if metadata_dict:
            writer.add_metadata(metadata_dict)


class PypdfBackend(DocumentBackend):
    """Backend implementation that uses `pypdf` under the hood."""

    def load(self, data: bytes, name: Optional[str] = None) -> PypdfDocument:
        label = name or "<buffer>"
        if not data:
            raise DecodeError(f"Empty document buffer: {label}")

        try:
            reader = PdfReader(io.BytesIO(data))
        except PdfReadError as exc:
            raise DecodeError(f"Corrupted or invalid PDF: {label}. Error: {exc}") from exc
        except Exception as exc:
            raise DecodeError(f"Unexpected error reading PDF: {label}. Error: {exc}") from exc

        try:
            encrypted = reader.is_encrypted
        except Exception as exc:
            raise DecodeError(f"Unreadable trailer in PDF: {label}. Error: {exc}") from exc
        if encrypted:
            LOGGER.debug("Attempting to open encrypted PDF %s with an empty password", label)
            try:
                opened = reader.decrypt("")
            except Exception as exc:
                raise DecodeError(f"Unable to decrypt encrypted PDF: {label}") from exc
            if not opened:
                raise DecodeError(f"PDF is encrypted and requires a password: {label}")

        try:
            num_pages = len(reader.pages)
        except Exception as exc:
            raise DecodeError(f"Unreadable page tree in PDF: {label}. Error: {exc}") from exc
        if num_pages == 0:
            raise DecodeError(f"PDF has no pages: {label}")

        return PypdfDocument(
            num_pages=num_pages,
            file_size=len(data),
            reader=reader,
            raw_bytes=data,
            is_encrypted=encrypted,
        )

    def new_writer(self) -> PdfWriter:
        return PdfWriter()

    def write(self, writer: PdfWriter) -> bytes:
        buffer = io.BytesIO()
        try:
            writer.write(buffer)
        except Exception as exc:
            raise EncodeError(f"Failed to serialize PDF: {exc}") from exc
        return buffer.getvalue()


__all__ = ["PypdfBackend", "PypdfDocument", "PAINT_OPERATORS"]
