"""Top-level entry points: merge, split, compress and images-to-document.

Every call works on byte buffers only and keeps no state between calls.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence, Union

from .backends import PypdfBackend
from .backends.base import DocumentBackend
from .builder import DocumentBuilder, extract_range
from .compression import CompressionResult, Compressor
from .config import EngineConfig
from .core import ranges as range_planner
from .core.ranges import PageRange
from .core.utils import CancellationToken, check_cancelled, format_file_size, get_logger
from .document import SourceDocument, open_document
from .exceptions import EncodeError, InvalidOptionsError
from .imaging import assemble_images
from .options import CompressOptions, ImageAssemblyOptions, MergeOptions, SplitOptions, SplitStrategy
from .types import DocumentInfo, DocumentMetadata, NamedSource, SplitOutput

LOGGER = get_logger("pagesmith.engine")

SourceLike = Union[NamedSource, bytes, bytearray]


def _as_named(source: SourceLike, position: int) -> NamedSource:
    if isinstance(source, NamedSource):
        if source.name:
            return source
        return NamedSource(source.data, f"Document {position}")
    if isinstance(source, (bytes, bytearray)):
        return NamedSource(bytes(source), f"Document {position}")
    raise InvalidOptionsError(f"Unsupported source type: {type(source).__name__}")


def _apply_page_order(sources: Sequence[SourceLike], page_order: Optional[Sequence[int]]) -> List[SourceLike]:
    if page_order is None:
        return list(sources)
    order = list(page_order)
    if sorted(order) != list(range(len(sources))):
        raise InvalidOptionsError(
            f"page_order must be a permutation of 0..{len(sources) - 1}, got {order}"
        )
    return [sources[index] for index in order]


def _unique_file_names(page_ranges: Sequence[PageRange]) -> List[str]:
    """Output names in range order; repeats get ``_2``, ``_3``... suffixes.

    Names are compared case-insensitively so outputs never overwrite each
    other on case-insensitive filesystems.
    """

    taken: set = set()
    names: List[str] = []
    for index, page_range in enumerate(page_ranges, start=1):
        name = page_range.file_name(index)
        stem = name[: -len(".pdf")]
        candidate, counter = name, 1
        while candidate.lower() in taken:
            counter += 1
            candidate = f"{stem}_{counter}.pdf"
        taken.add(candidate.lower())
        names.append(candidate)
    return names


class AssemblyEngine:
    """Runs document operations with one :class:`EngineConfig`."""

    def __init__(self, config: Optional[EngineConfig] = None, *, backend: Optional[DocumentBackend] = None) -> None:
        self.config = config or EngineConfig()
        self.backend: DocumentBackend = backend or PypdfBackend()

    def open(self, source: SourceLike) -> SourceDocument:
        named = _as_named(source, 1)
        return open_document(named.data, named.name, backend=self.backend)

    def info(self, source: SourceLike) -> DocumentInfo:
        return self.open(source).info()

    # ------------------------------------------------------------------
    # Merge
    # ------------------------------------------------------------------
    def merge(
        self,
        sources: Sequence[SourceLike],
        options: Optional[MergeOptions] = None,
        *,
        cancel: Optional[CancellationToken] = None,
    ) -> bytes:
        options = options or MergeOptions()
        if len(sources) < 2:
            raise InvalidOptionsError("Merge requires at least two source documents")

        ordered = _apply_page_order(sources, options.page_order)
        named = [_as_named(source, position) for position, source in enumerate(ordered, start=1)]

        # Decode everything first so a bad source fails before any output work.
        documents = []
        for item in named:
            check_cancelled(cancel)
            documents.append(open_document(item.data, item.name, backend=self.backend))

        builder = DocumentBuilder(self.config, backend=self.backend)
        if options.add_title_page:
            builder.add_title_page(options.title_page, documents[0].page_dimensions(1))

        for document in documents:
            LOGGER.debug("Copying %d page(s) from %s", document.page_count, document.name)
            builder.add_source(
                document,
                title=document.name if options.add_bookmarks else None,
                remove_blank_pages=options.remove_blank_pages,
                cancel=cancel,
            )

        if not builder.page_count:
            raise EncodeError("Every page was removed as blank; nothing to merge")

        if options.add_page_numbers or options.watermark is not None:
            builder.decorate(
                page_numbers=options.page_numbers if options.add_page_numbers else None,
                watermark=options.watermark,
                cancel=cancel,
            )

        metadata: Optional[DocumentMetadata] = None
        if options.add_title_page and not options.title_page.is_empty():
            metadata = options.title_page.as_metadata()
        elif options.copy_metadata:
            first = documents[0].metadata
            metadata = DocumentMetadata(title=first.title, author=first.author, subject=first.subject, keywords=first.keywords)

        data = builder.finalize(metadata, optimize=options.optimize_for_print)
        LOGGER.info(
            "Merged %d document(s) into %d page(s), %s",
            len(documents),
            builder.page_count,
            format_file_size(len(data)),
        )
        return data

    # ------------------------------------------------------------------
    # Split
    # ------------------------------------------------------------------
    def plan_split(
        self,
        document: SourceDocument,
        options: SplitOptions,
        *,
        cancel: Optional[CancellationToken] = None,
    ) -> List[PageRange]:
        strategy = options.strategy
        if strategy is SplitStrategy.PAGES:
            return range_planner.by_page_count(document.page_count, options.pages_per_file or 1)
        if strategy is SplitStrategy.SIZE:
            sizes = []
            for page_number in range(1, document.page_count + 1):
                check_cancelled(cancel)
                sizes.append(document.estimate_page_size(page_number))
            return range_planner.by_max_size_bytes(
                sizes, options.max_size_bytes or 0, overhead=document.document_overhead()
            )
        if strategy is SplitStrategy.BOOKMARKS:
            return range_planner.by_bookmark(document.bookmarks(), document.page_count)
        return range_planner.custom(options.ranges(), document.page_count)

    def split(
        self,
        source: SourceLike,
        options: Optional[SplitOptions] = None,
        *,
        cancel: Optional[CancellationToken] = None,
    ) -> List[SplitOutput]:
        options = options or SplitOptions()
        named = _as_named(source, 1)
        document = open_document(named.data, named.name, backend=self.backend)
        page_ranges = self.plan_split(document, options, cancel=cancel)
        LOGGER.debug(
            "Split plan for %s: %s (covers every page once: %s)",
            named.name,
            ", ".join(f"{item.start}-{item.end}" for item in page_ranges),
            range_planner.ranges_cover_exactly(page_ranges, document.page_count),
        )

        def _render(name: str, page_range: PageRange, doc: SourceDocument) -> SplitOutput:
            check_cancelled(cancel)
            data = extract_range(
                doc,
                page_range,
                config=self.config,
                copy_metadata=options.add_metadata,
                preserve_bookmarks=options.preserve_bookmarks,
                optimize=options.optimize_output,
                cancel=cancel,
            )
            return SplitOutput(name=name, data=data, page_count=page_range.length, range=page_range)

        def _render_isolated(name: str, page_range: PageRange) -> SplitOutput:
            # Readers are not shared between threads; each worker decodes its own.
            doc = open_document(named.data, named.name, backend=self.backend)
            return _render(name, page_range, doc)

        jobs = list(zip(_unique_file_names(page_ranges), page_ranges))
        if self.config.max_workers > 1 and len(jobs) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
                futures = [pool.submit(_render_isolated, name, page_range) for name, page_range in jobs]
                outputs = [future.result() for future in futures]
        else:
            outputs = [_render(name, page_range, document) for name, page_range in jobs]

        LOGGER.info("Split %s into %d document(s)", named.name, len(outputs))
        return outputs

    # ------------------------------------------------------------------
    # Compress / images
    # ------------------------------------------------------------------
    def compress(
        self,
        source: SourceLike,
        options: Optional[CompressOptions] = None,
        *,
        cancel: Optional[CancellationToken] = None,
    ) -> CompressionResult:
        named = _as_named(source, 1)
        return Compressor(self.backend, producer=self.config.producer).compress(named.data, options, cancel=cancel)

    def images_to_document(
        self,
        images: Sequence[bytes],
        options: Optional[ImageAssemblyOptions] = None,
        *,
        cancel: Optional[CancellationToken] = None,
    ) -> bytes:
        data = assemble_images(images, options, self.config, cancel=cancel)
        LOGGER.info("Assembled %d image(s) into %s", len(images), format_file_size(len(data)))
        return data


def merge_documents(
    sources: Sequence[SourceLike],
    options: Optional[MergeOptions] = None,
    *,
    config: Optional[EngineConfig] = None,
    cancel: Optional[CancellationToken] = None,
) -> bytes:
    return AssemblyEngine(config).merge(sources, options, cancel=cancel)


def split_document(
    source: SourceLike,
    options: Optional[SplitOptions] = None,
    *,
    config: Optional[EngineConfig] = None,
    cancel: Optional[CancellationToken] = None,
) -> List[SplitOutput]:
    return AssemblyEngine(config).split(source, options, cancel=cancel)


def compress_document(
    source: SourceLike,
    options: Optional[CompressOptions] = None,
    *,
    config: Optional[EngineConfig] = None,
    cancel: Optional[CancellationToken] = None,
) -> CompressionResult:
    return AssemblyEngine(config).compress(source, options, cancel=cancel)


def images_to_pdf(
    images: Sequence[bytes],
    options: Optional[ImageAssemblyOptions] = None,
    *,
    config: Optional[EngineConfig] = None,
    cancel: Optional[CancellationToken] = None,
) -> bytes:
    return AssemblyEngine(config).images_to_document(images, options, cancel=cancel)


__all__ = [
    "AssemblyEngine",
    "SourceLike",
    "merge_documents",
    "split_document",
    "compress_document",
    "images_to_pdf",
]
