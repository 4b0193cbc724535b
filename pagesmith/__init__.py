"""
pagesmith - in-memory PDF assembly engine.

Merges documents, splits them by page count, size, bookmarks or custom
ranges, recompresses them, and lays out raster images as new documents.
Every entry point takes and returns byte buffers.

Quick Start:
    >>> from pagesmith import merge_documents, MergeOptions
    >>> data = merge_documents([first_bytes, second_bytes], MergeOptions(add_bookmarks=True))

Main Classes:
    - AssemblyEngine: Runs every operation with one EngineConfig
    - DocumentBuilder: Incremental output document construction
    - SourceDocument: Read-only view over a decoded input

Exceptions:
    - PageSmithError: Base exception
    - DecodeError / EncodeError: Fatal codec failures
    - RangeError: Page range parameters produce no range
    - ElementError: A single image or decoration failed (logged, skipped)

For CLI usage, use the 'pagesmith' command after installation.
"""

__version__ = "1.0.0"

# Core classes
from pagesmith.builder import BuildState, DocumentBuilder
from pagesmith.compression import CompressionResult
from pagesmith.config import EngineConfig
from pagesmith.core.ranges import PageRange
from pagesmith.core.utils import CancellationToken
from pagesmith.document import SourceDocument, open_document
from pagesmith.engine import (
    AssemblyEngine,
    compress_document,
    images_to_pdf,
    merge_documents,
    split_document,
)

# Exceptions
from pagesmith.exceptions import (
    BuildStateError,
    DecodeError,
    ElementError,
    EncodeError,
    InvalidOptionsError,
    OperationCancelledError,
    PageSmithError,
    RangeError,
)

# Option structs and data types
from pagesmith.options import (
    CompressionLevel,
    CompressOptions,
    ImageAssemblyOptions,
    MergeOptions,
    NumberStyle,
    PageNumberOptions,
    SplitOptions,
    SplitStrategy,
    TitlePage,
    Watermark,
)
from pagesmith.types import Bookmark, DocumentInfo, DocumentMetadata, NamedSource, SplitOutput

__all__ = [
    # Main classes
    "AssemblyEngine",
    "BuildState",
    "DocumentBuilder",
    "SourceDocument",
    "open_document",
    "EngineConfig",
    "CancellationToken",
    # Entry points
    "merge_documents",
    "split_document",
    "compress_document",
    "images_to_pdf",
    # Data types
    "Bookmark",
    "CompressionResult",
    "DocumentInfo",
    "DocumentMetadata",
    "NamedSource",
    "PageRange",
    "SplitOutput",
    # Options
    "CompressionLevel",
    "CompressOptions",
    "ImageAssemblyOptions",
    "MergeOptions",
    "NumberStyle",
    "PageNumberOptions",
    "SplitOptions",
    "SplitStrategy",
    "TitlePage",
    "Watermark",
    # Exceptions
    "PageSmithError",
    "DecodeError",
    "EncodeError",
    "RangeError",
    "ElementError",
    "InvalidOptionsError",
    "BuildStateError",
    "OperationCancelledError",
    # Version info
    "__version__",
]
