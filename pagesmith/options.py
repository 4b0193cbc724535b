"""Typed option structs for every engine operation.

Each field carries its default on the type. ``__post_init__`` coerces plain
strings to their enums (so options can be built from CLI or JSON values) and
checks the invariants that do not depend on the input documents.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence, Tuple

from .core.layout import Anchor, LayoutMode, Orientation, PageSize
from .core.ranges import PageRange, coerce_ranges
from .exceptions import InvalidOptionsError
from .types import DocumentMetadata


class NumberStyle(str, Enum):
    ARABIC = "arabic"
    ROMAN = "roman"


class SplitStrategy(str, Enum):
    PAGES = "pages"
    SIZE = "size"
    BOOKMARKS = "bookmarks"
    CUSTOM = "custom"


class CompressionLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    MAXIMUM = "maximum"


WATERMARK_CENTER = "center"


def _coerce_enum(enum_type, value, field_name: str):
    try:
        return enum_type(value)
    except ValueError as exc:
        choices = ", ".join(member.value for member in enum_type)
        raise InvalidOptionsError(f"Invalid {field_name} {value!r}; expected one of: {choices}") from exc


@dataclass
class PageNumberOptions:
    position: Anchor = Anchor.BOTTOM_RIGHT
    style: NumberStyle = NumberStyle.ARABIC
    font_size: float = 10
    color: str = "#808080"

    def __post_init__(self) -> None:
        self.position = _coerce_enum(Anchor, self.position, "page number position")
        self.style = _coerce_enum(NumberStyle, self.style, "page number style")
        if self.font_size <= 0:
            raise InvalidOptionsError("Page number font size must be positive")


@dataclass
class Watermark:
    """Semi-transparent rotated text stamp.

    ``position`` is ``"center"`` or any :class:`~pagesmith.core.layout.Anchor`
    value; the text is rotated around its anchor point.
    """

    text: str = "WATERMARK"
    opacity: float = 0.3
    rotation: float = 45
    font_size: float = 48
    color: str = "#cccccc"
    position: str = WATERMARK_CENTER

    def __post_init__(self) -> None:
        if not 0 < self.opacity <= 1:
            raise InvalidOptionsError(f"Watermark opacity must be in (0, 1], got {self.opacity}")
        if self.font_size <= 0:
            raise InvalidOptionsError("Watermark font size must be positive")
        if not self.text:
            raise InvalidOptionsError("Watermark text cannot be empty")
        position = getattr(self.position, "value", self.position)
        if position != WATERMARK_CENTER:
            position = _coerce_enum(Anchor, position, "watermark position").value
        self.position = position


@dataclass
class TitlePage:
    title: Optional[str] = None
    author: Optional[str] = None
    subject: Optional[str] = None

    def as_metadata(self) -> DocumentMetadata:
        return DocumentMetadata(title=self.title, author=self.author, subject=self.subject)

    def is_empty(self) -> bool:
        return not (self.title or self.author or self.subject)


@dataclass
class MergeOptions:
    add_bookmarks: bool = False
    add_page_numbers: bool = False
    page_numbers: PageNumberOptions = field(default_factory=PageNumberOptions)
    add_title_page: bool = False
    title_page: TitlePage = field(default_factory=TitlePage)
    page_order: Optional[Sequence[int]] = None
    remove_blank_pages: bool = False
    optimize_for_print: bool = False
    watermark: Optional[Watermark] = None
    copy_metadata: bool = True


@dataclass
class SplitOptions:
    """Options for :meth:`~pagesmith.engine.AssemblyEngine.split`.

    Only the parameter belonging to ``strategy`` may be set:
    ``pages_per_file`` for ``pages``, ``max_size_bytes`` for ``size`` and
    ``custom_ranges`` for ``custom``. ``bookmarks`` takes none.
    """

    strategy: SplitStrategy = SplitStrategy.PAGES
    pages_per_file: Optional[int] = None
    max_size_bytes: Optional[int] = None
    custom_ranges: Sequence[object] = ()
    add_metadata: bool = True
    preserve_bookmarks: bool = True
    optimize_output: bool = False

    def __post_init__(self) -> None:
        self.strategy = _coerce_enum(SplitStrategy, self.strategy, "split strategy")
        given = {
            SplitStrategy.PAGES: self.pages_per_file is not None,
            SplitStrategy.SIZE: self.max_size_bytes is not None,
            SplitStrategy.CUSTOM: bool(self.custom_ranges),
        }
        foreign = [strategy.value for strategy, is_set in given.items() if is_set and strategy is not self.strategy]
        if foreign:
            raise InvalidOptionsError(
                f"Split strategy '{self.strategy.value}' does not accept parameters for: {', '.join(foreign)}"
            )

        if self.strategy is SplitStrategy.PAGES:
            if self.pages_per_file is None:
                self.pages_per_file = 1
            if self.pages_per_file < 1:
                raise InvalidOptionsError(f"pages_per_file must be >= 1, got {self.pages_per_file}")
        elif self.strategy is SplitStrategy.SIZE:
            if self.max_size_bytes is None or self.max_size_bytes < 1:
                raise InvalidOptionsError("Split by size requires a positive max_size_bytes")
        elif self.strategy is SplitStrategy.CUSTOM:
            if not self.custom_ranges:
                raise InvalidOptionsError("Custom split requires at least one range")
            self.custom_ranges = tuple(coerce_ranges(self.custom_ranges))

    def ranges(self) -> Tuple[PageRange, ...]:
        return tuple(self.custom_ranges)  # type: ignore[arg-type]


@dataclass
class CompressOptions:
    level: CompressionLevel = CompressionLevel.MEDIUM
    image_quality: int = 85
    remove_metadata: bool = False
    remove_annotations: bool = False
    remove_bookmarks: bool = False
    remove_javascript: bool = False
    remove_attachments: bool = False
    optimize_images: bool = True
    downsample_images: bool = False
    max_image_dpi: int = 150
    convert_to_grayscale: bool = False
    remove_unused_objects: bool = True
    compress_streams: bool = True

    def __post_init__(self) -> None:
        self.level = _coerce_enum(CompressionLevel, self.level, "compression level")
        if not 0 <= self.image_quality <= 100:
            raise InvalidOptionsError(f"image_quality must be within 0..100, got {self.image_quality}")
        if self.max_image_dpi < 1:
            raise InvalidOptionsError("max_image_dpi must be positive")


@dataclass
class ImageAssemblyOptions:
    page_size: Optional[str] = None
    custom_size: Optional[PageSize] = None
    orientation: Orientation = Orientation.PORTRAIT
    margin: float = 50
    images_per_page: int = 1
    layout: LayoutMode = LayoutMode.FIT
    background_color: Optional[str] = None
    add_border: bool = False
    border_width: float = 1
    border_color: str = "#000000"
    image_quality: int = 95
    add_page_numbers: bool = False
    page_numbers: PageNumberOptions = field(
        default_factory=lambda: PageNumberOptions(position=Anchor.BOTTOM_CENTER)
    )
    add_timestamp: bool = False
    watermark: Optional[Watermark] = None
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)

    def __post_init__(self) -> None:
        self.orientation = _coerce_enum(Orientation, self.orientation, "orientation")
        self.layout = _coerce_enum(LayoutMode, self.layout, "image layout")
        if self.images_per_page < 1:
            raise InvalidOptionsError(f"images_per_page must be >= 1, got {self.images_per_page}")
        if self.margin < 0:
            raise InvalidOptionsError("margin cannot be negative")
        if not 0 <= self.image_quality <= 100:
            raise InvalidOptionsError(f"image_quality must be within 0..100, got {self.image_quality}")
        if self.border_width < 0:
            raise InvalidOptionsError("border_width cannot be negative")
        if self.custom_size is not None:
            self.custom_size = PageSize(float(self.custom_size[0]), float(self.custom_size[1]))


__all__ = [
    "NumberStyle",
    "SplitStrategy",
    "CompressionLevel",
    "PageNumberOptions",
    "Watermark",
    "TitlePage",
    "MergeOptions",
    "SplitOptions",
    "CompressOptions",
    "ImageAssemblyOptions",
    "WATERMARK_CENTER",
]
