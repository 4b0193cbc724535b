"""Page geometry helpers.

Everything in this module is pure: no document or image objects, only
numbers in PDF point units (1/72 inch) with the origin at the bottom-left
corner of the page.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, NamedTuple, Tuple

TEXT_INSET = 20.0

_HEX_COLOR = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)


class PageSize(NamedTuple):
    width: float
    height: float


PAGE_SIZES: dict[str, PageSize] = {
    "A4": PageSize(595, 842),
    "LETTER": PageSize(612, 792),
    "LEGAL": PageSize(612, 1008),
    "A3": PageSize(842, 1191),
    "A5": PageSize(420, 595),
}


class Orientation(str, Enum):
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"


class LayoutMode(str, Enum):
    """How a raster image is fitted into its bounding box."""

    FIT = "fit"
    FILL = "fill"
    STRETCH = "stretch"
    CENTER = "center"


class Anchor(str, Enum):
    TOP_LEFT = "top-left"
    TOP_CENTER = "top-center"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_CENTER = "bottom-center"
    BOTTOM_RIGHT = "bottom-right"


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    def inflate(self, amount: float) -> "Rect":
        return Rect(
            self.x - amount,
            self.y - amount,
            self.width + amount * 2,
            self.height + amount * 2,
        )


def page_dimensions_for(
    page_size: str | PageSize | Tuple[float, float] = "A4",
    orientation: Orientation | str = Orientation.PORTRAIT,
    custom_size: PageSize | Tuple[float, float] | None = None,
) -> PageSize:
    """Return the page size for a named size or a custom ``(width, height)``.

    Named sizes are matched case-insensitively and unknown names fall back to
    A4. ``"custom"`` requires ``custom_size``. Landscape swaps width and height.
    """

    if isinstance(page_size, str):
        key = page_size.strip().upper()
        if key == "CUSTOM":
            if custom_size is None:
                raise ValueError("custom page size requested without dimensions")
            dimensions = PageSize(float(custom_size[0]), float(custom_size[1]))
        else:
            dimensions = PAGE_SIZES.get(key, PAGE_SIZES["A4"])
    else:
        dimensions = PageSize(float(page_size[0]), float(page_size[1]))

    if dimensions.width <= 0 or dimensions.height <= 0:
        raise ValueError(f"Page dimensions must be positive, got {dimensions}")

    if Orientation(orientation) is Orientation.LANDSCAPE:
        return PageSize(dimensions.height, dimensions.width)
    return dimensions


def margin_box(page: PageSize, margin: float) -> Rect:
    """Return the drawable area of ``page`` inside a uniform ``margin``."""

    width = page.width - margin * 2
    height = page.height - margin * 2
    if width <= 0 or height <= 0:
        raise ValueError(f"Margin {margin} leaves no drawable area on a {page.width}x{page.height} page")
    return Rect(margin, margin, width, height)


def layout_cells(box: Rect, count: int) -> List[Rect]:
    """Split ``box`` into ``count`` equal grid cells.

    Cells are ordered left-to-right, top-to-bottom. With ``count == 1`` the
    only cell is ``box`` itself.
    """

    if count < 1:
        raise ValueError("count must be >= 1")
    columns = math.ceil(math.sqrt(count))
    rows = math.ceil(count / columns)
    cell_width = box.width / columns
    cell_height = box.height / rows

    cells: List[Rect] = []
    for index in range(count):
        row, column = divmod(index, columns)
        x = box.x + column * cell_width
        y = box.y + box.height - (row + 1) * cell_height
        cells.append(Rect(x, y, cell_width, cell_height))
    return cells


def fit_image(
    image_width: float,
    image_height: float,
    box: Rect,
    layout: LayoutMode | str = LayoutMode.FIT,
) -> Rect:
    """Place an image of the given pixel size inside ``box``.

    ``fit`` scales uniformly to the largest size that fits. ``fill`` and
    ``stretch`` take the box dimensions (aspect ratio is not preserved).
    ``center`` keeps the original size and may overflow the box. The result
    is always centred on the box.
    """

    if image_width <= 0 or image_height <= 0:
        raise ValueError("Image dimensions must be positive")

    mode = LayoutMode(layout)
    if mode is LayoutMode.FIT:
        scale = min(box.width / image_width, box.height / image_height)
        width = image_width * scale
        height = image_height * scale
    elif mode in (LayoutMode.FILL, LayoutMode.STRETCH):
        width = box.width
        height = box.height
    else:
        width = float(image_width)
        height = float(image_height)

    x = box.x + (box.width - width) / 2
    y = box.y + (box.height - height) / 2
    return Rect(x, y, width, height)


def text_position(
    page_width: float,
    page_height: float,
    text_width: float,
    anchor: Anchor | str = Anchor.BOTTOM_RIGHT,
    inset: float = TEXT_INSET,
) -> Tuple[float, float]:
    """Return the baseline origin for ``text_width`` wide text at ``anchor``."""

    anchor = Anchor(anchor)
    if anchor.value.startswith("top"):
        y = page_height - inset
    else:
        y = inset

    if anchor.value.endswith("left"):
        x = inset
    elif anchor.value.endswith("center"):
        x = (page_width - text_width) / 2
    else:
        x = page_width - text_width - inset
    return x, y


_ROMAN_TABLE = (
    (1000, "M"),
    (900, "CM"),
    (500, "D"),
    (400, "CD"),
    (100, "C"),
    (90, "XC"),
    (50, "L"),
    (40, "XL"),
    (10, "X"),
    (9, "IX"),
    (5, "V"),
    (4, "IV"),
    (1, "I"),
)


def to_roman(number: int) -> str:
    """Convert ``number`` (1..3999) to an upper-case Roman numeral."""

    if not 1 <= number <= 3999:
        raise ValueError(f"Roman numerals are defined for 1..3999, got {number}")
    parts: List[str] = []
    for value, symbol in _ROMAN_TABLE:
        count, number = divmod(number, value)
        parts.append(symbol * count)
    return "".join(parts)


def parse_hex_color(value: str | None) -> Tuple[float, float, float]:
    """Convert ``#rrggbb`` to RGB floats in ``0..1``; invalid input is black."""

    match = _HEX_COLOR.match(value.strip()) if value else None
    if not match:
        return 0.0, 0.0, 0.0
    return tuple(int(group, 16) / 255 for group in match.groups())  # type: ignore[return-value]


__all__ = [
    "PAGE_SIZES",
    "TEXT_INSET",
    "PageSize",
    "Rect",
    "Orientation",
    "LayoutMode",
    "Anchor",
    "page_dimensions_for",
    "margin_box",
    "layout_cells",
    "fit_image",
    "text_position",
    "to_roman",
    "parse_hex_color",
]
