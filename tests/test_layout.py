from __future__ import annotations

import math

import pytest

from pagesmith.core.layout import (
    Anchor,
    LayoutMode,
    Orientation,
    PageSize,
    Rect,
    fit_image,
    layout_cells,
    margin_box,
    page_dimensions_for,
    parse_hex_color,
    text_position,
    to_roman,
)


def test_named_page_sizes() -> None:
    assert page_dimensions_for("A4") == PageSize(595, 842)
    assert page_dimensions_for("letter") == PageSize(612, 792)
    assert page_dimensions_for("Legal") == PageSize(612, 1008)
    assert page_dimensions_for("A3") == PageSize(842, 1191)
    assert page_dimensions_for("a5") == PageSize(420, 595)


def test_landscape_swaps_dimensions() -> None:
    assert page_dimensions_for("A4", Orientation.LANDSCAPE) == PageSize(842, 595)
    assert page_dimensions_for("letter", "landscape") == PageSize(792, 612)


def test_unknown_size_falls_back_to_a4() -> None:
    assert page_dimensions_for("tabloid") == PageSize(595, 842)


def test_custom_size_requires_dimensions() -> None:
    assert page_dimensions_for("custom", custom_size=(300, 500)) == PageSize(300, 500)
    with pytest.raises(ValueError):
        page_dimensions_for("custom")


@pytest.mark.parametrize(
    "image_size",
    [(100, 100), (4000, 3000), (30, 900), (1, 1), (1234, 77)],
)
@pytest.mark.parametrize("box", [Rect(0, 0, 495, 742), Rect(10, 20, 100, 50), Rect(50, 50, 7, 300)])
def test_fit_stays_inside_box_and_keeps_aspect(image_size, box) -> None:
    width, height = image_size
    placed = fit_image(width, height, box, LayoutMode.FIT)

    assert placed.width <= box.width + 1e-9
    assert placed.height <= box.height + 1e-9
    assert math.isclose(placed.width / placed.height, width / height, rel_tol=1e-9)
    assert placed.x >= box.x - 1e-9
    assert placed.y >= box.y - 1e-9
    # One dimension always touches the box.
    assert math.isclose(placed.width, box.width) or math.isclose(placed.height, box.height)


@pytest.mark.parametrize("mode", [LayoutMode.FILL, LayoutMode.STRETCH])
def test_fill_and_stretch_use_box_dimensions(mode) -> None:
    box = Rect(50, 50, 400, 200)
    placed = fit_image(100, 100, box, mode)
    assert placed == Rect(50, 50, 400, 200)


def test_center_keeps_original_size_and_may_overflow() -> None:
    box = Rect(0, 0, 100, 100)
    placed = fit_image(300, 50, box, "center")
    assert (placed.width, placed.height) == (300, 50)
    assert placed.x == -100
    assert placed.y == 25


def test_fit_rejects_empty_images() -> None:
    with pytest.raises(ValueError):
        fit_image(0, 10, Rect(0, 0, 10, 10))


@pytest.mark.parametrize(
    "anchor, expected",
    [
        (Anchor.TOP_LEFT, (20, 780)),
        (Anchor.TOP_CENTER, (275, 780)),
        (Anchor.TOP_RIGHT, (530, 780)),
        (Anchor.BOTTOM_LEFT, (20, 20)),
        (Anchor.BOTTOM_CENTER, (275, 20)),
        (Anchor.BOTTOM_RIGHT, (530, 20)),
    ],
)
def test_text_position_anchors(anchor, expected) -> None:
    assert text_position(600, 800, 50, anchor) == expected


def test_margin_box_and_cells() -> None:
    box = margin_box(PageSize(595, 842), 50)
    assert box == Rect(50, 50, 495, 742)

    assert layout_cells(box, 1) == [box]

    two = layout_cells(box, 2)
    assert len(two) == 2
    assert two[0].x < two[1].x
    assert two[0].y == two[1].y

    four = layout_cells(box, 4)
    assert four[0].y > four[2].y
    assert all(cell.width == box.width / 2 for cell in four)


def test_margin_box_without_area() -> None:
    with pytest.raises(ValueError):
        margin_box(PageSize(100, 100), 60)


def test_to_roman_known_values() -> None:
    assert to_roman(1) == "I"
    assert to_roman(4) == "IV"
    assert to_roman(9) == "IX"
    assert to_roman(14) == "XIV"
    assert to_roman(1994) == "MCMXCIV"
    assert to_roman(3999) == "MMMCMXCIX"


def test_to_roman_is_injective() -> None:
    numerals = {to_roman(number) for number in range(1, 4000)}
    assert len(numerals) == 3999


@pytest.mark.parametrize("value", [0, -1, 4000])
def test_to_roman_out_of_range(value) -> None:
    with pytest.raises(ValueError):
        to_roman(value)


def test_parse_hex_color() -> None:
    assert parse_hex_color("#ff0000") == (1.0, 0.0, 0.0)
    assert parse_hex_color("00FF00") == (0.0, 1.0, 0.0)
    assert parse_hex_color("not-a-colour") == (0.0, 0.0, 0.0)
    assert parse_hex_color(None) == (0.0, 0.0, 0.0)
