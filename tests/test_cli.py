from __future__ import annotations

import io
from pathlib import Path

import pytest
from click.testing import CliRunner
from pypdf import PdfReader

from pagesmith.cli import cli


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


def _save(path: Path, data: bytes) -> str:
    path.write_bytes(data)
    return str(path)


def _pages(path: Path) -> int:
    return len(PdfReader(io.BytesIO(path.read_bytes())).pages)


def test_info(runner: CliRunner, tmp_path: Path, outlined_pdf: bytes) -> None:
    source = _save(tmp_path / "book.pdf", outlined_pdf)
    result = runner.invoke(cli, ["info", source])
    assert result.exit_code == 0, result.output
    assert "Number of Pages" in result.output
    assert "Outlined" in result.output


def test_info_on_broken_file(runner: CliRunner, tmp_path: Path) -> None:
    source = _save(tmp_path / "broken.pdf", b"this is not a pdf")
    result = runner.invoke(cli, ["info", source])
    assert result.exit_code == 1
    assert "Error" in result.output


def test_merge(runner: CliRunner, tmp_path: Path, blank_pdf_factory) -> None:
    first = _save(tmp_path / "a.pdf", blank_pdf_factory(pages=2))
    second = _save(tmp_path / "b.pdf", blank_pdf_factory(pages=1))
    output = tmp_path / "out" / "merged.pdf"

    result = runner.invoke(
        cli,
        ["merge", first, second, "-o", str(output), "--bookmarks", "--page-numbers", "--title", "Bundle"],
    )

    assert result.exit_code == 0, result.output
    reader = PdfReader(io.BytesIO(output.read_bytes()))
    assert len(reader.pages) == 4
    assert [item.title for item in reader.outline] == ["a", "b"]


def test_merge_with_order(runner: CliRunner, tmp_path: Path, text_pdf_factory) -> None:
    first = _save(tmp_path / "a.pdf", text_pdf_factory(pages=1, prefix="Alpha"))
    second = _save(tmp_path / "b.pdf", text_pdf_factory(pages=1, prefix="Beta"))
    output = tmp_path / "merged.pdf"

    result = runner.invoke(cli, ["merge", first, second, "-o", str(output), "--order", "2,1"])

    assert result.exit_code == 0, result.output
    reader = PdfReader(io.BytesIO(output.read_bytes()))
    assert "Beta" in reader.pages[0].extract_text()


def test_merge_rejects_bad_order(runner: CliRunner, tmp_path: Path, blank_pdf_factory) -> None:
    first = _save(tmp_path / "a.pdf", blank_pdf_factory())
    second = _save(tmp_path / "b.pdf", blank_pdf_factory())
    result = runner.invoke(cli, ["merge", first, second, "-o", str(tmp_path / "m.pdf"), "--order", "1,x"])
    assert result.exit_code == 1


def test_split_custom_ranges(runner: CliRunner, tmp_path: Path, text_pdf_factory) -> None:
    source = _save(tmp_path / "doc.pdf", text_pdf_factory(pages=4))
    out_dir = tmp_path / "parts"

    result = runner.invoke(cli, ["split", source, "-o", str(out_dir), "-s", "custom", "-r", "1-3,4"])

    assert result.exit_code == 0, result.output
    assert _pages(out_dir / "split_1.pdf") == 3
    assert _pages(out_dir / "split_2.pdf") == 1


def test_split_rejects_foreign_parameter(runner: CliRunner, tmp_path: Path, text_pdf_factory) -> None:
    source = _save(tmp_path / "doc.pdf", text_pdf_factory(pages=2))
    result = runner.invoke(cli, ["split", source, "-o", str(tmp_path), "-s", "bookmarks", "--pages-per-file", "2"])
    assert result.exit_code == 1


def test_compress(runner: CliRunner, tmp_path: Path, image_heavy_pdf: bytes) -> None:
    source = _save(tmp_path / "heavy.pdf", image_heavy_pdf)
    output = tmp_path / "small.pdf"

    result = runner.invoke(cli, ["compress", source, "-o", str(output), "-l", "high"])

    assert result.exit_code == 0, result.output
    assert output.stat().st_size < len(image_heavy_pdf)


def test_images(runner: CliRunner, tmp_path: Path, image_factory) -> None:
    paths = [
        _save(tmp_path / f"img{index}.png", image_factory(color=(index * 40, 80, 120)))
        for index in range(3)
    ]
    output = tmp_path / "album.pdf"

    result = runner.invoke(
        cli,
        ["--workers", "2", "images", *paths, "-o", str(output), "--per-page", "2", "--page-size", "letter"],
    )

    assert result.exit_code == 0, result.output
    assert _pages(output) == 2


def test_invalid_worker_count(runner: CliRunner, tmp_path: Path, outlined_pdf: bytes) -> None:
    source = _save(tmp_path / "book.pdf", outlined_pdf)
    result = runner.invoke(cli, ["--workers", "0", "info", source])
    assert result.exit_code != 0
