"""
Command-line interface for pagesmith.

This is the only layer that reads or writes files; everything below it works
on byte buffers.
"""

import dataclasses
import os
import sys

import click
from rich.console import Console
from rich.table import Table

from pagesmith import __version__
from pagesmith.config import EngineConfig
from pagesmith.core.layout import PAGE_SIZES, Anchor, LayoutMode, Orientation
from pagesmith.core.ranges import parse_page_ranges
from pagesmith.core.utils import format_file_size
from pagesmith.engine import AssemblyEngine
from pagesmith.exceptions import PageSmithError
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
from pagesmith.tools import load_builtin_plugins, registry
from pagesmith.tools.common.interfaces import ToolContext
from pagesmith.types import DocumentMetadata, NamedSource

console = Console()

ANCHORS = [anchor.value for anchor in Anchor]


def _fail(error):
    console.print(f"\n[bold red]✗ Error:[/bold red] {error}")
    sys.exit(1)


def _read(path):
    with open(path, "rb") as handle:
        return NamedSource(handle.read(), os.path.splitext(os.path.basename(path))[0])


def _write(path, data):
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    with open(path, "wb") as handle:
        handle.write(data)


def _run(ctx, tool, inputs, options):
    context = ToolContext(inputs=inputs, options=options, config=ctx.obj["config"])
    return registry.run(tool, context)


def _watermark(text, opacity):
    if not text:
        return None
    return Watermark(text=text, opacity=opacity)


@click.group()
@click.version_option(version=__version__)
@click.option("--workers", type=int, default=None, help="Worker threads for image and split work")
@click.pass_context
def cli(ctx, workers):
    """
    pagesmith - merge, split, compress and build PDF documents.
    """
    load_builtin_plugins()
    config = EngineConfig.from_env()
    if workers is not None:
        try:
            config = dataclasses.replace(config, max_workers=workers)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--workers")
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@cli.command(name="info")
@click.argument("input_pdf", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def show_info(ctx, input_pdf):
    """
    Display information about a PDF file.

    Example:

        pagesmith info input.pdf
    """
    try:
        info = AssemblyEngine(ctx.obj["config"]).info(_read(input_pdf))
    except (PageSmithError, OSError) as e:
        _fail(e)

    table = Table(title=f"PDF Information: {os.path.basename(input_pdf)}")
    table.add_column("Property", style="cyan", no_wrap=True)
    table.add_column("Value", style="green")

    table.add_row("File Size", format_file_size(info.file_size))
    table.add_row("Number of Pages", str(info.num_pages))
    table.add_row("Encrypted", "Yes" if info.is_encrypted else "No")
    if info.page_sizes:
        first = info.page_sizes[0]
        table.add_row("First Page", f"{first.width:.0f} x {first.height:.0f} pt")
    for label, value in (
        ("Title", info.metadata.title),
        ("Author", info.metadata.author),
        ("Subject", info.metadata.subject),
        ("Creator", info.metadata.creator),
        ("Producer", info.metadata.producer),
    ):
        if value:
            table.add_row(label, value)
    table.add_row("Bookmarks", str(len(info.bookmarks)))

    console.print()
    console.print(table)
    console.print()


@cli.command(name="merge")
@click.argument("inputs", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", required=True, type=click.Path(), help="Output PDF path")
@click.option("--bookmarks/--no-bookmarks", default=False, help="Add one bookmark per input")
@click.option("--page-numbers", is_flag=True, help="Stamp page numbers")
@click.option("--number-position", type=click.Choice(ANCHORS), default=Anchor.BOTTOM_RIGHT.value)
@click.option("--number-style", type=click.Choice([s.value for s in NumberStyle]), default="arabic")
@click.option("--title", default=None, help="Insert a title page with this title")
@click.option("--author", default=None)
@click.option("--subject", default=None)
@click.option("--remove-blank", is_flag=True, help="Drop pages without visible content")
@click.option("--optimize", is_flag=True, help="Deduplicate objects and compress streams")
@click.option("--watermark", default=None, help="Watermark text")
@click.option("--watermark-opacity", type=float, default=0.3)
@click.option("--order", default=None, help="Input order as 1-based positions, e.g. '2,1,3'")
@click.pass_context
def merge(
    ctx,
    inputs,
    output,
    bookmarks,
    page_numbers,
    number_position,
    number_style,
    title,
    author,
    subject,
    remove_blank,
    optimize,
    watermark,
    watermark_opacity,
    order,
):
    """
    Merge two or more PDF files.

    Examples:

        pagesmith merge a.pdf b.pdf -o merged.pdf

        pagesmith merge a.pdf b.pdf --bookmarks --page-numbers --title "Report" -o out.pdf
    """
    try:
        title_page = TitlePage(title=title, author=author, subject=subject)
        page_order = None
        if order:
            page_order = [int(part) - 1 for part in order.split(",") if part.strip()]
        options = MergeOptions(
            add_bookmarks=bookmarks,
            add_page_numbers=page_numbers,
            page_numbers=PageNumberOptions(position=number_position, style=number_style),
            add_title_page=not title_page.is_empty(),
            title_page=title_page,
            page_order=page_order,
            remove_blank_pages=remove_blank,
            optimize_for_print=optimize,
            watermark=_watermark(watermark, watermark_opacity),
        )
        console.print(f"\n[bold cyan]Merging {len(inputs)} file(s)...[/bold cyan]")
        data = _run(ctx, "merge", [_read(path) for path in inputs], options)
        _write(output, data)
    except (PageSmithError, OSError, ValueError) as e:
        _fail(e)

    console.print(f"\n[bold green]✓ Successfully created:[/bold green] {output}")
    console.print(f"[dim]Output size: {format_file_size(len(data))}[/dim]\n")


@cli.command(name="split")
@click.argument("input_pdf", type=click.Path(exists=True, dir_okay=False))
@click.option("--output-dir", "-o", default="./output", type=click.Path(), help="Output directory")
@click.option(
    "--strategy",
    "-s",
    type=click.Choice([s.value for s in SplitStrategy]),
    default=SplitStrategy.PAGES.value,
    help="How to cut the document",
)
@click.option("--pages-per-file", type=int, default=None, help="Pages per output (pages strategy)")
@click.option("--max-size", type=int, default=None, help="Maximum bytes per output (size strategy)")
@click.option("--ranges", "-r", default=None, help="Page ranges, e.g. '1-3,4' (custom strategy)")
@click.option("--metadata/--no-metadata", default=True, help="Copy source metadata to outputs")
@click.option("--bookmarks/--no-bookmarks", default=True, help="Keep bookmarks inside each range")
@click.option("--optimize", is_flag=True, help="Optimize each output")
@click.pass_context
def split(ctx, input_pdf, output_dir, strategy, pages_per_file, max_size, ranges, metadata, bookmarks, optimize):
    """
    Split a PDF by page count, size, bookmarks or custom ranges.

    Examples:

        pagesmith split input.pdf --pages-per-file 5

        pagesmith split input.pdf -s custom -r '1-3,4-10' -o chapters

        pagesmith split input.pdf -s bookmarks
    """
    try:
        options = SplitOptions(
            strategy=strategy,
            pages_per_file=pages_per_file,
            max_size_bytes=max_size,
            custom_ranges=parse_page_ranges(ranges) if ranges else (),
            add_metadata=metadata,
            preserve_bookmarks=bookmarks,
            optimize_output=optimize,
        )
        console.print(f"\n[bold cyan]Splitting {os.path.basename(input_pdf)} ({strategy})...[/bold cyan]")
        outputs = _run(ctx, "split", [_read(input_pdf)], options)
        for item in outputs:
            _write(os.path.join(output_dir, item.name), item.data)
    except (PageSmithError, OSError) as e:
        _fail(e)

    console.print(f"\n[bold green]✓ Successfully created {len(outputs)} file(s)[/bold green]")
    console.print(f"[dim]Output directory: {os.path.abspath(output_dir)}[/dim]")
    console.print("\n[bold]Created files:[/bold]")
    for item in outputs:
        console.print(
            f"  • {item.name} [dim](pages {item.range.start}-{item.range.end}, {item.page_count} pages)[/dim]"
        )
    console.print()


@cli.command(name="compress")
@click.argument("input_pdf", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", required=True, type=click.Path(), help="Output PDF path")
@click.option(
    "--level",
    "-l",
    type=click.Choice([level.value for level in CompressionLevel]),
    default=CompressionLevel.MEDIUM.value,
)
@click.option("--quality", type=click.IntRange(0, 100), default=85, help="JPEG quality for re-encoded images")
@click.option("--remove-metadata", is_flag=True)
@click.option("--remove-annotations", is_flag=True)
@click.option("--remove-bookmarks", is_flag=True)
@click.option("--remove-javascript", is_flag=True)
@click.option("--remove-attachments", is_flag=True)
@click.option("--downsample", is_flag=True, help="Downsample images above --max-dpi")
@click.option("--max-dpi", type=int, default=150)
@click.option("--grayscale", is_flag=True, help="Convert images to grayscale")
@click.pass_context
def compress(
    ctx,
    input_pdf,
    output,
    level,
    quality,
    remove_metadata,
    remove_annotations,
    remove_bookmarks,
    remove_javascript,
    remove_attachments,
    downsample,
    max_dpi,
    grayscale,
):
    """
    Reduce the size of a PDF file.

    Examples:

        pagesmith compress input.pdf -o smaller.pdf

        pagesmith compress input.pdf -l maximum --downsample --max-dpi 100 -o tiny.pdf
    """
    try:
        options = CompressOptions(
            level=level,
            image_quality=quality,
            remove_metadata=remove_metadata,
            remove_annotations=remove_annotations,
            remove_bookmarks=remove_bookmarks,
            remove_javascript=remove_javascript,
            remove_attachments=remove_attachments,
            downsample_images=downsample,
            max_image_dpi=max_dpi,
            convert_to_grayscale=grayscale,
        )
        console.print(f"\n[bold cyan]Compressing {os.path.basename(input_pdf)} ({level})...[/bold cyan]")
        result = _run(ctx, "compress", [_read(input_pdf)], options)
        _write(output, result.data)
    except (PageSmithError, OSError) as e:
        _fail(e)

    table = Table(title="Compression Result", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Original Size", format_file_size(result.original_size))
    table.add_row("Compressed Size", format_file_size(result.compressed_size))
    table.add_row("Saved", f"{result.compression_ratio}%")
    table.add_row("Images Re-encoded", str(result.images_optimized))
    console.print(table)

    if not result.is_worth_keeping():
        console.print("[bold yellow]⚠ The document was already well compressed[/bold yellow]")
    console.print(f"\n[bold green]✓ Successfully created:[/bold green] {output}\n")


@cli.command(name="images")
@click.argument("images", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", required=True, type=click.Path(), help="Output PDF path")
@click.option("--page-size", type=click.Choice(sorted(PAGE_SIZES), case_sensitive=False), default=None)
@click.option("--orientation", type=click.Choice([o.value for o in Orientation]), default="portrait")
@click.option("--margin", type=float, default=50)
@click.option("--per-page", type=int, default=1, help="Images per page")
@click.option("--layout", type=click.Choice([mode.value for mode in LayoutMode]), default="fit")
@click.option("--background", default=None, help="Page background colour, e.g. '#f0f0f0'")
@click.option("--border", is_flag=True, help="Draw a border around each image")
@click.option("--quality", type=click.IntRange(0, 100), default=95)
@click.option("--page-numbers", is_flag=True)
@click.option("--timestamp", is_flag=True)
@click.option("--watermark", default=None, help="Watermark text")
@click.option("--title", default=None, help="Document title")
@click.pass_context
def images(
    ctx,
    images,
    output,
    page_size,
    orientation,
    margin,
    per_page,
    layout,
    background,
    border,
    quality,
    page_numbers,
    timestamp,
    watermark,
    title,
):
    """
    Build a PDF from image files.

    Examples:

        pagesmith images a.jpg b.png -o album.pdf

        pagesmith images *.jpg --per-page 4 --border --page-numbers -o contact.pdf
    """
    try:
        options = ImageAssemblyOptions(
            page_size=page_size,
            orientation=orientation,
            margin=margin,
            images_per_page=per_page,
            layout=layout,
            background_color=background,
            add_border=border,
            image_quality=quality,
            add_page_numbers=page_numbers,
            add_timestamp=timestamp,
            watermark=_watermark(watermark, 0.3),
            metadata=DocumentMetadata(title=title),
        )
        console.print(f"\n[bold cyan]Assembling {len(images)} image(s)...[/bold cyan]")
        buffers = [_read(path) for path in images]
        data = _run(ctx, "images", buffers, options)
        _write(output, data)
    except (PageSmithError, OSError) as e:
        _fail(e)

    console.print(f"\n[bold green]✓ Successfully created:[/bold green] {output}")
    console.print(f"[dim]Output size: {format_file_size(len(data))}[/dim]\n")


if __name__ == "__main__":
    cli()
