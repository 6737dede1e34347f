"""CLI commands for listing and inspecting local images."""

from pathlib import Path
from typing import Optional

import typer
from rich.filesize import decimal
from rich.table import Table
from rich import box

from crtkit.cli.utils import console, fail, format_created, load_adapter, output_json, resolve_format
from crtkit.models.image import BasicImageInfo, ImageHistory
from crtkit.utils.errors import CrtError
from crtkit.utils.images import short_image_id


def images_cmd(
    runtime: Optional[str] = typer.Option(
        None,
        "--runtime",
        "-r",
        help="Container runtime (auto, docker, podman)",
    ),
    name_filter: str = typer.Option(
        "",
        "--filter",
        help="Only show images matching this reference",
    ),
    show_all: bool = typer.Option(
        False,
        "--all",
        "-a",
        help="Include intermediate images",
    ),
    format: Optional[str] = typer.Option(
        None,
        "--format",
        "-f",
        help="Output format (table, json); output.default_format when omitted",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file path (json only)",
    ),
) -> None:
    """
    List local container images.

    Example:
        crtkit images --runtime docker --filter nginx
    """
    format = resolve_format(format)
    adapter = load_adapter(runtime)

    try:
        with console.status("Listing images..."):
            if show_all:
                records = adapter.list_images_all()
                images = {
                    (info.repo_tags[0] if info.repo_tags else info.id): info
                    for info in records
                }
            else:
                images = adapter.list_images(name_filter)
    except CrtError as e:
        fail(e)

    if format == "json":
        output_json(images, output)
        return

    console.print(images_table(images))


def images_table(images: dict[str, BasicImageInfo]) -> Table:
    """Build the image listing table."""
    table = Table(box=box.SIMPLE, show_edge=False)
    table.add_column("Name", style="cyan")
    table.add_column("ID")
    table.add_column("Size", justify="right")
    table.add_column("Created")

    for name, info in sorted(images.items()):
        table.add_row(
            name,
            short_image_id(info.id),
            decimal(info.size),
            format_created(info.created),
        )
    return table


def inspect_cmd(
    image: str = typer.Argument(..., help="Image reference or ID"),
    runtime: Optional[str] = typer.Option(None, "--runtime", "-r", help="Container runtime"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file path"),
) -> None:
    """
    Show full details of a local image as JSON.

    Example:
        crtkit inspect nginx:latest
    """
    adapter = load_adapter(runtime)
    try:
        info = adapter.inspect_image(image)
    except CrtError as e:
        fail(e)

    output_json(info, output)


def history_cmd(
    image: str = typer.Argument(..., help="Image reference or ID"),
    runtime: Optional[str] = typer.Option(None, "--runtime", "-r", help="Container runtime"),
    format: Optional[str] = typer.Option(
        None,
        "--format",
        "-f",
        help="Output format (table, json); output.default_format when omitted",
    ),
) -> None:
    """
    Show the layer history of a local image.

    Example:
        crtkit history nginx:latest
    """
    format = resolve_format(format)
    adapter = load_adapter(runtime)
    try:
        history = adapter.get_images_history(image)
    except CrtError as e:
        fail(e)

    if format == "json":
        output_json(history)
        return

    console.print(history_table(history))


def history_table(history: list[ImageHistory]) -> Table:
    """Build the layer history table, keeping engine order."""
    table = Table(box=box.SIMPLE, show_edge=False)
    table.add_column("ID")
    table.add_column("Created")
    table.add_column("Created By", overflow="fold", max_width=60)
    table.add_column("Size", justify="right")
    table.add_column("Comment")

    for entry in history:
        table.add_row(
            short_image_id(entry.id) if entry.id and entry.id != "<missing>" else "<missing>",
            format_created(entry.created),
            entry.created_by,
            decimal(entry.size),
            entry.comment,
        )
    return table
