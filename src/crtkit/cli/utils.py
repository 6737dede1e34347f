"""Shared utilities for CLI commands."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, NoReturn

import typer
from pydantic import BaseModel
from rich.console import Console

from crtkit.utils.errors import BadParamError, CrtError

if TYPE_CHECKING:
    from crtkit.runtime.base import RuntimeAdapter

# Shared console instance
console = Console()


def load_adapter(runtime: str | None) -> "RuntimeAdapter":
    """Create the runtime adapter for a command, exiting on failure.

    Args:
        runtime: Runtime name from --runtime (configured default when None)
    """
    from crtkit.runtime.factory import new_runtime_adapter

    try:
        return new_runtime_adapter(runtime)
    except CrtError as e:
        fail(e)


def fail(error: CrtError) -> NoReturn:
    """Print a crtkit error and exit with status 1."""
    console.print(f"[red]Error:[/red] {error.message}")
    raise typer.Exit(1)


def output_json(data: Any, output: Path | None = None) -> None:
    """Output data as JSON to console or file.

    Args:
        data: Data to output (dict, list, or Pydantic model)
        output: Optional output file path
    """
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json")
    elif isinstance(data, dict):
        data = {
            k: v.model_dump(mode="json") if isinstance(v, BaseModel) else v
            for k, v in data.items()
        }
    elif isinstance(data, list):
        data = [v.model_dump(mode="json") if isinstance(v, BaseModel) else v for v in data]

    json_str = json.dumps(data, indent=2, default=str)

    if output:
        output.write_text(json_str)
        console.print(f"Output written to {output}")
    else:
        console.print_json(json_str)


def format_created(created: int) -> str:
    """Format epoch seconds as an RFC 3339 UTC timestamp."""
    return datetime.fromtimestamp(created, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


OUTPUT_FORMATS = ("table", "json")


def resolve_format(format: str | None) -> str:
    """Get the output format, falling back to ``output.default_format``.

    Exits with status 1 on an unknown format.
    """
    from crtkit.utils.config import get_config

    format = format or get_config().output.default_format
    if format not in OUTPUT_FORMATS:
        choices = ", ".join(OUTPUT_FORMATS)
        fail(BadParamError(f"Unknown format '{format}' (expected one of: {choices})", param="format"))
    return format
