"""Main CLI entry point for crtkit."""

from pathlib import Path
from typing import Optional

import typer

from crtkit.cli import images, pull
from crtkit.cli.utils import console, fail
from crtkit.utils.errors import CrtError

app = typer.Typer(
    name="crtkit",
    help="Inspect, pull and save container images across runtimes.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Register subcommands
app.command(name="images")(images.images_cmd)
app.command(name="inspect")(images.inspect_cmd)
app.command(name="history")(images.history_cmd)
app.command(name="pull")(pull.pull_cmd)
app.command(name="save")(pull.save_cmd)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output"),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Config file (default: first of ./.crtkit.yaml, ~/.crtkit.yaml, ~/.config/crtkit/config.yaml)",
    ),
) -> None:
    """
    crtkit: one interface to local container images.

    - [bold]images[/bold]: List local images
    - [bold]inspect[/bold]: Show full image details
    - [bold]history[/bold]: Show image layer history
    - [bold]pull[/bold]: Pull an image with resolved registry credentials
    - [bold]save[/bold]: Save an image archive
    """
    from crtkit.utils.config import get_config, load_config, set_config
    from crtkit.utils.logging import configure_logging

    try:
        if config_file is not None:
            set_config(load_config(config_file))
        config = get_config()
    except CrtError as e:
        fail(e)

    console.no_color = not config.output.color

    if verbose or config.output.verbose:
        configure_logging(level="DEBUG")
    elif quiet:
        configure_logging(level="WARNING")
    else:
        configure_logging(level="INFO")


@app.command()
def version() -> None:
    """Show the crtkit version."""
    from crtkit import __version__

    console.print(f"crtkit version {__version__}")


if __name__ == "__main__":
    app()
