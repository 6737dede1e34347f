"""CLI commands that transfer images: pull and save."""

import sys
from typing import Optional

import typer

from crtkit.cli.utils import console, fail, load_adapter
from crtkit.runtime.base import AuthConfig, PullImageOptions
from crtkit.runtime.credentials import registry_for_image
from crtkit.utils.config import get_config
from crtkit.utils.errors import CrtError, MissingAuthConfigError
from crtkit.utils.images import split_repo_tag
from crtkit.utils.logging import get_logger

logger = get_logger(__name__)


def pull_cmd(
    image: str = typer.Argument(..., help="Image to pull (name[:tag] or name@digest)"),
    runtime: Optional[str] = typer.Option(None, "--runtime", "-r", help="Container runtime"),
    user: str = typer.Option("", "--user", "-u", help="Registry account"),
    password: str = typer.Option("", "--password", "-p", help="Registry password or token"),
    config_path: Optional[str] = typer.Option(
        None,
        "--config-path",
        help="Registry credential file (skips helpers and the default config)",
    ),
    registry: Optional[str] = typer.Option(
        None,
        "--registry",
        help="Registry key for credential lookup (derived from the image when omitted)",
    ),
    anonymous: bool = typer.Option(False, "--anonymous", help="Pull without credentials"),
    progress: bool = typer.Option(False, "--progress", help="Stream progress records to stdout"),
) -> None:
    """
    Pull an image, resolving registry credentials first.

    Credentials come from --user/--password, else --config-path, else
    the registry's credential helper, else the default engine config.
    When none is found the pull proceeds anonymously.

    Example:
        crtkit pull ghcr.io/org/app:1.2.0
    """
    adapter = load_adapter(runtime)
    repository, tag = split_repo_tag(image)

    auth: AuthConfig | None = None
    try:
        if not anonymous:
            if config_path is None:
                config_path = get_config().registry.docker_config_path or ""
            registry_key = registry or registry_for_image(repository)
            try:
                auth = adapter.get_registry_auth_config(user, password, config_path, registry_key)
            except MissingAuthConfigError as e:
                logger.info("%s; pulling anonymously", e.message)

        options = PullImageOptions(
            repository=repository,
            tag=tag,
            output_stream=sys.stdout if progress else None,
        )
        with console.status(f"Pulling {options.reference}..."):
            adapter.pull_image(options, auth)
    except CrtError as e:
        fail(e)

    console.print(f"[green]Pulled[/green] {options.reference}")


def save_cmd(
    image: str = typer.Argument(..., help="Image reference or ID"),
    path: str = typer.Argument(..., help="Archive path"),
    runtime: Optional[str] = typer.Option(None, "--runtime", "-r", help="Container runtime"),
    extract: bool = typer.Option(False, "--extract", "-x", help="Unpack the archive next to it"),
    remove_orig: bool = typer.Option(
        False,
        "--remove-orig",
        help="Delete the archive after a successful extraction",
    ),
) -> None:
    """
    Save a local image to a tar archive.

    Example:
        crtkit save nginx:latest ./out/nginx.tar --extract
    """
    adapter = load_adapter(runtime)
    try:
        with console.status(f"Saving {image}..."):
            adapter.save_image(image, path, extract=extract, remove_orig=remove_orig)
    except CrtError as e:
        fail(e)

    console.print(f"Image saved to {path}")
