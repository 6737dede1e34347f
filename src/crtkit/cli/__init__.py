"""CLI for crtkit."""

from crtkit.cli.main import app

__all__ = ["app"]
