"""Command-line interface for modelprops."""

from .typer_app import app

__all__ = ["app"]
