"""Command line interface."""

from taskflow.cli.main import app

__all__ = ["app"]
