"""flagwatch command-line interface."""

from flagwatch.cli.app import app

__all__ = ["app"]
