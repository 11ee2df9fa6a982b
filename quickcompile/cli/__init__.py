"""Command-line interface for quickcompile."""

from .app import app

__all__ = ["app"]
