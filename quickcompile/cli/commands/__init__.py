"""CLI commands for quickcompile."""

from . import (
    check,
    run,
    config,
)

__all__ = [
    "check",
    "run",
    "config",
]
