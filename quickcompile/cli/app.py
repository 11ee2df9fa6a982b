"""Typer application for quickcompile."""

import logging

import typer

from .. import __version__


app = typer.Typer(
    name="quickcompile",
    help="Compile Python source into memory and call methods on its types.",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"quickcompile {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log pipeline steps."),
) -> None:
    from ..config import load_config

    level = "INFO" if verbose else load_config().logging.level
    logging.basicConfig(level=getattr(logging, level.upper(), logging.WARNING))


from .commands import check, run, config  # noqa: E402,F401
