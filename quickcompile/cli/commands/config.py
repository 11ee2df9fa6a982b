"""config command: show or change CLI settings."""

import typer

from ...config import get_config_path, load_config, save_config, set_config_value
from ..app import app


@app.command("config")
def config_command(
    action: str = typer.Argument(..., help="show | set"),
    key: str = typer.Argument(None, help="Dotted key, e.g. compiler.optimization"),
    value: str = typer.Argument(None, help="New value"),
) -> None:
    """Show or change settings."""
    if action == "show":
        config = load_config()
        typer.echo(f"Config file: {get_config_path()}")
        typer.echo("")
        typer.echo("Compiler")
        for name, current in config.compiler.model_dump(mode="json").items():
            typer.echo(f"  {name} = {current}")
        typer.echo("Logging")
        for name, current in config.logging.model_dump(mode="json").items():
            typer.echo(f"  {name} = {current}")
        return

    if action == "set":
        if key is None or value is None:
            typer.echo("Usage: quickcompile config set KEY VALUE", err=True)
            raise typer.Exit(code=1)
        try:
            updated = set_config_value(load_config(), key, value)
        except KeyError:
            typer.echo(f"Unknown key: {key}", err=True)
            raise typer.Exit(code=1)
        except ValueError as e:
            typer.echo(str(e), err=True)
            raise typer.Exit(code=1)
        path = save_config(updated)
        typer.echo(f"Set {key} = {value} ({path})")
        return

    typer.echo(f"Unknown action: {action}", err=True)
    raise typer.Exit(code=1)
