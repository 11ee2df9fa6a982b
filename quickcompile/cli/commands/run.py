"""run command: compile a file, instantiate a type and call one method."""

import json
from pathlib import Path
from typing import Any

import typer

from ...core.errors import QuickCompileError
from ...runtime import MethodSignature, create_instance
from ..app import app
from .check import compile_file, print_diagnostics


RETURN_TYPES: dict[str, Any] = {
    "none": None,
    "any": Any,
    "int": int,
    "float": float,
    "str": str,
    "bool": bool,
    "list": list,
    "dict": dict,
}


def parse_argument(raw: str) -> Any:
    """Decode a CLI argument as JSON, keeping it as a string otherwise."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


@app.command()
def run(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Python source file"),
    type_name: str = typer.Argument(..., help="Qualified name of the type to instantiate"),
    method: str = typer.Argument(..., help="Method to call"),
    args: list[str] = typer.Argument(None, help="Arguments, decoded as JSON when possible"),
    returns: str = typer.Option("none", "--returns", help=f"One of: {', '.join(RETURN_TYPES)}"),
    namespace: list[str] = typer.Option(None, "--namespace", "-n", help="Extra namespace"),
    reference: list[str] = typer.Option(None, "--reference", "-r", help="Extra reference"),
) -> None:
    """Compile FILE, create TYPE_NAME and call METHOD with ARGS."""
    if returns not in RETURN_TYPES:
        typer.echo(f"Unknown return type: '{returns}'", err=True)
        raise typer.Exit(code=1)

    result = compile_file(file, namespace, reference)
    if not result.success:
        print_diagnostics(result, file)
        raise typer.Exit(code=1)

    values = [parse_argument(a) for a in args or []]
    signature = MethodSignature(tuple(type(v) for v in values), RETURN_TYPES[returns])

    try:
        instance = create_instance(result.unwrap(), type_name)
        call = instance.bind(method, signature)
    except QuickCompileError as e:
        typer.echo(f"ERROR: {e}", err=True)
        raise typer.Exit(code=1)

    value = call(*values)
    if signature.has_result:
        typer.echo(json.dumps(value) if not isinstance(value, str) else value)
