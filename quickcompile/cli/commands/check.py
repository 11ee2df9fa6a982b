"""check command: compile a file and report diagnostics."""

from pathlib import Path

import typer

from ...compiler import CompilationResult, compile_source
from ...config import load_config
from ..app import app


def compile_file(
    path: Path,
    namespaces: list[str] | None,
    references: list[str] | None,
) -> CompilationResult:
    """Compile a source file with the configured options."""
    settings = load_config().compiler
    source = path.read_text(encoding="utf-8")
    return compile_source(
        source,
        namespaces=[*(namespaces or []), *settings.namespaces],
        references=[*(references or []), *settings.references],
        options=settings.to_options(),
        module_name=path.stem if path.stem.isidentifier() else None,
        # Reported by the command itself
        on_diagnostic=lambda d: None,
    )


def print_diagnostics(result: CompilationResult, path: Path) -> None:
    for diagnostic in result.diagnostics:
        typer.echo(f"{path}: {diagnostic}", err=diagnostic.is_blocking)


@app.command()
def check(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Python source file"),
    namespace: list[str] = typer.Option(None, "--namespace", "-n", help="Extra namespace"),
    reference: list[str] = typer.Option(None, "--reference", "-r", help="Extra reference"),
) -> None:
    """Compile FILE in memory and report diagnostics."""
    result = compile_file(file, namespace, reference)
    if not result.success:
        print_diagnostics(result, file)
        typer.echo(f"FAILED: {len(result.blocking_diagnostics)} error(s)", err=True)
        raise typer.Exit(code=1)

    module = result.unwrap()
    names = ", ".join(t.__qualname__ for t in module.types()) or "no types"
    typer.echo(f"OK. module={module.name} types: {names}")
