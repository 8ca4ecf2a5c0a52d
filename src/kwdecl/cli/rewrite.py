"""
Rewrite commands for the kwdecl CLI.

- expand: rewrite files and print or write the result
- check: rewrite without output and report diagnostics
- decls: list the declarations found in files
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from kwdecl.core.config import resolve_config
from kwdecl.core.errors import KwdeclError
from kwdecl.core.session import RewriteResult, RewriteSession

from .utils import collect_files, print_human_diagnostics, print_vscode_diagnostics

console = Console()

FilesArgument = Annotated[list[Path], typer.Argument(help="Source files or directories")]
ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Path to kwdecl.toml (default: nearest one)"),
]


def _run(
    files: list[Path], config_path: Path | None
) -> tuple[list[RewriteResult], dict[Path, str]]:
    """Rewrite every file in one session so declarations carry across files."""
    try:
        config = resolve_config(config_path, files[0] if files else None)
    except KwdeclError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)

    session = RewriteSession(config)
    results: list[RewriteResult] = []
    sources: dict[Path, str] = {}

    for path in collect_files(files, config):
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            typer.echo(f"Error: cannot read {path}: {e}", err=True)
            raise typer.Exit(code=2)
        sources[path] = text
        results.append(session.rewrite(text, path))

    return results, sources


def expand_command(
    files: FilesArgument,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the result here (single input file only)"),
    ] = None,
    config: ConfigOption = None,
) -> None:
    """Rewrite keyword-argument calls into positional calls."""
    results, sources = _run(files, config)

    if output is not None and len(results) != 1:
        typer.echo("Error: --output needs exactly one input file", err=True)
        raise typer.Exit(code=2)

    diagnostics = [d for result in results for d in result.diagnostics]

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(results[0].text, encoding="utf-8")
    else:
        for result in results:
            typer.echo(result.text, nl=False)

    if diagnostics:
        print_human_diagnostics(diagnostics, sources)
        raise typer.Exit(code=1)


def check_command(
    files: FilesArgument,
    format: Annotated[
        str, typer.Option("--format", "-f", help="Output format: 'human' or 'vscode'")
    ] = "human",
    config: ConfigOption = None,
) -> None:
    """Report declaration and call-site errors without writing output."""
    results, sources = _run(files, config)
    diagnostics = [d for result in results for d in result.diagnostics]

    if format == "vscode":
        print_vscode_diagnostics(diagnostics)
    else:
        print_human_diagnostics(diagnostics, sources)

    if diagnostics:
        raise typer.Exit(code=1)
    typer.echo(f"OK: {len(results)} file(s) checked.")


def decls_command(
    files: FilesArgument,
    config: ConfigOption = None,
) -> None:
    """List the declarations found in the given files."""
    results, _ = _run(files, config)
    declarations = [(r.file, d) for r in results for d in r.declarations]

    if not declarations:
        console.print("[dim]No declarations found.[/dim]")
        return

    table = Table(title="Declarations")
    table.add_column("Name")
    table.add_column("Parameters")
    table.add_column("Location", style="dim")

    for _, declaration in declarations:
        table.add_row(
            declaration.name,
            ", ".join(str(p) for p in declaration.parameters),
            str(declaration.span) if declaration.span else "",
        )

    console.print(table)
