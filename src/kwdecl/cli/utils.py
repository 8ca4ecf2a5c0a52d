"""
kwdecl CLI utilities.

Shared helpers used across CLI modules.
"""

import logging
import platform
from pathlib import Path

import typer

from kwdecl._version import get_version
from kwdecl.core.config import KwdeclConfig
from kwdecl.core.diagnostics import Diagnostic
from kwdecl.core.errors import ErrorContext, snippet_for


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        typer.echo(f"kwdecl version {get_version()}")
        typer.echo(f"  Python:   {platform.python_implementation()} {platform.python_version()}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def collect_files(paths: list[Path], config: KwdeclConfig) -> list[Path]:
    """Expand directories into the files matching the configured patterns."""
    files: list[Path] = []
    for path in paths:
        if path.is_dir():
            matched: set[Path] = set()
            for pattern in config.files.include:
                matched.update(p for p in path.rglob(pattern) if p.is_file())
            files.extend(sorted(matched))
        else:
            files.append(path)
    return files


def print_human_diagnostics(diagnostics: list[Diagnostic], sources: dict[Path, str]) -> None:
    """Print diagnostics with a source snippet under each location."""
    for diag in diagnostics:
        text = sources.get(diag.file) if diag.file else None
        context = ErrorContext(
            file=diag.file,
            line=diag.line,
            column=diag.column,
            snippet=snippet_for(text, diag.line) if text is not None else None,
        )
        typer.echo(f"ERROR: {diag.message}", err=True)
        typer.echo(f"  --> {context.format()}", err=True)


def print_vscode_diagnostics(diagnostics: list[Diagnostic]) -> None:
    """
    Print diagnostics in VS Code format: file:line:col: error: message
    """
    for diag in diagnostics:
        typer.echo(diag.format(), err=True)
