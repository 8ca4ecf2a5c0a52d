"""
kwdecl CLI package.

- rewrite.py: expand, check and decls commands
- utils.py: shared helpers (version, logging, diagnostics output)
"""

import sys

import typer

from kwdecl.cli.rewrite import check_command, decls_command, expand_command
from kwdecl.cli.utils import configure_logging, version_callback

app = typer.Typer(
    help="""kwdecl – keyword arguments for positional-only calls

Declare a parameter list with `declare NAME(a, b = 1)`, then call NAME with
any mix of positional and `name = value` arguments.
""",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version information",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """kwdecl CLI main callback for global options."""
    configure_logging(verbose)


app.command(name="expand")(expand_command)
app.command(name="check")(check_command)
app.command(name="decls")(decls_command)


def main(argv: list[str] | None = None) -> None:
    app(args=argv, standalone_mode=True)


__all__ = ["app", "main"]


if __name__ == "__main__":
    main(sys.argv[1:])
