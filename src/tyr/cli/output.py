"""Rich output helpers shared by the Tyr CLI commands.

Reports go to stdout (or a file with ``--output``); progress, status and
error messages go to stderr so that ``tyr analyze --format json`` can be
piped straight into another tool.
"""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console
from rich.text import Text

console = Console()
err_console = Console(stderr=True)


def print_error(message: str, hint: str | None = None) -> None:
    """Print an error (and an optional hint) to stderr."""
    err_console.print(Text.assemble(("Error: ", "bold red"), message))
    if hint:
        err_console.print(Text(hint, style="dim"))


def print_status(message: str) -> None:
    err_console.print(Text(message, style="dim"))


def emit(content: str, output: str | None) -> None:
    """Write rendered report text to ``output`` or echo it to stdout.

    Args:
        content: The rendered report.
        output: Destination path; parent directories are created.
    """
    if output is None:
        click.echo(content)
        return
    path = Path(output)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    print_status(f"Report written to: {path.resolve()}")
