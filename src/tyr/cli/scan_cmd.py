"""``tyr scan DIRECTORY`` -- Threat model every matching file in a tree.

Default patterns: ``*.tf``, ``*.yaml``, ``*.yml``, ``*.json``. Files that
fail are listed in the report; the remaining files are still analyzed.

Exit Codes:
    0 -- Every file was analyzed.
    1 -- One or more files failed.
    2 -- No files matched, or startup failed.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click

from tyr.cli.output import console, emit, err_console, print_error, print_status
from tyr.cli.runtime import EXIT_FAILURE, EXIT_OK, EXIT_STARTUP, build_modeler
from tyr.config import DEFAULT_BATCH_CONCURRENCY, MAX_BATCH_CONCURRENCY
from tyr.core.batch import BatchScanner, validate_pattern
from tyr.exceptions import InvalidInputError
from tyr.reporting import ConsoleReporter, ReportFormat, render_batch

_DEFAULT_HTML_OUTPUT = "tyr-scan-report.html"


def _check_pattern(ctx: click.Context, param: click.Parameter, value: str | None) -> str | None:
    if not value:
        return value
    try:
        return validate_pattern(value)
    except InvalidInputError as exc:
        raise click.BadParameter(str(exc)) from exc


@click.command("scan")
@click.argument("directory", type=click.Path(exists=True, file_okay=False))
@click.option(
    "--pattern", "-p",
    default=None,
    callback=_check_pattern,
    help="Glob for files to analyze, e.g. '*.tf' (default: tf, yaml, yml, json).",
)
@click.option(
    "--format", "-f", "output_format",
    type=click.Choice([f.value for f in ReportFormat]),
    default=ReportFormat.CONSOLE.value,
    help="Output format: console (default), json, or html.",
)
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False),
    default=None,
    help=f"Write the report to a file (html default: {_DEFAULT_HTML_OUTPUT}).",
)
@click.option(
    "--concurrency", "-c",
    type=click.IntRange(1, MAX_BATCH_CONCURRENCY),
    default=DEFAULT_BATCH_CONCURRENCY,
    show_default=True,
    help="Number of files analyzed at the same time.",
)
@click.option(
    "--retries",
    type=click.IntRange(0, 5),
    default=0,
    show_default=True,
    help="Retry a file this many times when the backend is unreachable or times out.",
)
@click.option(
    "--explain/--no-explain",
    default=False,
    help="Ask for educational notes (default: off for scans).",
)
@click.pass_context
def scan_command(
    ctx: click.Context,
    directory: str,
    pattern: str | None,
    output_format: str,
    output: str | None,
    concurrency: int,
    retries: int,
    explain: bool,
) -> None:
    """Analyze every matching file under DIRECTORY.

    Exit code 0 if all files succeed, 1 if any fail, 2 if none match.
    """
    files = BatchScanner.discover(Path(directory), pattern)
    if not files:
        print_error(f"No matching files found in {directory}.")
        sys.exit(EXIT_STARTUP)

    modeler = build_modeler(ctx, concurrency=concurrency, retries=retries)
    print_status(f"Scanning {len(files)} files with {modeler.provider.name}...")
    with err_console.status("Analyzing..."):
        batch = asyncio.run(modeler.scan(directory, pattern, include_education=explain))

    fmt = ReportFormat(output_format)
    if fmt is ReportFormat.CONSOLE and output is None:
        ConsoleReporter().print_batch(batch, console)
    elif fmt is ReportFormat.HTML:
        emit(render_batch(batch, fmt), output or _DEFAULT_HTML_OUTPUT)
    else:
        emit(render_batch(batch, fmt), output)
    sys.exit(EXIT_FAILURE if batch.failed else EXIT_OK)
