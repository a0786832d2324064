"""``tyr analyze INPUT`` -- Threat model a single document.

Exit Codes:
    0 -- Analysis succeeded and the report was produced.
    1 -- Analysis failed (unreadable input, backend or parse error).
    2 -- Startup failed (provider configuration or credentials).
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click

from tyr.cli.output import console, emit, err_console, print_error
from tyr.cli.runtime import EXIT_FAILURE, EXIT_OK, EXIT_STARTUP, build_modeler
from tyr.core.models import InputType, RiskLevel
from tyr.exceptions import AnalysisError, AuthError
from tyr.reporting import ConsoleReporter, ReportFormat, render

_DEFAULT_HTML_OUTPUT = "tyr-report.html"

_THRESHOLD_MAP: dict[str, RiskLevel] = {
    "low": RiskLevel.LOW,
    "medium": RiskLevel.MEDIUM,
    "high": RiskLevel.HIGH,
    "critical": RiskLevel.CRITICAL,
}


def _parse_input_type(
    ctx: click.Context, param: click.Parameter, value: str | None
) -> InputType | None:
    if value is None:
        return None
    try:
        return InputType.parse(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc


@click.command("analyze")
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--type", "-t", "input_type",
    callback=_parse_input_type,
    default=None,
    help="Input type: architecture, terraform, kubernetes or api-spec "
         "(default: detected from the file).",
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
    "--risk-threshold",
    type=click.Choice(list(_THRESHOLD_MAP)),
    default=None,
    help="Console only: hide threats below this risk level.",
)
@click.option(
    "--explain/--no-explain",
    default=True,
    help="Ask for an educational note on every threat (default: on).",
)
@click.pass_context
def analyze_command(
    ctx: click.Context,
    input_file: str,
    input_type: InputType | None,
    output_format: str,
    output: str | None,
    risk_threshold: str | None,
    explain: bool,
) -> None:
    """Analyze INPUT_FILE for STRIDE threats.

    Exit code 0 on success, 1 if the analysis fails, 2 on configuration
    or credential errors.
    """
    path = Path(input_file)
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        print_error(f"Cannot read {path}: {exc}")
        sys.exit(EXIT_FAILURE)

    kind = input_type or InputType.detect(path, content)
    modeler = build_modeler(ctx)

    try:
        with err_console.status(
            f"Analyzing {kind.description} with {modeler.provider.name}..."
        ):
            result = asyncio.run(modeler.analyze(content, kind, explain))
    except AuthError as exc:
        print_error(str(exc))
        sys.exit(EXIT_STARTUP)
    except AnalysisError as exc:
        print_error(str(exc))
        sys.exit(EXIT_FAILURE)

    fmt = ReportFormat(output_format)
    threshold = _THRESHOLD_MAP[risk_threshold] if risk_threshold else None
    if fmt is ReportFormat.CONSOLE and output is None:
        ConsoleReporter(risk_threshold=threshold).print(result, console)
    elif fmt is ReportFormat.HTML:
        emit(render(result, fmt), output or _DEFAULT_HTML_OUTPUT)
    else:
        emit(render(result, fmt, risk_threshold=threshold), output)
    sys.exit(EXIT_OK)
