"""Report renderers for analysis and batch results.

Submodules:
    console      -- Rich terminal report (``ConsoleReporter``).
    json_report  -- Canonical JSON serialization.
    html_report  -- Self-contained HTML page (``HtmlReporter``).
    template / styles / scripts -- HTML page parts.

Renderers never mutate or re-validate a result: the threat count and the
score shown by every format come straight from the ``AnalysisResult``.
"""

from __future__ import annotations

from enum import Enum

from tyr.core.batch import BatchResult
from tyr.core.models import AnalysisResult, RiskLevel
from tyr.reporting.console import ConsoleReporter
from tyr.reporting.html_report import HtmlReporter
from tyr.reporting.json_report import (
    batch_to_dict,
    render_batch_json,
    render_json,
    result_to_dict,
)


class ReportFormat(Enum):
    """Output formats understood by ``render``."""

    CONSOLE = "console"
    JSON = "json"
    HTML = "html"

    @classmethod
    def parse(cls, value: ReportFormat | str) -> ReportFormat:
        """Accept a member or its (case-insensitive) name.

        Raises:
            ValueError: If the format is unknown.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(f.value for f in cls)
            raise ValueError(f"Unknown report format: {value!r} (expected one of {choices})")


def render(
    result: AnalysisResult,
    fmt: ReportFormat | str,
    risk_threshold: RiskLevel | None = None,
) -> str:
    """Render one result in the requested format.

    Args:
        result: The scored analysis result.
        fmt: Output format.
        risk_threshold: Console only; hide threats below this level.
    """
    fmt = ReportFormat.parse(fmt)
    if fmt is ReportFormat.JSON:
        return render_json(result)
    if fmt is ReportFormat.HTML:
        return HtmlReporter().render(result)
    return ConsoleReporter(risk_threshold=risk_threshold).render(result)


def render_batch(batch: BatchResult, fmt: ReportFormat | str) -> str:
    """Render a batch scan: summary table, JSON document or HTML page."""
    fmt = ReportFormat.parse(fmt)
    if fmt is ReportFormat.JSON:
        return render_batch_json(batch)
    if fmt is ReportFormat.HTML:
        return HtmlReporter().render_batch(batch)
    return ConsoleReporter().render_batch(batch)


__all__ = [
    "ConsoleReporter",
    "HtmlReporter",
    "ReportFormat",
    "batch_to_dict",
    "render",
    "render_batch",
    "render_batch_json",
    "render_json",
    "result_to_dict",
]
