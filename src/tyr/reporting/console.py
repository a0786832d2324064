"""Rich terminal rendering of analysis results.

Risk Level Color Mapping:
    Critical = bold red, High = red, Medium = yellow, Low = green,
    Unknown = dim

All backend-supplied text goes through ``rich.text.Text`` so that square
brackets in threat titles or descriptions are never interpreted as Rich
markup.
"""

from __future__ import annotations

import io

from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from tyr.core.batch import BatchResult
from tyr.core.models import (
    AnalysisResult,
    Effectiveness,
    Effort,
    Mitigation,
    RiskLevel,
    StrideCategory,
    Threat,
    format_score,
)

_RISK_STYLES: dict[RiskLevel, str] = {
    RiskLevel.CRITICAL: "bold red",
    RiskLevel.HIGH: "red",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.LOW: "green",
    RiskLevel.UNKNOWN: "dim",
}

DEFAULT_WIDTH = 100


def risk_style(level: RiskLevel) -> str:
    """Return the Rich style string for a given risk level."""
    return _RISK_STYLES.get(level, "white")


def _score_style(score: float | None) -> str:
    if score is None:
        return "dim"
    if score >= 75:
        return "bold red"
    if score >= 50:
        return "red"
    if score >= 25:
        return "yellow"
    return "green"


class ConsoleReporter:
    """Human-readable terminal report.

    Args:
        risk_threshold: Hide threats below this level. Threats with an
            ``UNKNOWN`` level are never hidden. The summary always counts
            every threat.
        width: Line width used when rendering to a string.
    """

    def __init__(
        self,
        risk_threshold: RiskLevel | None = None,
        width: int = DEFAULT_WIDTH,
    ) -> None:
        self.risk_threshold = risk_threshold
        self.width = width

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render(self, result: AnalysisResult) -> str:
        """Render a result as plain text (no ANSI styling)."""
        return self._capture(self.renderables(result))

    def render_batch(self, batch: BatchResult) -> str:
        return self._capture(self.batch_renderables(batch))

    def print(self, result: AnalysisResult, console: Console | None = None) -> None:
        """Print a result with colors to ``console`` (stdout by default)."""
        target = console or Console()
        for item in self.renderables(result):
            target.print(item)

    def print_batch(self, batch: BatchResult, console: Console | None = None) -> None:
        target = console or Console()
        for item in self.batch_renderables(batch):
            target.print(item)

    def visible_threats(self, result: AnalysisResult) -> list[Threat]:
        """Threats that pass the risk threshold, in their original order."""
        if self.risk_threshold is None:
            return list(result.threats)
        return [
            t for t in result.threats
            if t.risk_level is RiskLevel.UNKNOWN or t.risk_level >= self.risk_threshold
        ]

    # ------------------------------------------------------------------
    # Single result
    # ------------------------------------------------------------------

    def renderables(self, result: AnalysisResult) -> list[RenderableType]:
        items: list[RenderableType] = [self._header(result), self._summary(result)]

        visible = self.visible_threats(result)
        if len(visible) < result.threat_count:
            items.append(Text(
                f"Showing {len(visible)} of {result.threat_count} threats "
                f"at or above {self.risk_threshold.label}",  # type: ignore[union-attr]
                style="dim",
            ))
        if not result.threats:
            items.append(Text("No threats identified.", style="green"))
        for threat in visible:
            items.extend(self._threat(threat))

        if result.recommendations:
            items.append(Rule("Recommendations", style="bold"))
            for number, rec in enumerate(result.recommendations, 1):
                items.append(Text.assemble((f"{number}. ", "bold"), rec))
        return items

    def _header(self, result: AnalysisResult) -> Panel:
        subtitle = (
            f"Input: {result.input_type.description}" if result.input_type else None
        )
        return Panel(
            Text("Tyr Threat Model Report", style="bold", justify="center"),
            subtitle=subtitle,
        )

    def _summary(self, result: AnalysisResult) -> Group:
        totals = Text.assemble(
            ("Total Threats: ", "bold"), str(result.threat_count), "\n",
            ("Overall Risk Score: ", "bold"),
            (f"{format_score(result.overall_risk_score)}/100",
             _score_style(result.overall_risk_score)),
        )

        by_level = Table(title="By Risk Level", show_header=True, header_style="bold")
        by_level.add_column("Risk Level")
        by_level.add_column("Count", justify="right")
        level_counts = result.counts_by_risk_level()
        for level in RiskLevel.known() + (RiskLevel.UNKNOWN,):
            if level is RiskLevel.UNKNOWN and not level_counts[level]:
                continue
            by_level.add_row(Text(level.label, style=risk_style(level)),
                             str(level_counts[level]))

        by_category = Table(title="By STRIDE Category", show_header=True,
                            header_style="bold")
        by_category.add_column("Category")
        by_category.add_column("Count", justify="right")
        category_counts = result.counts_by_category()
        for category in StrideCategory:
            if category is StrideCategory.UNKNOWN and not category_counts[category]:
                continue
            by_category.add_row(category.title, str(category_counts[category]))

        return Group(totals, by_level, by_category)

    def _threat(self, threat: Threat) -> list[RenderableType]:
        style = risk_style(threat.risk_level)
        items: list[RenderableType] = [
            Rule(Text(f"[{threat.id}] {threat.title}", style=style), align="left",
                 style=style),
            Text.assemble(
                ("Category: ", "bold"), threat.category.title,
                "  |  ",
                ("Risk: ", "bold"), (threat.risk_level.label, style),
            ),
        ]
        if threat.description:
            items.append(Text(threat.description))
        if threat.impact:
            items.append(Text.assemble(("Impact: ", "bold"), threat.impact))
        if threat.attack_path:
            items.append(Text("Attack Path:", style="bold"))
            for step, text in enumerate(threat.attack_path, 1):
                items.append(Text(f"  {step}. {text}"))
        if threat.affected_components:
            items.append(Text.assemble(
                ("Affected Components: ", "bold"),
                ", ".join(threat.affected_components),
            ))
        if threat.mitigations:
            items.append(Text("Mitigations:", style="bold"))
            items.extend(self._mitigation(m) for m in threat.mitigations)
        if threat.educational_note:
            items.append(Panel(Text(threat.educational_note), title="Why this matters",
                               border_style="blue"))
        return items

    @staticmethod
    def _mitigation(mitigation: Mitigation) -> Text:
        line = Text.assemble("  - ", (mitigation.title, "bold"))
        ratings = []
        if mitigation.effort is not Effort.UNKNOWN:
            ratings.append(f"Effort: {mitigation.effort.value}")
        if mitigation.effectiveness is not Effectiveness.UNKNOWN:
            ratings.append(f"Effectiveness: {mitigation.effectiveness.value}")
        if ratings:
            line.append(f" ({', '.join(ratings)})", style="dim")
        if mitigation.description:
            line.append(f"\n    {mitigation.description}")
        return line

    # ------------------------------------------------------------------
    # Batch
    # ------------------------------------------------------------------

    def batch_renderables(self, batch: BatchResult) -> list[RenderableType]:
        items: list[RenderableType] = [
            Panel(Text(f"Tyr Batch Scan: {batch.directory}", style="bold",
                       justify="center")),
        ]
        if batch.results:
            table = Table(title="Analyzed Files", show_header=True, header_style="bold")
            table.add_column("File", style="bold")
            table.add_column("Type", style="dim")
            table.add_column("Threats", justify="right")
            table.add_column("Max Risk", justify="center")
            table.add_column("Score", justify="right")
            for item in batch.results:
                result = item.result
                top = result.max_risk_level
                table.add_row(
                    Text(item.path),
                    result.input_type.value if result.input_type else "-",
                    str(result.threat_count),
                    Text(top.label, style=risk_style(top)) if top is not None
                    else Text("-", style="dim"),
                    format_score(result.overall_risk_score),
                )
            items.append(table)

        if batch.errors:
            errors = Table(title="Failed Files", show_header=True, header_style="bold red")
            errors.add_column("File", style="bold")
            errors.add_column("Error")
            errors.add_column("Message")
            for err in batch.errors:
                errors.add_row(Text(err.path), err.error_type, Text(err.message))
            items.append(errors)

        style = "green" if not batch.failed else "yellow"
        items.append(Text.assemble(
            (batch.summary_line(), style),
            f" | {batch.total_threats} total threats",
        ))
        return items

    # ------------------------------------------------------------------

    def _capture(self, items: list[RenderableType]) -> str:
        buffer = io.StringIO()
        console = Console(file=buffer, width=self.width, no_color=True,
                          force_terminal=False, highlight=False)
        for item in items:
            console.print(item)
        return buffer.getvalue()
