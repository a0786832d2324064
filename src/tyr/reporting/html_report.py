"""Self-contained HTML report generator.

``HtmlReporter`` renders the report body server-side, escaping every piece
of backend-supplied text with ``html.escape``, and embeds the canonical
JSON serialization in a ``<script type="application/json">`` block for
downstream tooling. CSS and JavaScript are inlined; the document loads no
external resources.

Usage::

    from tyr.reporting import HtmlReporter

    reporter = HtmlReporter()
    reporter.write("reports/threats.html", result)
"""

from __future__ import annotations

import html as html_mod
import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from tyr import __version__
from tyr.core.batch import BatchResult
from tyr.core.models import AnalysisResult, RiskLevel, StrideCategory, Threat, format_score
from tyr.reporting.json_report import batch_to_dict, result_to_dict
from tyr.reporting.scripts import REPORT_JS
from tyr.reporting.styles import REPORT_CSS
from tyr.reporting.template import REPORT_HTML

_PLACEHOLDER = re.compile(r"\{\{(TITLE|SUBTITLE|CSS|BODY|DATA|JS)\}\}")


def _e(value: object) -> str:
    """Escape text for element content and quoted attributes."""
    return html_mod.escape(str(value), quote=True)


def encode_script_json(data: Any) -> str:
    """Serialize ``data`` so it can sit inside a ``<script>`` element.

    ``<``, ``>`` and ``&`` are written as JSON unicode escapes, which keeps
    the payload byte-for-byte valid JSON while making ``</script>`` and
    comment sequences impossible.
    """
    text = json.dumps(data, ensure_ascii=False)
    return (
        text.replace("&", "\\u0026")
        .replace("<", "\\u003c")
        .replace(">", "\\u003e")
    )


class HtmlReporter:
    """Render analysis results as a single self-contained HTML page.

    The reporter is stateless except for a configurable title and is safe
    to reuse across multiple ``render()`` calls.

    Attributes:
        title: Report title shown in the header and ``<title>`` tag.
    """

    def __init__(self, title: str = "Tyr Threat Model Report") -> None:
        self.title = title

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render(self, result: AnalysisResult) -> str:
        """Generate the HTML document for one analysis result."""
        subtitle = "STRIDE threat model"
        if result.input_type is not None:
            subtitle += f" of a {result.input_type.description}"
        body = "\n".join([
            self._summary_cards(result),
            self._section("STRIDE Breakdown", self._category_table(result)),
            self._section("Threats", self._threat_list(result, "threats-main")),
            self._recommendations(result),
        ])
        return self._page(subtitle, body, result_to_dict(result))

    def render_batch(self, batch: BatchResult) -> str:
        """Generate one HTML document with a section per scanned file."""
        parts = [self._batch_summary(batch)]
        for index, item in enumerate(batch.results):
            result = item.result
            content = "\n".join([
                self._summary_cards(result),
                self._threat_list(result, f"threats-{index}"),
                self._recommendations(result),
            ])
            parts.append(self._section(item.path, content, css_class="file-section"))
        if batch.errors:
            rows = "".join(
                f"<tr><td>{_e(err.path)}</td><td>{_e(err.error_type)}</td>"
                f"<td>{_e(err.message)}</td></tr>"
                for err in batch.errors
            )
            parts.append(self._section(
                "Failed Files",
                '<table class="errors"><thead><tr><th>File</th><th>Error</th>'
                f"<th>Message</th></tr></thead><tbody>{rows}</tbody></table>",
            ))
        return self._page(
            f"Batch scan of {batch.directory}: {batch.summary_line()}",
            "\n".join(parts),
            batch_to_dict(batch),
        )

    def write(self, output_path: str | Path, result: AnalysisResult) -> Path:
        """Render and write the report, creating parent directories.

        Returns:
            The resolved ``Path`` of the written file.
        """
        return _write(output_path, self.render(result))

    def write_batch(self, output_path: str | Path, batch: BatchResult) -> Path:
        return _write(output_path, self.render_batch(batch))

    # ------------------------------------------------------------------
    # Page assembly
    # ------------------------------------------------------------------

    def _page(self, subtitle: str, body: str, payload: dict[str, Any]) -> str:
        generated = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
        values = {
            "TITLE": _e(self.title),
            "SUBTITLE": _e(f"{subtitle} | generated {generated} by Tyr {__version__}"),
            "CSS": REPORT_CSS,
            "BODY": body,
            "DATA": encode_script_json(payload),
            "JS": REPORT_JS,
        }
        # Single pass: substituted text is never rescanned for placeholders.
        return _PLACEHOLDER.sub(lambda m: values[m.group(1)], REPORT_HTML)

    @staticmethod
    def _section(heading: str, content: str, css_class: str = "") -> str:
        cls = f"section {css_class}".strip()
        return (
            f'<div class="{cls}">'
            f'<div class="section-header"><h2>{_e(heading)}</h2>'
            '<span class="toggle">&#9660;</span></div>'
            f'<div class="section-body">{content}</div></div>'
        )

    # ------------------------------------------------------------------
    # Fragments
    # ------------------------------------------------------------------

    @staticmethod
    def _card(value: object, label: str, css_class: str) -> str:
        return (
            f'<div class="stat-card {css_class}"><div class="value">{_e(value)}</div>'
            f'<div class="label">{_e(label)}</div></div>'
        )

    def _summary_cards(self, result: AnalysisResult) -> str:
        counts = result.counts_by_risk_level()
        cards = [
            self._card(result.threat_count, "Total Threats", "total"),
            self._card(f"{format_score(result.overall_risk_score)}/100",
                       "Overall Risk Score", "score"),
        ]
        for level in RiskLevel.known():
            cards.append(self._card(counts[level], level.label, f"risk-{level.label}"))
        if counts[RiskLevel.UNKNOWN]:
            cards.append(self._card(counts[RiskLevel.UNKNOWN], "Unknown", "risk-Unknown"))
        return f'<div class="stats-grid">{"".join(cards)}</div>'

    @staticmethod
    def _category_table(result: AnalysisResult) -> str:
        counts = result.counts_by_category()
        rows = "".join(
            f"<tr><td>{_e(category.title)}</td>"
            f"<td>{_e(category.description)}</td><td>{counts[category]}</td></tr>"
            for category in StrideCategory
            if category is not StrideCategory.UNKNOWN or counts[category]
        )
        return (
            "<table><thead><tr><th>Category</th><th>Meaning</th><th>Threats</th>"
            f"</tr></thead><tbody>{rows}</tbody></table>"
        )

    def _threat_list(self, result: AnalysisResult, scope_id: str) -> str:
        if not result.threats:
            return '<div class="empty-state">No threats identified.</div>'
        filters = (
            '<div class="filters"><label>Risk:</label>'
            f'<select class="risk-filter" data-scope="{_e(scope_id)}"></select>'
            '<span class="shown"></span></div>'
        )
        cards = "\n".join(self._threat(t) for t in result.threats)
        return f'{filters}<div id="{_e(scope_id)}">{cards}</div>'

    @staticmethod
    def _threat(threat: Threat) -> str:
        level = threat.risk_level.label
        parts = [
            f'<div class="threat risk-{level}" data-risk="{level}">',
            f"<h3>{_e(threat.id)}: {_e(threat.title)}</h3>",
            f'<div class="meta"><span class="badge badge-{level}">{level}</span> '
            f"{_e(threat.category.title)}</div>",
        ]
        if threat.description:
            parts.append(f"<p>{_e(threat.description)}</p>")
        if threat.impact:
            parts.append(f"<h4>Impact</h4><p>{_e(threat.impact)}</p>")
        if threat.attack_path:
            steps = "".join(f"<li>{_e(s)}</li>" for s in threat.attack_path)
            parts.append(f"<h4>Attack Path</h4><ol>{steps}</ol>")
        if threat.affected_components:
            parts.append(
                "<h4>Affected Components</h4><p>"
                + _e(", ".join(threat.affected_components)) + "</p>"
            )
        if threat.mitigations:
            items = "".join(
                f"<li><strong>{_e(m.title)}</strong> "
                f"(Effort: {_e(m.effort.value)}, "
                f"Effectiveness: {_e(m.effectiveness.value)})"
                + (f"<br>{_e(m.description)}" if m.description else "")
                + "</li>"
                for m in threat.mitigations
            )
            parts.append(f"<h4>Mitigations</h4><ul>{items}</ul>")
        if threat.educational_note:
            parts.append(f'<div class="note">{_e(threat.educational_note)}</div>')
        parts.append("</div>")
        return "".join(parts)

    def _recommendations(self, result: AnalysisResult) -> str:
        if not result.recommendations:
            return ""
        items = "".join(f"<li>{_e(r)}</li>" for r in result.recommendations)
        return self._section("Recommendations", f"<ol>{items}</ol>")

    def _batch_summary(self, batch: BatchResult) -> str:
        return '<div class="stats-grid">' + "".join([
            self._card(batch.total, "Files", "total"),
            self._card(batch.succeeded, "Succeeded", "risk-Low"),
            self._card(batch.failed, "Failed", "risk-Critical"),
            self._card(batch.total_threats, "Threats", "score"),
        ]) + "</div>"


def _write(output_path: str | Path, content: str) -> Path:
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path.resolve()
