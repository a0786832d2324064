"""Tests for the Rich terminal report."""

from __future__ import annotations

import io

from rich.console import Console

from tyr.core.batch import BatchResult, FileAnalysis, FileError
from tyr.core.models import AnalysisResult, RiskLevel, StrideCategory, Threat
from tyr.core.parser import parse
from tyr.core.scoring import score
from tyr.reporting.console import ConsoleReporter, risk_style


def _threat(tid: str, level: RiskLevel, title: str = "t") -> Threat:
    return Threat(id=tid, title=title, category=StrideCategory.TAMPERING,
                  risk_level=level, description="desc")


class TestRender:

    def test_summary_lines(self, sample_response_text: str) -> None:
        text = ConsoleReporter().render(parse(sample_response_text))
        assert "Total Threats: 3" in text
        assert "Overall Risk Score: 62/100" in text
        assert "Stolen session tokens" in text
        assert "Enforce TLS" in text
        assert "Adopt TLS everywhere" in text

    def test_no_ansi_codes(self, sample_response_text: str) -> None:
        assert "\x1b[" not in ConsoleReporter().render(parse(sample_response_text))

    def test_empty_result(self) -> None:
        text = ConsoleReporter().render(score(AnalysisResult()))
        assert "Total Threats: 0" in text
        assert "Overall Risk Score: 0/100" in text
        assert "No threats identified." in text

    def test_brackets_not_treated_as_markup(self) -> None:
        result = AnalysisResult(
            threats=(_threat("T001", RiskLevel.LOW, title="[bold]inject[/bold] me"),),
            overall_risk_score=3,
        )
        assert "[bold]inject[/bold] me" in ConsoleReporter().render(result)


class TestRiskThreshold:

    def _result(self) -> AnalysisResult:
        return AnalysisResult(
            threats=(
                _threat("T001", RiskLevel.CRITICAL, "crit"),
                _threat("T002", RiskLevel.LOW, "lowly"),
                _threat("T003", RiskLevel.UNKNOWN, "mystery"),
            ),
            overall_risk_score=28,
        )

    def test_filters_below_threshold(self) -> None:
        reporter = ConsoleReporter(risk_threshold=RiskLevel.HIGH)
        titles = [t.title for t in reporter.visible_threats(self._result())]
        assert titles == ["crit", "mystery"]

    def test_summary_counts_everything(self) -> None:
        text = ConsoleReporter(risk_threshold=RiskLevel.HIGH).render(self._result())
        assert "Total Threats: 3" in text
        assert "Showing 2 of 3 threats at or above High" in text
        assert "lowly" not in text

    def test_no_threshold_shows_all(self) -> None:
        assert len(ConsoleReporter().visible_threats(self._result())) == 3


class TestBatch:

    def test_summary(self) -> None:
        result = AnalysisResult(threats=(_threat("T001", RiskLevel.HIGH),),
                                overall_risk_score=15)
        batch = BatchResult(
            directory="infra",
            results=(FileAnalysis(path="main.tf", result=result),),
            errors=(FileError(path="bad.tf", error_type="ProviderTimeout",
                              message="slow"),),
        )
        text = ConsoleReporter(width=140).render_batch(batch)
        assert "main.tf" in text
        assert "bad.tf" in text
        assert "ProviderTimeout" in text
        assert "1 of 2 files succeeded" in text


class TestPrint:

    def test_prints_to_console(self, sample_response_text: str) -> None:
        buffer = io.StringIO()
        console = Console(file=buffer, width=100, no_color=True)
        ConsoleReporter().print(parse(sample_response_text), console)
        assert "Total Threats: 3" in buffer.getvalue()

    def test_risk_styles(self) -> None:
        assert risk_style(RiskLevel.CRITICAL) == "bold red"
        assert risk_style(RiskLevel.LOW) == "green"
