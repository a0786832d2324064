"""Every report format must show the same threat count and score."""

from __future__ import annotations

import json
import re

import pytest

from tyr.core.parser import parse
from tyr.core.scoring import score
from tyr.reporting import ReportFormat, render


@pytest.fixture
def unscored_result():
    reply = json.dumps({"threats": [
        {"id": "T1", "title": "a", "category": "Spoofing", "risk_level": "Critical",
         "description": ""},
        {"id": "T2", "title": "b", "category": "Tampering", "risk_level": "High",
         "description": ""},
        {"id": "T3", "title": "c", "category": "Repudiation", "risk_level": "Medium",
         "description": ""},
    ]})
    return score(parse(reply))


class TestConsistency:

    def test_all_formats_agree(self, unscored_result) -> None:
        data = json.loads(render(unscored_result, ReportFormat.JSON))
        assert len(data["threats"]) == 3
        assert data["overall_risk_score"] == 48

        console = render(unscored_result, ReportFormat.CONSOLE)
        assert "Total Threats: 3" in console
        assert "Overall Risk Score: 48/100" in console

        page = render(unscored_result, ReportFormat.HTML)
        assert "48/100" in page
        assert len(re.findall(r'data-risk="', page)) == 3

    def test_format_names(self) -> None:
        assert ReportFormat.parse("JSON") is ReportFormat.JSON
        assert ReportFormat.parse(ReportFormat.HTML) is ReportFormat.HTML
        with pytest.raises(ValueError, match="Unknown report format"):
            ReportFormat.parse("pdf")
