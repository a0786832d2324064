"""Tests for ThreatAnalyzer: provider, parser and scorer in sequence."""

from __future__ import annotations

import asyncio
import json

import pytest

from tyr.core.analyzer import ThreatAnalyzer
from tyr.core.models import InputType, RiskLevel
from tyr.core.scoring import RiskWeights
from tyr.exceptions import (
    InvalidInputError,
    MalformedResponseError,
    ProviderUnavailable,
)


class TestAnalyze:

    def test_returns_scored_result(self, make_provider, sample_response_text) -> None:
        provider = make_provider(analysis=sample_response_text)
        result = asyncio.run(
            ThreatAnalyzer(provider).analyze("doc", InputType.ARCHITECTURE)
        )
        assert result.threat_count == 3
        assert result.overall_risk_score == 62
        assert result.input_type is InputType.ARCHITECTURE
        assert provider.analysis_calls == [("doc", InputType.ARCHITECTURE, True)]

    def test_education_flag_forwarded(self, make_provider) -> None:
        provider = make_provider(analysis='{"threats": []}')
        asyncio.run(ThreatAnalyzer(provider).analyze("doc", InputType.TERRAFORM, False))
        assert provider.analysis_calls[0][2] is False

    def test_computes_missing_score(self, make_provider) -> None:
        reply = json.dumps({"threats": [
            {"id": "T1", "title": "a", "category": "Spoofing", "risk_level": "Critical",
             "description": ""},
            {"id": "T2", "title": "b", "category": "Tampering", "risk_level": "Low",
             "description": ""},
        ]})
        result = asyncio.run(
            ThreatAnalyzer(make_provider(analysis=reply)).analyze("doc", InputType.KUBERNETES)
        )
        assert result.overall_risk_score == 28

    def test_custom_weights(self, make_provider) -> None:
        reply = json.dumps({"threats": [
            {"id": "T1", "title": "a", "category": "Spoofing", "risk_level": "High",
             "description": ""},
        ]})
        analyzer = ThreatAnalyzer(make_provider(analysis=reply), RiskWeights(high=50))
        result = asyncio.run(analyzer.analyze("doc", InputType.ARCHITECTURE))
        assert result.overall_risk_score == 50
        assert result.threats[0].risk_level is RiskLevel.HIGH

    @pytest.mark.parametrize("content", ["", "   \n\t"])
    def test_empty_input_rejected_without_call(self, make_provider, content) -> None:
        provider = make_provider(analysis='{"threats": []}')
        with pytest.raises(InvalidInputError):
            asyncio.run(ThreatAnalyzer(provider).analyze(content, InputType.ARCHITECTURE))
        assert provider.analysis_calls == []

    def test_provider_error_propagates(self, make_provider) -> None:
        provider = make_provider(analysis=ProviderUnavailable("down", provider="Fake"))
        with pytest.raises(ProviderUnavailable):
            asyncio.run(ThreatAnalyzer(provider).analyze("doc", InputType.ARCHITECTURE))

    def test_malformed_reply_propagates(self, make_provider) -> None:
        provider = make_provider(analysis="I am unable to help with that.")
        with pytest.raises(MalformedResponseError):
            asyncio.run(ThreatAnalyzer(provider).analyze("doc", InputType.ARCHITECTURE))
