"""Tests for the threat data model: enums, detection and derived summaries."""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest

from tyr.core.models import (
    AnalysisResult,
    Effectiveness,
    Effort,
    InputType,
    RiskLevel,
    StrideCategory,
    Threat,
    format_score,
)


def _threat(tid: str, level: RiskLevel, category: StrideCategory = StrideCategory.TAMPERING) -> Threat:
    return Threat(id=tid, title=tid, category=category, risk_level=level, description="")


class TestRiskLevel:

    def test_ordering(self) -> None:
        assert RiskLevel.UNKNOWN < RiskLevel.LOW < RiskLevel.MEDIUM
        assert RiskLevel.MEDIUM < RiskLevel.HIGH < RiskLevel.CRITICAL

    @pytest.mark.parametrize("raw, expected", [
        ("Critical", RiskLevel.CRITICAL),
        ("HIGH", RiskLevel.HIGH),
        (" medium ", RiskLevel.MEDIUM),
        ("Moderate", RiskLevel.MEDIUM),
        ("low", RiskLevel.LOW),
    ])
    def test_from_label(self, raw: str, expected: RiskLevel) -> None:
        assert RiskLevel.from_label(raw) is expected

    @pytest.mark.parametrize("raw", ["Severe", "", None, 3, ["High"]])
    def test_unrecognized_is_unknown(self, raw: object) -> None:
        assert RiskLevel.from_label(raw) is RiskLevel.UNKNOWN

    def test_label(self) -> None:
        assert RiskLevel.CRITICAL.label == "Critical"
        assert RiskLevel.UNKNOWN.label == "Unknown"

    def test_known_excludes_unknown(self) -> None:
        assert RiskLevel.UNKNOWN not in RiskLevel.known()
        assert RiskLevel.known()[0] is RiskLevel.CRITICAL


class TestStrideCategory:

    @pytest.mark.parametrize("raw, expected", [
        ("Spoofing", StrideCategory.SPOOFING),
        ("InformationDisclosure", StrideCategory.INFORMATION_DISCLOSURE),
        ("Information Disclosure", StrideCategory.INFORMATION_DISCLOSURE),
        ("information_disclosure", StrideCategory.INFORMATION_DISCLOSURE),
        ("Info Disclosure", StrideCategory.INFORMATION_DISCLOSURE),
        ("denial-of-service", StrideCategory.DENIAL_OF_SERVICE),
        ("DoS", StrideCategory.DENIAL_OF_SERVICE),
        ("EoP", StrideCategory.ELEVATION_OF_PRIVILEGE),
        ("Privilege Escalation", StrideCategory.ELEVATION_OF_PRIVILEGE),
        ("tampering", StrideCategory.TAMPERING),
    ])
    def test_from_label(self, raw: str, expected: StrideCategory) -> None:
        assert StrideCategory.from_label(raw) is expected

    def test_unrecognized_is_unknown(self) -> None:
        assert StrideCategory.from_label("Phishing") is StrideCategory.UNKNOWN
        assert StrideCategory.from_label(None) is StrideCategory.UNKNOWN

    def test_known_is_six_classes(self) -> None:
        known = StrideCategory.known()
        assert len(known) == 6
        assert StrideCategory.UNKNOWN not in known

    def test_titles_and_descriptions(self) -> None:
        assert StrideCategory.DENIAL_OF_SERVICE.title == "Denial of Service"
        for category in StrideCategory:
            assert category.description


class TestMitigationRatings:

    def test_effort(self) -> None:
        assert Effort.from_label("low") is Effort.LOW
        assert Effort.from_label("trivial") is Effort.UNKNOWN

    def test_effectiveness(self) -> None:
        assert Effectiveness.from_label("COMPLETE") is Effectiveness.COMPLETE
        assert Effectiveness.from_label(None) is Effectiveness.UNKNOWN


class TestInputType:

    @pytest.mark.parametrize("raw, expected", [
        ("architecture", InputType.ARCHITECTURE),
        ("arch", InputType.ARCHITECTURE),
        ("TF", InputType.TERRAFORM),
        ("k8s", InputType.KUBERNETES),
        ("kube", InputType.KUBERNETES),
        ("api-spec", InputType.API_SPEC),
        ("openapi", InputType.API_SPEC),
    ])
    def test_parse(self, raw: str, expected: InputType) -> None:
        assert InputType.parse(raw) is expected

    def test_parse_unknown(self) -> None:
        with pytest.raises(ValueError, match="Unknown input type"):
            InputType.parse("cobol")

    def test_detect_terraform(self) -> None:
        assert InputType.detect(Path("main.tf"), "") is InputType.TERRAFORM

    def test_detect_kubernetes_yaml(self) -> None:
        manifest = "apiVersion: v1\nkind: Pod\nmetadata:\n  name: web\n"
        assert InputType.detect(Path("pod.yaml"), manifest) is InputType.KUBERNETES

    def test_detect_multi_document_yaml(self) -> None:
        content = "---\nfoo: bar\n---\napiVersion: apps/v1\nkind: Deployment\n"
        assert InputType.detect(Path("all.yml"), content) is InputType.KUBERNETES

    def test_detect_openapi(self) -> None:
        assert InputType.detect(Path("api.yaml"), "openapi: 3.0.0\n") is InputType.API_SPEC
        assert InputType.detect(Path("api.json"), '{"swagger": "2.0"}') is InputType.API_SPEC

    def test_detect_plain_yaml_is_architecture(self) -> None:
        assert InputType.detect(Path("arch.yaml"), "services: [web]\n") is InputType.ARCHITECTURE

    def test_detect_invalid_yaml_falls_back(self) -> None:
        assert InputType.detect(Path("x.yaml"), "a: [unclosed") is InputType.ARCHITECTURE

    def test_detect_markdown(self) -> None:
        assert InputType.detect(Path("design.md"), "# Design") is InputType.ARCHITECTURE

    def test_description(self) -> None:
        assert InputType.TERRAFORM.description == "Terraform configuration"


class TestAnalysisResult:

    def test_frozen(self) -> None:
        result = AnalysisResult()
        with pytest.raises(FrozenInstanceError):
            result.overall_risk_score = 5  # type: ignore[misc]

    def test_empty(self) -> None:
        result = AnalysisResult()
        assert result.threat_count == 0
        assert result.max_risk_level is None

    def test_counts(self) -> None:
        result = AnalysisResult(threats=(
            _threat("a", RiskLevel.HIGH, StrideCategory.SPOOFING),
            _threat("b", RiskLevel.HIGH),
            _threat("c", RiskLevel.UNKNOWN),
        ))
        levels = result.counts_by_risk_level()
        assert levels[RiskLevel.HIGH] == 2
        assert levels[RiskLevel.UNKNOWN] == 1
        assert levels[RiskLevel.CRITICAL] == 0
        categories = result.counts_by_category()
        assert categories[StrideCategory.TAMPERING] == 2
        assert sum(categories.values()) == 3
        assert result.max_risk_level is RiskLevel.HIGH


class TestFormatScore:

    @pytest.mark.parametrize("score, expected", [
        (None, "n/a"),
        (48, "48"),
        (48.0, "48"),
        (47.3, "47.3"),
        (12.04, "12.0"),
        (0, "0"),
    ])
    def test_format(self, score: float | None, expected: str) -> None:
        assert format_score(score) == expected
