"""Tests for the response parser/validator.

Covers JSON recovery from wrapped text, the structural failure cases and
field-level normalization of drifting backend output.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import pytest

from tyr.core.models import (
    Effectiveness,
    Effort,
    InputType,
    RiskLevel,
    StrideCategory,
)
from tyr.core.parser import find_balanced_end, parse
from tyr.exceptions import MalformedResponseError, ParseError
from tyr.reporting.json_report import result_to_dict


def _one_threat(**fields: Any) -> str:
    threat = {
        "id": "T001",
        "title": "t",
        "category": "Spoofing",
        "risk_level": "High",
        "description": "d",
    }
    threat.update(fields)
    return json.dumps({"threats": [threat]})


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


class TestExtraction:

    def test_plain_json(self, sample_response_text: str) -> None:
        result = parse(sample_response_text)
        assert result.threat_count == 3

    def test_markdown_fence(self, sample_response_text: str) -> None:
        wrapped = f"```json\n{sample_response_text}\n```"
        assert parse(wrapped).threat_count == 3

    def test_prose_before_and_after(self, sample_response_text: str) -> None:
        wrapped = f"Here is my analysis:\n{sample_response_text}\nLet me know if you need more."
        assert parse(wrapped).threat_count == 3

    def test_braces_inside_strings(self) -> None:
        text = 'Result: {"threats": [{"id": "T1", "title": "uses } and { and \\" quote", ' \
               '"category": "Tampering", "risk_level": "Low", "description": "x"}]} done'
        result = parse(text)
        assert result.threats[0].title == 'uses } and { and " quote'

    def test_skips_unparseable_leading_block(self) -> None:
        text = 'Template {not json} then {"threats": []}'
        assert parse(text).threat_count == 0

    def test_empty_threats_is_valid(self) -> None:
        result = parse('{"threats": []}')
        assert result.threats == ()
        assert result.overall_risk_score is None

    def test_records_input_type(self) -> None:
        assert parse('{"threats": []}', InputType.TERRAFORM).input_type is InputType.TERRAFORM


class TestFindBalancedEnd:

    def test_nested(self) -> None:
        text = '{"a": {"b": [1, {"c": 2}]}} tail'
        end = find_balanced_end(text, 0)
        assert text[: end + 1] == '{"a": {"b": [1, {"c": 2}]}}'

    def test_unbalanced(self) -> None:
        assert find_balanced_end('{"a": [1, 2}', 0) is None
        assert find_balanced_end('{"a": 1', 0) is None

    def test_escaped_backslash_before_quote(self) -> None:
        text = '{"path": "C:\\\\"}'
        assert find_balanced_end(text, 0) == len(text) - 1


# ---------------------------------------------------------------------------
# Structural failures
# ---------------------------------------------------------------------------


class TestMalformed:

    @pytest.mark.parametrize("text", ["", "   ", "I could not analyze this."])
    def test_no_json(self, text: str) -> None:
        with pytest.raises(MalformedResponseError):
            parse(text)

    def test_missing_threats_array(self) -> None:
        with pytest.raises(MalformedResponseError, match="threats"):
            parse('{"overall_risk_score": 40, "recommendations": []}')

    def test_threats_not_a_list(self) -> None:
        with pytest.raises(MalformedResponseError):
            parse('{"threats": {"id": "T001"}}')

    def test_top_level_array(self) -> None:
        with pytest.raises(MalformedResponseError):
            parse('[{"id": "T001"}]')

    def test_truncated_json(self, sample_response_text: str) -> None:
        with pytest.raises(MalformedResponseError):
            parse(sample_response_text[:-40])

    def test_is_parse_error(self) -> None:
        assert issubclass(MalformedResponseError, ParseError)

    def test_excerpt_attached(self) -> None:
        with pytest.raises(MalformedResponseError) as info:
            parse("no json here at all")
        assert info.value.excerpt.startswith("no json")

    @pytest.mark.parametrize("text", [
        "[" * 100_000,
        "{\"threats\": " + "[" * 100_000,
        "{" * 50_000 + "}" * 50_000,
        "note: " + "{\"a\": " * 50_000 + "1" + "}" * 50_000,
    ])
    def test_deep_nesting(self, text: str) -> None:
        with pytest.raises(MalformedResponseError):
            parse(text)


# ---------------------------------------------------------------------------
# Field normalization
# ---------------------------------------------------------------------------


class TestNormalization:

    def test_unknown_risk_level_kept(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="tyr.core.parser"):
            result = parse(_one_threat(risk_level="Severe"))
        assert result.threat_count == 1
        assert result.threats[0].risk_level is RiskLevel.UNKNOWN
        assert "Severe" in caplog.text

    def test_unknown_category_kept(self) -> None:
        result = parse(_one_threat(category="Phishing"))
        assert result.threats[0].category is StrideCategory.UNKNOWN

    def test_spelling_drift(self) -> None:
        result = parse(_one_threat(category="information disclosure", risk_level="CRITICAL"))
        threat = result.threats[0]
        assert threat.category is StrideCategory.INFORMATION_DISCLOSURE
        assert threat.risk_level is RiskLevel.CRITICAL

    def test_alternative_keys(self) -> None:
        text = json.dumps({"threats": [
            {"id": "T1", "title": "t", "stride_category": "DoS", "severity": "Low",
             "description": "d"},
        ]})
        threat = parse(text).threats[0]
        assert threat.category is StrideCategory.DENIAL_OF_SERVICE
        assert threat.risk_level is RiskLevel.LOW

    def test_absent_optionals_stay_none(self) -> None:
        threat = parse(_one_threat()).threats[0]
        assert threat.impact is None
        assert threat.attack_path is None
        assert threat.affected_components is None
        assert threat.mitigations is None
        assert threat.educational_note is None

    def test_empty_lists_stay_empty(self) -> None:
        threat = parse(_one_threat(mitigations=[], attack_path=[])).threats[0]
        assert threat.mitigations == ()
        assert threat.attack_path == ()

    def test_components_deduplicated_in_order(self) -> None:
        threat = parse(_one_threat(affected_components=["db", "api", "db", "web"])).threats[0]
        assert threat.affected_components == ("db", "api", "web")

    def test_non_string_list_items_dropped(self) -> None:
        threat = parse(_one_threat(attack_path=["step", {"x": 1}, None, "next"])).threats[0]
        assert threat.attack_path == ("step", "next")

    def test_mitigation_ratings(self) -> None:
        threat = parse(_one_threat(mitigations=[
            {"title": "m1", "description": "d1", "effort": "low", "effectiveness": "Complete"},
            {"title": "m2", "description": "d2", "effort": "huge"},
            "Rotate credentials",
        ])).threats[0]
        m1, m2, m3 = threat.mitigations
        assert (m1.effort, m1.effectiveness) == (Effort.LOW, Effectiveness.COMPLETE)
        assert (m2.effort, m2.effectiveness) == (Effort.UNKNOWN, Effectiveness.UNKNOWN)
        assert m3.title == "Rotate credentials"

    def test_unknown_mitigation_ratings_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="tyr.core.parser"):
            parse(_one_threat(mitigations=[
                {"title": "m", "description": "d", "effort": "huge", "effectiveness": "meh"},
            ]))
        assert "huge" in caplog.text
        assert "meh" in caplog.text

    def test_explicit_unknown_rating_not_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="tyr.core.parser"):
            parse(_one_threat(mitigations=[
                {"title": "m", "description": "d", "effort": "Unknown",
                 "effectiveness": "Unknown"},
            ]))
        assert "normalized" not in caplog.text

    def test_empty_mitigation_title_kept(self) -> None:
        threat = parse(_one_threat(mitigations=[{"title": "", "description": "d"}])).threats[0]
        assert threat.mitigations[0].title == ""

    def test_missing_mitigation_title_filled(self) -> None:
        threat = parse(_one_threat(mitigations=[{"description": "d"}])).threats[0]
        assert threat.mitigations[0].title == "Untitled mitigation"

    def test_non_object_threat_skipped(self) -> None:
        text = json.dumps({"threats": ["oops", {"id": "T1", "title": "t", "category": "Spoofing",
                                                "risk_level": "Low", "description": ""}]})
        result = parse(text)
        assert [t.id for t in result.threats] == ["T1"]

    def test_missing_and_duplicate_ids_regenerated(self) -> None:
        base = {"title": "t", "category": "Spoofing", "risk_level": "Low", "description": ""}
        text = json.dumps({"threats": [
            dict(base, id="T001"),
            dict(base),
            dict(base, id="T001"),
            dict(base, id="T003"),
        ]})
        ids = [t.id for t in parse(text).threats]
        assert ids[0] == "T001"
        assert ids[3] == "T003"
        assert len(set(ids)) == 4
        assert all(i.startswith("T") for i in ids)

    def test_numeric_id_becomes_text(self) -> None:
        assert parse(_one_threat(id=7)).threats[0].id == "7"


class TestScoreValidation:

    @pytest.mark.parametrize("raw", [62, 0, 100, 47.5])
    def test_valid_kept(self, raw: float) -> None:
        text = json.dumps({"threats": [], "overall_risk_score": raw})
        assert parse(text).overall_risk_score == raw

    @pytest.mark.parametrize("raw", [-1, 101, "high", True, None, [50]])
    def test_invalid_left_unset(self, raw: Any) -> None:
        text = json.dumps({"threats": [], "overall_risk_score": raw})
        assert parse(text).overall_risk_score is None

    def test_non_finite_left_unset(self) -> None:
        assert parse('{"threats": [], "overall_risk_score": NaN}').overall_risk_score is None

    def test_summary_score_accepted(self) -> None:
        text = json.dumps({"threats": [], "summary": {"overall_risk_score": 30}})
        assert parse(text).overall_risk_score == 30

    def test_int_type_preserved(self) -> None:
        score = parse('{"threats": [], "overall_risk_score": 40}').overall_risk_score
        assert isinstance(score, int)


class TestRoundTrip:

    def test_parse_then_serialize_reproduces_fields(
        self, sample_response: dict[str, Any], sample_response_text: str
    ) -> None:
        assert result_to_dict(parse(sample_response_text)) == sample_response

    def test_field_order_is_canonical(self, sample_response_text: str) -> None:
        data = result_to_dict(parse(sample_response_text))
        assert list(data) == ["threats", "overall_risk_score", "recommendations"]
        assert list(data["threats"][0]) == [
            "id", "title", "category", "risk_level", "description", "impact",
            "attack_path", "affected_components", "mitigations", "educational_note",
        ]
