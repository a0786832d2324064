"""Canonical JSON serialization of analysis results.

This is the one stable, machine-readable format. Key order is fixed:

    threats[]: id, title, category, risk_level, description, impact?,
               attack_path?, affected_components?, mitigations?,
               educational_note?
    overall_risk_score, recommendations?

Optional fields the backend did not supply are omitted rather than
written as ``null`` or empty lists, so parsing a well-formed response and
serializing it again reproduces the same values.
"""

from __future__ import annotations

import json
from typing import Any

from tyr.core.batch import BatchResult
from tyr.core.models import AnalysisResult, Mitigation, Threat

JSON_INDENT = 2


def mitigation_to_dict(mitigation: Mitigation) -> dict[str, Any]:
    return {
        "title": mitigation.title,
        "description": mitigation.description,
        "effort": mitigation.effort.value,
        "effectiveness": mitigation.effectiveness.value,
    }


def threat_to_dict(threat: Threat) -> dict[str, Any]:
    """Serialize one threat in canonical key order, omitting absent fields."""
    data: dict[str, Any] = {
        "id": threat.id,
        "title": threat.title,
        "category": threat.category.value,
        "risk_level": threat.risk_level.label,
        "description": threat.description,
    }
    if threat.impact is not None:
        data["impact"] = threat.impact
    if threat.attack_path is not None:
        data["attack_path"] = list(threat.attack_path)
    if threat.affected_components is not None:
        data["affected_components"] = list(threat.affected_components)
    if threat.mitigations is not None:
        data["mitigations"] = [mitigation_to_dict(m) for m in threat.mitigations]
    if threat.educational_note is not None:
        data["educational_note"] = threat.educational_note
    return data


def result_to_dict(result: AnalysisResult) -> dict[str, Any]:
    """Convert a result into the canonical JSON-ready dictionary."""
    data: dict[str, Any] = {
        "threats": [threat_to_dict(t) for t in result.threats],
        "overall_risk_score": result.overall_risk_score,
    }
    if result.recommendations is not None:
        data["recommendations"] = list(result.recommendations)
    return data


def render_json(result: AnalysisResult) -> str:
    """Serialize a result as 2-space indented JSON."""
    return json.dumps(result_to_dict(result), indent=JSON_INDENT, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Batch
# ---------------------------------------------------------------------------


def batch_to_dict(batch: BatchResult) -> dict[str, Any]:
    """Convert a batch scan into ``{"summary", "results", "errors"}``.

    Each entry in ``results`` wraps the canonical per-file object under
    ``analysis``.
    """
    return {
        "summary": {
            "directory": batch.directory,
            "total_files": batch.total,
            "succeeded": batch.succeeded,
            "failed": batch.failed,
            "total_threats": batch.total_threats,
        },
        "results": [
            {
                "path": item.path,
                "input_type": (
                    item.result.input_type.value if item.result.input_type else None
                ),
                "analysis": result_to_dict(item.result),
            }
            for item in batch.results
        ],
        "errors": [
            {"path": e.path, "error_type": e.error_type, "message": e.message}
            for e in batch.errors
        ],
    }


def render_batch_json(batch: BatchResult) -> str:
    return json.dumps(batch_to_dict(batch), indent=JSON_INDENT, ensure_ascii=False)
