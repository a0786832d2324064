"""Turn free-form backend text into a validated ``AnalysisResult``.

Backends are unreliable narrators: they wrap JSON in markdown fences, add
prose before and after it, drift on enum spelling and drop fields. The
parser applies an asymmetric policy:

**Structural failure is fatal.** If no balanced JSON object can be found,
or the object has no ``threats`` array, ``MalformedResponseError`` is
raised. An empty result would be indistinguishable from "no threats
found", which is a different and much stronger claim.

**Field-level drift is not.** Unrecognized ``risk_level``/``category``
values become ``UNKNOWN`` and the threat is kept; missing optional fields
stay absent; a bad ``overall_risk_score`` is left unset for the risk
scorer. Every such repair is logged as a warning.

Extraction proceeds in two steps:

1. Strict ``json.loads`` of the whole text.
2. Otherwise, locate the first ``{`` and its balanced ``}`` while tracking
   brace/bracket nesting and JSON string state, and strict-parse that
   substring. If it does not parse, the next top-level candidate after it
   is tried.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any

from tyr.core.models import (
    AnalysisResult,
    Effectiveness,
    Effort,
    InputType,
    Mitigation,
    RiskLevel,
    StrideCategory,
    Threat,
)
from tyr.exceptions import MalformedResponseError

logger = logging.getLogger(__name__)

# Alternative key spellings seen in backend output, canonical key first.
_RISK_KEYS = ("risk_level", "severity", "risk")
_CATEGORY_KEYS = ("category", "stride_category", "stride")

_EXCERPT_LEN = 200
_MAX_CANDIDATES = 50


def parse(raw_text: str, input_type: InputType | None = None) -> AnalysisResult:
    """Extract and validate an analysis result from raw backend text.

    Args:
        raw_text: Whatever the backend returned.
        input_type: Kind of document that was analyzed, recorded on the
            result for reporting.

    Returns:
        An ``AnalysisResult`` whose ``overall_risk_score`` may be ``None``
        (the risk scorer fills it in).

    Raises:
        MalformedResponseError: If no JSON object with a ``threats`` array
            can be recovered.
    """
    if not isinstance(raw_text, str) or not raw_text.strip():
        raise MalformedResponseError("Backend returned an empty response")

    data = _load_object(raw_text)
    excerpt = raw_text.strip()[:_EXCERPT_LEN]
    if data is None:
        raise MalformedResponseError(
            "No JSON object found in backend response", excerpt=excerpt
        )

    threats_raw = data.get("threats")
    if not isinstance(threats_raw, list):
        raise MalformedResponseError(
            "Backend response has no 'threats' array", excerpt=excerpt
        )

    return AnalysisResult(
        threats=_validate_threats(threats_raw),
        overall_risk_score=_validate_score(data),
        recommendations=_optional_string_list(data, "recommendations", "result"),
        input_type=input_type,
    )


# ---------------------------------------------------------------------------
# JSON extraction
# ---------------------------------------------------------------------------


def _load_object(text: str) -> dict[str, Any] | None:
    """Return the first JSON object recoverable from ``text``, or None."""
    stripped = text.strip()
    try:
        whole = json.loads(stripped)
    except (ValueError, RecursionError):
        whole = None
    if isinstance(whole, dict):
        return whole

    start = stripped.find("{")
    attempts = 0
    while start != -1 and attempts < _MAX_CANDIDATES:
        attempts += 1
        end = find_balanced_end(stripped, start)
        if end is None:
            return None
        candidate = stripped[start:end + 1]
        try:
            obj = json.loads(candidate)
        except (ValueError, RecursionError):
            logger.debug("Candidate JSON block at offset %d did not parse", start)
        else:
            if isinstance(obj, dict):
                if start > 0 or end < len(stripped) - 1:
                    logger.info("Recovered JSON object wrapped in surrounding text")
                return obj
        start = stripped.find("{", end + 1)
    return None


def find_balanced_end(text: str, start: int) -> int | None:
    """Find the index of the ``}`` that closes the ``{`` at ``start``.

    Braces and brackets must nest properly; characters inside JSON string
    literals (including escaped quotes) are ignored.

    Args:
        text: The text to scan.
        start: Index of an opening ``{``.

    Returns:
        Index of the matching ``}``, or None if the block is unbalanced
        or improperly nested.
    """
    closers: list[str] = []
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        ch = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            closers.append("}")
        elif ch == "[":
            closers.append("]")
        elif ch in "}]":
            if not closers or closers[-1] != ch:
                return None
            closers.pop()
            if not closers:
                return index
    return None


# ---------------------------------------------------------------------------
# Field validation
# ---------------------------------------------------------------------------


def _validate_threats(items: list[Any]) -> tuple[Threat, ...]:
    used_ids: set[str] = set()
    pending: list[tuple[dict[str, Any], str | None]] = []

    for index, item in enumerate(items):
        if not isinstance(item, dict):
            logger.warning("Skipping threat #%d: expected an object, got %s",
                           index + 1, type(item).__name__)
            continue
        threat_id = _text(item.get("id"))
        if threat_id is not None:
            threat_id = threat_id.strip() or None
        if threat_id is not None and threat_id in used_ids:
            logger.warning("Duplicate threat id %r; assigning a new one", threat_id)
            threat_id = None
        if threat_id is not None:
            used_ids.add(threat_id)
        pending.append((item, threat_id))

    threats: list[Threat] = []
    counter = 0
    for item, threat_id in pending:
        if threat_id is None:
            counter += 1
            while f"T{counter:03d}" in used_ids:
                counter += 1
            threat_id = f"T{counter:03d}"
            used_ids.add(threat_id)
        threats.append(_validate_threat(item, threat_id))
    return tuple(threats)


def _validate_threat(item: dict[str, Any], threat_id: str) -> Threat:
    title = _text(item.get("title"))
    if title is None:
        logger.warning("Threat %s has no title", threat_id)
        title = "Untitled threat"

    raw_category = _first_present(item, _CATEGORY_KEYS)
    category = StrideCategory.from_label(raw_category)
    if category is StrideCategory.UNKNOWN and raw_category != StrideCategory.UNKNOWN.value:
        logger.warning("Threat %s: unrecognized category %r normalized to Unknown",
                       threat_id, raw_category)

    raw_level = _first_present(item, _RISK_KEYS)
    risk_level = RiskLevel.from_label(raw_level)
    if risk_level is RiskLevel.UNKNOWN and raw_level != RiskLevel.UNKNOWN.label:
        logger.warning("Threat %s: unrecognized risk level %r normalized to Unknown",
                       threat_id, raw_level)

    return Threat(
        id=threat_id,
        title=title,
        category=category,
        risk_level=risk_level,
        description=_text(item.get("description")) or "",
        impact=_optional_text(item, "impact", threat_id),
        attack_path=_optional_string_list(item, "attack_path", threat_id),
        affected_components=_dedupe(
            _optional_string_list(item, "affected_components", threat_id)
        ),
        mitigations=_optional_mitigations(item, threat_id),
        educational_note=_optional_text(item, "educational_note", threat_id),
    )


def _validate_score(data: dict[str, Any]) -> float | None:
    raw = data.get("overall_risk_score")
    if raw is None and isinstance(data.get("summary"), dict):
        raw = data["summary"].get("overall_risk_score")
    if raw is None:
        return None
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        logger.warning("Ignoring non-numeric overall_risk_score %r", raw)
        return None
    if not 0 <= raw <= 100 or not math.isfinite(raw):
        logger.warning("Ignoring out-of-range overall_risk_score %r", raw)
        return None
    return raw


def _optional_mitigations(
    item: dict[str, Any], threat_id: str
) -> tuple[Mitigation, ...] | None:
    raw = item.get("mitigations")
    if raw is None:
        return None
    if not isinstance(raw, list):
        logger.warning("Threat %s: 'mitigations' is not a list; dropped", threat_id)
        return None

    mitigations: list[Mitigation] = []
    for entry in raw:
        if isinstance(entry, str):
            mitigations.append(Mitigation(title=entry, description=""))
        elif isinstance(entry, dict):
            title = _text(entry.get("title"))
            if title is None:
                logger.warning("Threat %s has a mitigation without a title", threat_id)
                title = "Untitled mitigation"
            mitigations.append(Mitigation(
                title=title,
                description=_text(entry.get("description")) or "",
                effort=_rating(Effort, entry, "effort", threat_id),
                effectiveness=_rating(Effectiveness, entry, "effectiveness", threat_id),
            ))
        else:
            logger.warning("Threat %s: skipping malformed mitigation %r",
                           threat_id, entry)
    return tuple(mitigations)


def _rating(enum_cls: Any, entry: dict[str, Any], key: str, threat_id: str) -> Any:
    raw = entry.get(key)
    rating = enum_cls.from_label(raw)
    if raw is not None and rating is enum_cls.UNKNOWN and raw != enum_cls.UNKNOWN.value:
        logger.warning("Threat %s: unrecognized mitigation %s %r normalized to Unknown",
                       threat_id, key, raw)
    return rating


def _optional_text(item: dict[str, Any], key: str, owner: str) -> str | None:
    if item.get(key) is None:
        return None
    value = _text(item[key])
    if value is None:
        logger.warning("%s: field %r is not text; dropped", owner, key)
    return value


def _optional_string_list(
    item: dict[str, Any], key: str, owner: str
) -> tuple[str, ...] | None:
    raw = item.get(key)
    if raw is None:
        return None
    if isinstance(raw, str):
        return (raw,)
    if not isinstance(raw, list):
        logger.warning("%s: field %r is not a list; dropped", owner, key)
        return None
    values = [v for v in (_text(x) for x in raw) if v is not None]
    if len(values) != len(raw):
        logger.warning("%s: dropped %d non-text entries from %r",
                       owner, len(raw) - len(values), key)
    return tuple(values)


def _dedupe(values: tuple[str, ...] | None) -> tuple[str, ...] | None:
    if values is None:
        return None
    return tuple(dict.fromkeys(values))


def _text(value: Any) -> str | None:
    """Coerce scalars to text; reject containers and null."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return str(value)
    return None


def _first_present(item: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if item.get(key) is not None:
            return item[key]
    return None
