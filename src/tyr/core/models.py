"""Data models for threat analysis: enums, Threat, Mitigation, AnalysisResult.

These are the validated value objects produced by the response parser and
consumed by the risk scorer, the reporters and the batch scanner. They are
intentionally decoupled from the providers and the parser so that
downstream modules can import them without pulling in any network code.

Every model is a frozen dataclass: an ``AnalysisResult`` is created once
per analysis and never mutated afterwards. The risk scorer returns a new
instance rather than editing the one it was given.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from enum import Enum, IntEnum
from pathlib import Path

import yaml


def _normalize_key(value: str) -> str:
    """Collapse case, whitespace, underscores and dashes for enum lookup."""
    return re.sub(r"[^a-z0-9]", "", value.lower())


# ---------------------------------------------------------------------------
# RiskLevel: Ordered threat severity
# ---------------------------------------------------------------------------


class RiskLevel(IntEnum):
    """Four-level risk scale plus a bucket for unrecognized values.

    The integer encoding enables direct comparison:
    UNKNOWN < LOW < MEDIUM < HIGH < CRITICAL.
    """

    UNKNOWN = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4

    @property
    def label(self) -> str:
        """Canonical spelling used in prompts and JSON output."""
        return self.name.capitalize()

    @classmethod
    def from_label(cls, value: object) -> RiskLevel:
        """Map a backend-supplied value to a member, or ``UNKNOWN``."""
        if not isinstance(value, str):
            return cls.UNKNOWN
        return _RISK_ALIASES.get(_normalize_key(value), cls.UNKNOWN)

    @classmethod
    def known(cls) -> tuple[RiskLevel, ...]:
        """The four real levels, highest first."""
        return (cls.CRITICAL, cls.HIGH, cls.MEDIUM, cls.LOW)


_RISK_ALIASES: dict[str, RiskLevel] = {
    "critical": RiskLevel.CRITICAL,
    "high": RiskLevel.HIGH,
    "medium": RiskLevel.MEDIUM,
    "moderate": RiskLevel.MEDIUM,
    "low": RiskLevel.LOW,
    "unknown": RiskLevel.UNKNOWN,
}


# ---------------------------------------------------------------------------
# StrideCategory: The six STRIDE threat classes
# ---------------------------------------------------------------------------


class StrideCategory(Enum):
    """STRIDE threat taxonomy with an ``UNKNOWN`` normalization bucket.

    Values are the canonical spellings requested from the model and
    emitted in JSON reports.
    """

    SPOOFING = "Spoofing"
    TAMPERING = "Tampering"
    REPUDIATION = "Repudiation"
    INFORMATION_DISCLOSURE = "InformationDisclosure"
    DENIAL_OF_SERVICE = "DenialOfService"
    ELEVATION_OF_PRIVILEGE = "ElevationOfPrivilege"
    UNKNOWN = "Unknown"

    @property
    def title(self) -> str:
        """Human-readable name, e.g. ``Information Disclosure``."""
        return _CATEGORY_TITLES[self]

    @property
    def description(self) -> str:
        """One-line explanation of the category."""
        return _CATEGORY_DESCRIPTIONS[self]

    @classmethod
    def from_label(cls, value: object) -> StrideCategory:
        """Map a backend-supplied value to a member, or ``UNKNOWN``."""
        if not isinstance(value, str):
            return cls.UNKNOWN
        return _CATEGORY_ALIASES.get(_normalize_key(value), cls.UNKNOWN)

    @classmethod
    def known(cls) -> tuple[StrideCategory, ...]:
        """The six STRIDE classes in S-T-R-I-D-E order."""
        return tuple(c for c in cls if c is not cls.UNKNOWN)


_CATEGORY_TITLES: dict[StrideCategory, str] = {
    StrideCategory.SPOOFING: "Spoofing",
    StrideCategory.TAMPERING: "Tampering",
    StrideCategory.REPUDIATION: "Repudiation",
    StrideCategory.INFORMATION_DISCLOSURE: "Information Disclosure",
    StrideCategory.DENIAL_OF_SERVICE: "Denial of Service",
    StrideCategory.ELEVATION_OF_PRIVILEGE: "Elevation of Privilege",
    StrideCategory.UNKNOWN: "Unknown",
}

_CATEGORY_DESCRIPTIONS: dict[StrideCategory, str] = {
    StrideCategory.SPOOFING: "Pretending to be something or someone other than yourself",
    StrideCategory.TAMPERING: "Modifying data or code",
    StrideCategory.REPUDIATION: "Claiming you didn't do something or denying actions",
    StrideCategory.INFORMATION_DISCLOSURE: "Exposing information to unauthorized individuals",
    StrideCategory.DENIAL_OF_SERVICE: "Denying or degrading service to users",
    StrideCategory.ELEVATION_OF_PRIVILEGE: "Gaining capabilities without proper authorization",
    StrideCategory.UNKNOWN: "Category not recognized",
}

_CATEGORY_ALIASES: dict[str, StrideCategory] = {
    **{_normalize_key(c.value): c for c in StrideCategory},
    **{_normalize_key(t): c for c, t in _CATEGORY_TITLES.items()},
    "spoof": StrideCategory.SPOOFING,
    "tamper": StrideCategory.TAMPERING,
    "infodisclosure": StrideCategory.INFORMATION_DISCLOSURE,
    "dos": StrideCategory.DENIAL_OF_SERVICE,
    "eop": StrideCategory.ELEVATION_OF_PRIVILEGE,
    "privilegeescalation": StrideCategory.ELEVATION_OF_PRIVILEGE,
    "elevationofprivileges": StrideCategory.ELEVATION_OF_PRIVILEGE,
}


# ---------------------------------------------------------------------------
# Mitigation ratings
# ---------------------------------------------------------------------------


class Effort(Enum):
    """Implementation effort of a mitigation."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    UNKNOWN = "Unknown"

    @classmethod
    def from_label(cls, value: object) -> Effort:
        if not isinstance(value, str):
            return cls.UNKNOWN
        key = _normalize_key(value)
        for member in cls:
            if _normalize_key(member.value) == key:
                return member
        return cls.UNKNOWN


class Effectiveness(Enum):
    """How completely a mitigation addresses its threat."""

    PARTIAL = "Partial"
    HIGH = "High"
    COMPLETE = "Complete"
    UNKNOWN = "Unknown"

    @classmethod
    def from_label(cls, value: object) -> Effectiveness:
        if not isinstance(value, str):
            return cls.UNKNOWN
        key = _normalize_key(value)
        for member in cls:
            if _normalize_key(member.value) == key:
                return member
        return cls.UNKNOWN


# ---------------------------------------------------------------------------
# InputType: What kind of document is being analyzed
# ---------------------------------------------------------------------------


class InputType(Enum):
    """Kinds of input the analyzer understands."""

    ARCHITECTURE = "architecture"
    TERRAFORM = "terraform"
    KUBERNETES = "kubernetes"
    API_SPEC = "api-spec"

    @property
    def description(self) -> str:
        """Phrase used in prompts ("Analyze the following <description>")."""
        return _INPUT_DESCRIPTIONS[self]

    @classmethod
    def parse(cls, value: str) -> InputType:
        """Resolve a user-supplied input type name or alias.

        Raises:
            ValueError: If the name matches no input type.
        """
        key = value.strip().lower()
        try:
            return _INPUT_ALIASES[key]
        except KeyError:
            choices = ", ".join(t.value for t in cls)
            raise ValueError(f"Unknown input type: {value!r} (expected one of {choices})")

    @classmethod
    def detect(cls, path: Path, content: str = "") -> InputType:
        """Guess the input type of a file for batch scanning.

        The extension decides first. YAML and JSON documents are inspected:
        ``apiVersion`` plus ``kind`` marks a Kubernetes manifest, an
        ``openapi`` or ``swagger`` key marks an API specification.
        Anything else is treated as an architecture description.
        """
        suffix = path.suffix.lower()
        if suffix in (".tf", ".tfvars", ".hcl"):
            return cls.TERRAFORM
        if suffix in (".yaml", ".yml", ".json"):
            for doc in _load_documents(content, suffix):
                if not isinstance(doc, dict):
                    continue
                if "apiVersion" in doc and "kind" in doc:
                    return cls.KUBERNETES
                if "openapi" in doc or "swagger" in doc:
                    return cls.API_SPEC
            # JSON without markers is most often an API description
            return cls.API_SPEC if suffix == ".json" else cls.ARCHITECTURE
        return cls.ARCHITECTURE


_INPUT_DESCRIPTIONS: dict[InputType, str] = {
    InputType.ARCHITECTURE: "architecture description",
    InputType.TERRAFORM: "Terraform configuration",
    InputType.KUBERNETES: "Kubernetes manifest",
    InputType.API_SPEC: "API specification",
}

_INPUT_ALIASES: dict[str, InputType] = {
    "architecture": InputType.ARCHITECTURE,
    "arch": InputType.ARCHITECTURE,
    "terraform": InputType.TERRAFORM,
    "tf": InputType.TERRAFORM,
    "kubernetes": InputType.KUBERNETES,
    "k8s": InputType.KUBERNETES,
    "kube": InputType.KUBERNETES,
    "api-spec": InputType.API_SPEC,
    "api": InputType.API_SPEC,
    "openapi": InputType.API_SPEC,
}


def _load_documents(content: str, suffix: str) -> list[object]:
    """Parse YAML (multi-document) or JSON content, or return nothing."""
    if not content.strip():
        return []
    try:
        if suffix == ".json":
            return [json.loads(content)]
        return list(yaml.safe_load_all(content))
    except (ValueError, RecursionError, yaml.YAMLError):
        return []


# ---------------------------------------------------------------------------
# Mitigation and Threat
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Mitigation:
    """A countermeasure proposed for a threat.

    Attributes:
        title: Short name of the countermeasure.
        description: What to do and how.
        effort: Implementation effort rating.
        effectiveness: How completely it addresses the threat.
    """

    title: str
    description: str
    effort: Effort = Effort.UNKNOWN
    effectiveness: Effectiveness = Effectiveness.UNKNOWN


@dataclass(frozen=True)
class Threat:
    """A single STRIDE threat reported by the backend.

    Optional fields are ``None`` when the backend omitted them, which is
    distinct from an explicitly empty list. Reporters rely on the
    distinction to reproduce the input faithfully.

    Attributes:
        id: Identifier, unique within one ``AnalysisResult``.
        title: Short threat name.
        category: STRIDE class (``UNKNOWN`` if unrecognized).
        risk_level: Severity (``UNKNOWN`` if unrecognized).
        description: What the threat is and why it matters.
        impact: Damage that could result.
        attack_path: Ordered attacker steps.
        affected_components: Component names, de-duplicated, order kept.
        mitigations: Ordered countermeasures.
        educational_note: Background explanation for learners.
    """

    id: str
    title: str
    category: StrideCategory
    risk_level: RiskLevel
    description: str
    impact: str | None = None
    attack_path: tuple[str, ...] | None = None
    affected_components: tuple[str, ...] | None = None
    mitigations: tuple[Mitigation, ...] | None = None
    educational_note: str | None = None


# ---------------------------------------------------------------------------
# AnalysisResult: Complete output of one analysis
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AnalysisResult:
    """The validated result of analyzing one document.

    Attributes:
        threats: Threats in the order the backend reported them.
        overall_risk_score: Aggregate 0-100 score. ``None`` only between
            parsing and scoring; always set on results leaving the analyzer.
        recommendations: Overall recommendations, if any were given.
        input_type: Kind of document analyzed, when known.
    """

    threats: tuple[Threat, ...] = ()
    overall_risk_score: float | None = None
    recommendations: tuple[str, ...] | None = None
    input_type: InputType | None = None

    @property
    def threat_count(self) -> int:
        return len(self.threats)

    @property
    def max_risk_level(self) -> RiskLevel | None:
        """Return the highest risk level among all threats, or None if empty."""
        if not self.threats:
            return None
        return max(t.risk_level for t in self.threats)

    def counts_by_risk_level(self) -> dict[RiskLevel, int]:
        """Count threats per risk level (every member present, zero-filled)."""
        counts = {level: 0 for level in RiskLevel}
        for threat in self.threats:
            counts[threat.risk_level] += 1
        return counts

    def counts_by_category(self) -> dict[StrideCategory, int]:
        """Count threats per STRIDE category (every member present, zero-filled)."""
        counts = {category: 0 for category in StrideCategory}
        for threat in self.threats:
            counts[threat.category] += 1
        return counts


def format_score(score: float | None) -> str:
    """Render a risk score the same way in every report format.

    Integral scores print without decimals, others with one decimal.
    """
    if score is None:
        return "n/a"
    if float(score).is_integer():
        return str(int(score))
    return f"{score:.1f}"
