"""Deterministic overall risk score.

Backends are asked for an ``overall_risk_score`` but do not always supply a
usable one. When the parser leaves the score unset, it is computed from the
threat list:

    score = min(cap, w_c * #Critical + w_h * #High + w_m * #Medium + w_l * #Low)

with the default weights 25 / 15 / 8 / 3 and cap 100. Threats whose risk
level could not be recognized weigh ``w_u`` (0 by default). A score the
backend did supply is kept as long as it lies in ``[0, 100]``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace

from tyr.core.models import AnalysisResult, RiskLevel

logger = logging.getLogger(__name__)

SCORE_MIN = 0
SCORE_MAX = 100


@dataclass(frozen=True)
class RiskWeights:
    """Per-level contribution to the computed score, plus the cap.

    Attributes:
        critical: Points per Critical threat.
        high: Points per High threat.
        medium: Points per Medium threat.
        low: Points per Low threat.
        unknown: Points per threat with an unrecognized risk level.
        cap: Upper bound of the computed score (at most 100).
    """

    critical: float = 25
    high: float = 15
    medium: float = 8
    low: float = 3
    unknown: float = 0
    cap: float = 100

    def __post_init__(self) -> None:
        for name in ("critical", "high", "medium", "low", "unknown"):
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"Weight '{name}' must be non-negative, got {value}")
        if not SCORE_MIN <= self.cap <= SCORE_MAX:
            raise ValueError(f"Cap must be in [0, 100], got {self.cap}")

    def weight_for(self, level: RiskLevel) -> float:
        return {
            RiskLevel.CRITICAL: self.critical,
            RiskLevel.HIGH: self.high,
            RiskLevel.MEDIUM: self.medium,
            RiskLevel.LOW: self.low,
            RiskLevel.UNKNOWN: self.unknown,
        }[level]


DEFAULT_WEIGHTS = RiskWeights()


def compute_score(result: AnalysisResult, weights: RiskWeights = DEFAULT_WEIGHTS) -> float:
    """Compute the weighted score of a result's threats, ignoring any given score."""
    total = sum(weights.weight_for(t.risk_level) for t in result.threats)
    capped = min(weights.cap, total)
    return int(capped) if float(capped).is_integer() else capped


def is_valid_score(value: object) -> bool:
    """True for a finite, non-boolean number within ``[0, 100]``."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return SCORE_MIN <= value <= SCORE_MAX and math.isfinite(value)


def score(result: AnalysisResult, weights: RiskWeights = DEFAULT_WEIGHTS) -> AnalysisResult:
    """Return ``result`` with a guaranteed in-range ``overall_risk_score``.

    Pure: the input is never modified. If it already carries a valid score
    it is returned unchanged.

    Args:
        result: A parsed analysis result.
        weights: Weights and cap for the computed fallback.

    Returns:
        An ``AnalysisResult`` whose score is within ``[0, 100]``.
    """
    if is_valid_score(result.overall_risk_score):
        return result
    computed = compute_score(result, weights)
    logger.debug(
        "Computed overall risk score %s from %d threats",
        computed, result.threat_count,
    )
    return replace(result, overall_risk_score=computed)
