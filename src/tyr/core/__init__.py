"""Analysis core: data model, prompts, parsing, scoring and orchestration.

The facade ``tyr.core.engine.ThreatModeler`` is imported from its own
module; it depends on the providers and reporters, which themselves build
on this package.
"""

from tyr.core.analyzer import ThreatAnalyzer
from tyr.core.batch import BatchResult, BatchScanner, FileAnalysis, FileError
from tyr.core.models import (
    AnalysisResult,
    Effectiveness,
    Effort,
    InputType,
    Mitigation,
    RiskLevel,
    StrideCategory,
    Threat,
    format_score,
)
from tyr.core.parser import parse
from tyr.core.scoring import DEFAULT_WEIGHTS, RiskWeights, score
from tyr.core.session import ChatMessage, InteractiveSession

__all__ = [
    "AnalysisResult",
    "BatchResult",
    "BatchScanner",
    "ChatMessage",
    "DEFAULT_WEIGHTS",
    "Effectiveness",
    "Effort",
    "FileAnalysis",
    "FileError",
    "InputType",
    "InteractiveSession",
    "Mitigation",
    "RiskLevel",
    "RiskWeights",
    "StrideCategory",
    "Threat",
    "ThreatAnalyzer",
    "format_score",
    "parse",
    "score",
]
