"""Single-document analysis pipeline.

``ThreatAnalyzer.analyze`` runs the three stages of one analysis in order:

1. ask the backend provider for a STRIDE analysis (raw text),
2. parse and validate that text into an ``AnalysisResult``,
3. fill in the overall risk score when the backend gave none.

Each stage fails with its own ``AnalysisError`` subclass; nothing is
caught here.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tyr.core.models import AnalysisResult, InputType
from tyr.core.parser import parse
from tyr.core.scoring import DEFAULT_WEIGHTS, RiskWeights, score
from tyr.exceptions import InvalidInputError

if TYPE_CHECKING:
    from tyr.providers.base import BackendProvider

logger = logging.getLogger(__name__)


class ThreatAnalyzer:
    """Runs provider, parser and scorer for one document at a time.

    Args:
        provider: Backend used for every analysis.
        weights: Risk weights for the score fallback.
    """

    def __init__(
        self,
        provider: BackendProvider,
        weights: RiskWeights = DEFAULT_WEIGHTS,
    ) -> None:
        self._provider = provider
        self._weights = weights

    @property
    def provider(self) -> BackendProvider:
        return self._provider

    async def analyze(
        self,
        content: str,
        input_type: InputType,
        include_education: bool = True,
    ) -> AnalysisResult:
        """Analyze one document.

        Args:
            content: Document text.
            input_type: Kind of document.
            include_education: Whether to request educational notes.

        Returns:
            A validated, scored ``AnalysisResult``.

        Raises:
            InvalidInputError: If ``content`` is empty or whitespace.
            ProviderError: If the backend request fails.
            MalformedResponseError: If the reply carries no threat list.
        """
        if not content or not content.strip():
            raise InvalidInputError("Nothing to analyze: input is empty")

        logger.info(
            "Analyzing %s (%d characters) with %s",
            input_type.description, len(content), self._provider.name,
        )
        raw = await self._provider.analyze_threats(content, input_type, include_education)
        result = score(parse(raw, input_type), self._weights)
        logger.info(
            "Found %d threats, overall risk score %s",
            result.threat_count, result.overall_risk_score,
        )
        return result
