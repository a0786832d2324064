"""Public facade over the analysis pipeline.

``ThreatModeler`` is what callers (the CLI included) use. It wires one
backend provider into the analyzer, the batch scanner and a lazily created
interactive session, and exposes rendering so that no caller has to
import the individual components.

Usage::

    modeler = ThreatModeler.from_config(ProviderConfig.from_env())
    result = asyncio.run(modeler.analyze(text, InputType.TERRAFORM))
    print(modeler.render(result, ReportFormat.JSON))
"""

from __future__ import annotations

from pathlib import Path

from tyr.config import DEFAULT_BATCH_CONCURRENCY, ProviderConfig
from tyr.core.analyzer import ThreatAnalyzer
from tyr.core.batch import BatchResult, BatchScanner
from tyr.core.models import AnalysisResult, InputType
from tyr.core.scoring import DEFAULT_WEIGHTS, RiskWeights
from tyr.core.session import InteractiveSession
from tyr.providers import BackendProvider, create_provider
from tyr.reporting import ReportFormat, render, render_batch


class ThreatModeler:
    """Analyze documents, scan directories and chat through one provider.

    Args:
        provider: The backend every operation uses.
        weights: Risk weights for the score fallback.
        concurrency: Batch scan concurrency (1-8).
        retries: Batch retries for recoverable provider errors.
    """

    def __init__(
        self,
        provider: BackendProvider,
        weights: RiskWeights = DEFAULT_WEIGHTS,
        concurrency: int = DEFAULT_BATCH_CONCURRENCY,
        retries: int = 0,
    ) -> None:
        self._provider = provider
        self._analyzer = ThreatAnalyzer(provider, weights)
        self._concurrency = concurrency
        self._retries = retries
        self._session: InteractiveSession | None = None

    @classmethod
    def from_config(cls, config: ProviderConfig, **kwargs: object) -> ThreatModeler:
        """Build the configured provider and wrap it.

        Raises:
            AuthError: If the selected provider lacks a usable credential.
        """
        return cls(create_provider(config), **kwargs)  # type: ignore[arg-type]

    @property
    def provider(self) -> BackendProvider:
        return self._provider

    @property
    def session(self) -> InteractiveSession:
        """The current chat session, created on first use."""
        if self._session is None:
            self._session = InteractiveSession(self._provider)
        return self._session

    def new_session(self) -> InteractiveSession:
        """Discard the chat history and start over."""
        self._session = InteractiveSession(self._provider)
        return self._session

    async def check_available(self) -> None:
        await self._provider.check_available()

    async def analyze(
        self,
        content: str,
        input_type: InputType,
        include_education: bool = True,
    ) -> AnalysisResult:
        """Analyze one document; see ``ThreatAnalyzer.analyze``."""
        return await self._analyzer.analyze(content, input_type, include_education)

    async def scan(
        self,
        directory: Path | str,
        pattern: str | None = None,
        include_education: bool = True,
    ) -> BatchResult:
        """Analyze every matching file under ``directory``."""
        scanner = BatchScanner(
            self._analyzer,
            concurrency=self._concurrency,
            retries=self._retries,
            include_education=include_education,
        )
        return await scanner.scan(directory, pattern)

    def interactive_ask(self, query: str) -> str:
        """Ask the current chat session a question (blocking)."""
        return self.session.ask(query)

    @staticmethod
    def render(result: AnalysisResult, fmt: ReportFormat | str) -> str:
        return render(result, fmt)

    @staticmethod
    def render_batch(batch: BatchResult, fmt: ReportFormat | str) -> str:
        return render_batch(batch, fmt)
