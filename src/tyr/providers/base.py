"""Abstract backend provider.

A provider turns a prompt into raw text. It knows nothing about the threat
model: parsing, validation and scoring happen in ``tyr.core``. Concrete
providers (``ClaudeProvider``, ``OllamaProvider``) implement the two
request primitives and may override ``check_available`` with a cheap
reachability probe.

Every request opens and closes its own HTTP client, so a provider instance
holds nothing but immutable configuration and can be reused across
successive event loops.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tyr.core.models import InputType
    from tyr.core.session import ChatMessage


class BackendProvider(ABC):
    """Interface shared by all generative-text backends."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable provider name used in logs and errors."""

    @property
    def model(self) -> str:
        """Model identifier the provider sends requests to."""
        return ""

    @abstractmethod
    async def analyze_threats(
        self,
        content: str,
        input_type: InputType,
        include_education: bool,
    ) -> str:
        """Request a STRIDE analysis of ``content``.

        Args:
            content: The document to analyze.
            input_type: What kind of document it is.
            include_education: Whether to ask for educational notes.

        Returns:
            The backend's raw text answer, unparsed.

        Raises:
            ProviderError: Or one of its subclasses on transport failure.
        """

    @abstractmethod
    async def interactive_query(
        self,
        query: str,
        history: Sequence[ChatMessage],
    ) -> str:
        """Answer a chat question given the prior conversation.

        Raises:
            ProviderError: Or one of its subclasses on transport failure.
        """

    async def check_available(self) -> None:
        """Probe the backend before real work starts.

        The default does nothing; providers with a cheap health endpoint
        override it.

        Raises:
            ProviderUnavailable: If the backend cannot serve requests.
        """
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self.model!r})"
