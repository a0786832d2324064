"""Multi-turn interactive threat modeling chat.

``InteractiveSession`` owns an append-only message history and sends it in
full with every question. Each ``ask`` is a plain blocking call: the
provider coroutine runs to completion on a fresh event loop, so the chat
loop in the CLI needs no async plumbing.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from tyr.exceptions import AnalysisError, InvalidInputError

if TYPE_CHECKING:
    from tyr.providers.base import BackendProvider

logger = logging.getLogger(__name__)

APOLOGY_MESSAGE = (
    "Sorry, I encountered an error processing your request. Please try again."
)

_ROLES = ("user", "assistant")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ChatMessage:
    """One turn of the conversation.

    Attributes:
        role: ``user`` or ``assistant``.
        content: Message text.
        timestamp: When the message was recorded (UTC).
    """

    role: str
    content: str
    timestamp: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        if self.role not in _ROLES:
            raise ValueError(f"Invalid chat role: {self.role!r}")


class InteractiveSession:
    """Conversation state plus the provider that answers it.

    Args:
        provider: Backend used for every turn.
    """

    def __init__(self, provider: BackendProvider) -> None:
        self._provider = provider
        self._history: list[ChatMessage] = []

    @property
    def provider(self) -> BackendProvider:
        return self._provider

    @property
    def history(self) -> tuple[ChatMessage, ...]:
        """Read-only snapshot of the conversation, oldest first."""
        return tuple(self._history)

    def load_context(self, text: str, label: str = "context") -> None:
        """Seed the conversation with a document the user wants to discuss.

        The text is recorded as a user message; no backend call is made.

        Raises:
            InvalidInputError: If ``text`` is empty.
        """
        if not text.strip():
            raise InvalidInputError("Context document is empty")
        self._history.append(ChatMessage(
            role="user",
            content=f"Here is the {label} for our discussion:\n\n{text}",
        ))
        logger.debug("Loaded %d characters of %s into session", len(text), label)

    def ask(self, query: str) -> str:
        """Send a question with the full history and return the reply.

        On success both the question and the reply are appended. When the
        provider fails, the question and an apology reply are appended and
        the error is re-raised.

        Raises:
            InvalidInputError: If ``query`` is empty; history is left untouched.
            AnalysisError: If the provider call fails.
        """
        if not query or not query.strip():
            raise InvalidInputError("Query must not be empty")

        snapshot = tuple(self._history)
        try:
            reply = asyncio.run(self._provider.interactive_query(query, snapshot))
        except AnalysisError:
            logger.warning("Chat turn failed on provider %s", self._provider.name)
            self._history.append(ChatMessage(role="user", content=query))
            self._history.append(ChatMessage(role="assistant", content=APOLOGY_MESSAGE))
            raise

        self._history.append(ChatMessage(role="user", content=query))
        self._history.append(ChatMessage(role="assistant", content=reply))
        return reply
