"""Remote backend: Anthropic Claude via the Messages API.

Analysis requests send the schema instructions as the ``system`` parameter
and the document as the single user message; chat requests send the
role-tagged history. The SDK's own retry loop is disabled (``max_retries=0``)
so that one call is exactly one HTTP request and retry policy stays with
the caller.

SDK exceptions are translated into the ``ProviderError`` family:

    AuthenticationError / PermissionDeniedError -> AuthError
    APITimeoutError                             -> ProviderTimeout
    APIConnectionError                          -> ProviderUnavailable
    any other APIStatusError                    -> ProviderError
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

import anthropic

from tyr.core.prompts import (
    CHAT_SYSTEM_PROMPT,
    analysis_system_prompt,
    analysis_user_prompt,
    build_chat_messages,
)
from tyr.exceptions import AuthError, ProviderError, ProviderTimeout, ProviderUnavailable
from tyr.providers.base import BackendProvider

if TYPE_CHECKING:
    from tyr.config import ProviderConfig
    from tyr.core.models import InputType
    from tyr.core.session import ChatMessage

logger = logging.getLogger(__name__)

PROVIDER_NAME = "Claude"
_KEY_PREFIX = "sk-"

ClientFactory = Callable[[], Any]


class ClaudeProvider(BackendProvider):
    """Talks to the hosted Claude model.

    Args:
        config: Provider configuration; must carry ``anthropic_api_key``.
        client_factory: Zero-argument callable returning an async client
            usable as ``async with``. Defaults to ``anthropic.AsyncAnthropic``
            built from ``config``.

    Raises:
        AuthError: If the API key is missing, blank or malformed.
    """

    def __init__(
        self,
        config: ProviderConfig,
        client_factory: ClientFactory | None = None,
    ) -> None:
        key = config.anthropic_api_key
        if key is None or not key.strip():
            raise AuthError(
                "ANTHROPIC_API_KEY is not set; it is required for the Claude provider",
                provider=PROVIDER_NAME,
            )
        if key != key.strip() or not key.startswith(_KEY_PREFIX):
            raise AuthError(
                "ANTHROPIC_API_KEY looks malformed (expected an 'sk-' key "
                "without surrounding whitespace)",
                provider=PROVIDER_NAME,
            )
        self._config = config
        self._client_factory = client_factory or self._default_client

    @property
    def name(self) -> str:
        return PROVIDER_NAME

    @property
    def model(self) -> str:
        return self._config.anthropic_model

    def _default_client(self) -> anthropic.AsyncAnthropic:
        return anthropic.AsyncAnthropic(
            api_key=self._config.anthropic_api_key,
            timeout=self._config.timeout,
            max_retries=0,
        )

    async def analyze_threats(
        self,
        content: str,
        input_type: InputType,
        include_education: bool,
    ) -> str:
        return await self._send(
            system=analysis_system_prompt(include_education),
            messages=[{
                "role": "user",
                "content": analysis_user_prompt(content, input_type),
            }],
        )

    async def interactive_query(
        self,
        query: str,
        history: Sequence[ChatMessage],
    ) -> str:
        return await self._send(
            system=CHAT_SYSTEM_PROMPT,
            messages=build_chat_messages(query, history),
        )

    async def _send(self, system: str, messages: list[dict[str, str]]) -> str:
        """Issue one Messages API request and return the joined text blocks."""
        logger.debug(
            "Claude request: model=%s messages=%d", self.model, len(messages)
        )
        try:
            async with self._client_factory() as client:
                response = await client.messages.create(
                    model=self._config.anthropic_model,
                    max_tokens=self._config.max_tokens,
                    system=system,
                    messages=messages,
                )
        except (anthropic.AuthenticationError, anthropic.PermissionDeniedError) as exc:
            raise AuthError(
                f"Claude rejected the API key ({exc.status_code})",
                provider=PROVIDER_NAME,
            ) from exc
        # APITimeoutError subclasses APIConnectionError; order matters.
        except anthropic.APITimeoutError as exc:
            raise ProviderTimeout(
                f"Claude request timed out after {self._config.timeout:g}s",
                provider=PROVIDER_NAME,
            ) from exc
        except anthropic.APIConnectionError as exc:
            raise ProviderUnavailable(
                f"Cannot reach the Claude API: {exc}",
                provider=PROVIDER_NAME,
            ) from exc
        except anthropic.APIStatusError as exc:
            raise ProviderError(
                f"Claude API request failed with status {exc.status_code}: {exc.message}",
                provider=PROVIDER_NAME,
            ) from exc

        text = "\n".join(
            block.text
            for block in response.content
            if getattr(block, "type", None) == "text"
        )
        logger.debug("Claude response: %d characters", len(text))
        return text
