"""Local backend: a model served by an Ollama daemon.

Uses the non-streaming ``POST /api/generate`` endpoint. The local model
has no separate system channel, so prompts are sent as one flat text
built by ``tyr.core.prompts``. Analysis asks for Ollama's JSON output mode
and a low temperature; chat uses a warmer temperature.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import httpx

from tyr import __version__
from tyr.core.prompts import build_analysis_prompt, build_interactive_prompt
from tyr.exceptions import AuthError, ProviderError, ProviderTimeout, ProviderUnavailable
from tyr.providers.base import BackendProvider

if TYPE_CHECKING:
    from tyr.config import ProviderConfig
    from tyr.core.models import InputType
    from tyr.core.session import ChatMessage

logger = logging.getLogger(__name__)

PROVIDER_NAME = "Ollama"

USER_AGENT = f"tyr-threat-modeler/{__version__}"

ANALYSIS_TEMPERATURE = 0.3
CHAT_TEMPERATURE = 0.7
TOP_P = 0.9


class OllamaProvider(BackendProvider):
    """Talks to a locally hosted model through the Ollama HTTP API.

    Args:
        config: Provider configuration (host, model, timeout, max tokens).
        transport: Optional httpx transport, e.g. ``httpx.MockTransport``
            in tests.
    """

    def __init__(
        self,
        config: ProviderConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport

    @property
    def name(self) -> str:
        return PROVIDER_NAME

    @property
    def model(self) -> str:
        return self._config.ollama_model

    @property
    def host(self) -> str:
        return self._config.ollama_host

    async def analyze_threats(
        self,
        content: str,
        input_type: InputType,
        include_education: bool,
    ) -> str:
        prompt = build_analysis_prompt(content, input_type, include_education)
        return await self._generate(prompt, ANALYSIS_TEMPERATURE, json_mode=True)

    async def interactive_query(
        self,
        query: str,
        history: Sequence[ChatMessage],
    ) -> str:
        prompt = build_interactive_prompt(query, history)
        return await self._generate(prompt, CHAT_TEMPERATURE, json_mode=False)

    async def check_available(self) -> None:
        """Verify the daemon answers and has the configured model installed.

        Raises:
            ProviderUnavailable: If the daemon is unreachable or the model
                is missing.
        """
        data = await self._request("GET", "/api/tags")
        models = data.get("models") if isinstance(data, dict) else None
        installed = {
            m.get("name") for m in models or [] if isinstance(m, dict)
        }
        wanted = self.model if ":" in self.model else f"{self.model}:latest"
        if self.model not in installed and wanted not in installed:
            raise ProviderUnavailable(
                f"Model '{self.model}' is not installed in Ollama at {self.host}. "
                f"Run: ollama pull {self.model}",
                provider=PROVIDER_NAME,
            )
        logger.debug("Ollama at %s serves %s", self.host, self.model)

    # -----------------------------------------------------------------------
    # HTTP
    # -----------------------------------------------------------------------

    async def _generate(self, prompt: str, temperature: float, json_mode: bool) -> str:
        payload: dict[str, Any] = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": temperature,
                "top_p": TOP_P,
                "num_predict": self._config.max_tokens,
            },
        }
        if json_mode:
            payload["format"] = "json"

        logger.debug(
            "Ollama request: model=%s prompt=%d chars json=%s",
            self.model, len(prompt), json_mode,
        )
        data = await self._request("POST", "/api/generate", json=payload)
        text = data.get("response") if isinstance(data, dict) else None
        if not isinstance(text, str):
            raise ProviderError(
                "Ollama response has no 'response' text field",
                provider=PROVIDER_NAME,
            )
        logger.debug("Ollama response: %d characters", len(text))
        return text

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send one request and return the decoded JSON body.

        Raises:
            AuthError: On 401/403.
            ProviderUnavailable: On connection failure or a missing model.
            ProviderTimeout: When the request exceeds the timeout.
            ProviderError: On any other non-success status or a non-JSON body.
        """
        try:
            async with httpx.AsyncClient(
                base_url=self.host,
                timeout=self._config.timeout,
                headers={"User-Agent": USER_AGENT},
                transport=self._transport,
            ) as client:
                resp = await client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            raise ProviderTimeout(
                f"Ollama did not answer within {self._config.timeout:g}s",
                provider=PROVIDER_NAME,
            ) from exc
        except httpx.RequestError as exc:
            raise ProviderUnavailable(
                f"Failed to connect to Ollama at {self.host}. Is it running? ({exc})",
                provider=PROVIDER_NAME,
            ) from exc

        if resp.status_code in (401, 403):
            raise AuthError(
                f"Ollama refused the request ({resp.status_code})",
                provider=PROVIDER_NAME,
            )
        if resp.status_code == 404 or _mentions_missing_model(resp):
            raise ProviderUnavailable(
                f"Model '{self.model}' not found in Ollama at {self.host}. "
                f"Run: ollama pull {self.model}",
                provider=PROVIDER_NAME,
            )
        if not resp.is_success:
            raise ProviderError(
                f"Ollama request failed with status {resp.status_code}: "
                f"{resp.text[:200]}",
                provider=PROVIDER_NAME,
            )
        try:
            return resp.json()
        except ValueError as exc:
            raise ProviderError(
                "Ollama returned a non-JSON body", provider=PROVIDER_NAME
            ) from exc


def _mentions_missing_model(resp: httpx.Response) -> bool:
    if resp.is_success:
        return False
    return "model" in resp.text.lower() and "not found" in resp.text.lower()
