"""Provider configuration and project-wide constants.

``ProviderConfig`` is the single immutable value that carries everything a
backend provider needs. It is collected once at startup (usually via
``ProviderConfig.from_env``) and passed explicitly into
``tyr.providers.create_provider``. Nothing else in the package reads the
process environment.

Environment variables:
    AI_PROVIDER        -- ``claude`` or ``ollama`` (required).
    ANTHROPIC_API_KEY  -- credential for the Claude provider.
    TYR_CLAUDE_MODEL   -- Claude model id (optional).
    OLLAMA_HOST        -- base URL of the Ollama daemon (optional).
    OLLAMA_MODEL       -- installed Ollama model name (optional).
    TYR_TIMEOUT        -- per-request timeout in seconds (optional).
"""

from __future__ import annotations

import math
import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from enum import Enum

from tyr.exceptions import ConfigurationError

DEFAULT_CLAUDE_MODEL = "claude-sonnet-4-20250514"
DEFAULT_OLLAMA_HOST = "http://localhost:11434"
DEFAULT_OLLAMA_MODEL = "llama3.1:70b"
DEFAULT_MAX_TOKENS = 4096
DEFAULT_TIMEOUT = 120.0

# Batch scanning: a local daemon serializes generation on one model
# instance and the hosted API is rate limited.
DEFAULT_BATCH_CONCURRENCY = 2
MAX_BATCH_CONCURRENCY = 8

DEFAULT_SCAN_PATTERNS: tuple[str, ...] = ("*.tf", "*.yaml", "*.yml", "*.json")

SCAN_EXCLUDE_DIRS: frozenset[str] = frozenset({
    ".git",
    ".hg",
    ".svn",
    ".terraform",
    "node_modules",
    "__pycache__",
    ".venv",
    "venv",
})


class ProviderKind(Enum):
    """The two supported backend variants."""

    CLAUDE = "claude"
    OLLAMA = "ollama"

    @classmethod
    def parse(cls, value: str) -> ProviderKind:
        """Resolve a provider selector string (case-insensitive).

        Raises:
            ConfigurationError: If the value names no known provider.
        """
        key = value.strip().lower()
        for kind in cls:
            if kind.value == key:
                return kind
        available = ", ".join(k.value for k in cls)
        raise ConfigurationError(
            f"Unknown AI provider: {value!r}. Available: {available}"
        )


@dataclass(frozen=True)
class ProviderConfig:
    """Immutable provider settings captured at startup.

    Attributes:
        provider: Which backend variant to construct.
        anthropic_api_key: Credential for the Claude provider.
        anthropic_model: Claude model identifier.
        max_tokens: Upper bound on generated tokens per request.
        ollama_host: Base URL of the local Ollama daemon.
        ollama_model: Model name installed in the Ollama daemon.
        timeout: Per-request timeout in seconds.
    """

    provider: ProviderKind
    anthropic_api_key: str | None = None
    anthropic_model: str = DEFAULT_CLAUDE_MODEL
    max_tokens: int = DEFAULT_MAX_TOKENS
    ollama_host: str = DEFAULT_OLLAMA_HOST
    ollama_model: str = DEFAULT_OLLAMA_MODEL
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if not math.isfinite(self.timeout) or self.timeout <= 0:
            raise ConfigurationError(
                f"Timeout must be a positive number of seconds, got {self.timeout}"
            )
        if self.max_tokens <= 0:
            raise ConfigurationError(
                f"max_tokens must be positive, got {self.max_tokens}"
            )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ProviderConfig:
        """Build a configuration from environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            A validated ``ProviderConfig``.

        Raises:
            ConfigurationError: If ``AI_PROVIDER`` is missing or unknown,
                or ``TYR_TIMEOUT`` is not a positive number.
        """
        env = os.environ if environ is None else environ

        selector = env.get("AI_PROVIDER", "").strip()
        if not selector:
            raise ConfigurationError(
                "AI_PROVIDER is not set. Choose one of: "
                + ", ".join(k.value for k in ProviderKind)
            )

        return cls(
            provider=ProviderKind.parse(selector),
            anthropic_api_key=env.get("ANTHROPIC_API_KEY") or None,
            anthropic_model=env.get("TYR_CLAUDE_MODEL") or DEFAULT_CLAUDE_MODEL,
            ollama_host=(env.get("OLLAMA_HOST") or DEFAULT_OLLAMA_HOST).rstrip("/"),
            ollama_model=env.get("OLLAMA_MODEL") or DEFAULT_OLLAMA_MODEL,
            timeout=_parse_timeout(env.get("TYR_TIMEOUT")),
        )

    def with_overrides(self, **changes: object) -> ProviderConfig:
        """Return a copy with the given fields replaced.

        ``None`` values are ignored so that unset CLI flags leave the
        environment-derived value in place.
        """
        effective = {k: v for k, v in changes.items() if v is not None}
        return replace(self, **effective)  # type: ignore[arg-type]

    def with_model(self, model: str | None) -> ProviderConfig:
        """Return a copy whose selected provider uses ``model``."""
        if self.provider is ProviderKind.CLAUDE:
            return self.with_overrides(anthropic_model=model)
        return self.with_overrides(ollama_model=model)


def _parse_timeout(raw: str | None) -> float:
    if raw is None or not raw.strip():
        return DEFAULT_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"TYR_TIMEOUT must be a number, got {raw!r}")
    if not math.isfinite(value) or value <= 0:
        raise ConfigurationError(
            f"TYR_TIMEOUT must be a positive number of seconds, got {raw!r}"
        )
    return value
