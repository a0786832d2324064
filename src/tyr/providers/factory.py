"""Construct the configured backend provider."""

from __future__ import annotations

import logging

from tyr.config import ProviderConfig, ProviderKind
from tyr.exceptions import ConfigurationError
from tyr.providers.base import BackendProvider
from tyr.providers.claude import ClaudeProvider
from tyr.providers.ollama import OllamaProvider

logger = logging.getLogger(__name__)


def create_provider(config: ProviderConfig) -> BackendProvider:
    """Build the provider variant selected by ``config.provider``.

    The choice is made once here; callers only ever see the
    ``BackendProvider`` interface.

    Raises:
        AuthError: If the Claude provider is selected without a usable key.
        ConfigurationError: If the provider kind is not supported.
    """
    if config.provider is ProviderKind.CLAUDE:
        provider: BackendProvider = ClaudeProvider(config)
    elif config.provider is ProviderKind.OLLAMA:
        provider = OllamaProvider(config)
    else:
        raise ConfigurationError(f"Unsupported provider: {config.provider!r}")

    logger.info("Using %s provider (model %s)", provider.name, provider.model)
    return provider
