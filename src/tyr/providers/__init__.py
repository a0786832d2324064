"""Generative-text backends for threat analysis.

Exports:
    BackendProvider: Abstract interface shared by all backends.
    ClaudeProvider: Hosted Anthropic Claude (Messages API).
    OllamaProvider: Locally hosted model via the Ollama daemon.
    create_provider: Build the configured variant from a ``ProviderConfig``.
"""

from tyr.providers.base import BackendProvider
from tyr.providers.claude import ClaudeProvider
from tyr.providers.factory import create_provider
from tyr.providers.ollama import OllamaProvider

__all__ = [
    "BackendProvider",
    "ClaudeProvider",
    "OllamaProvider",
    "create_provider",
]
