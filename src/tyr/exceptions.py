"""Tyr exception hierarchy.

All public exceptions inherit from TyrError, giving callers a single base
class to catch when they want to handle any Tyr-specific failure without
swallowing unrelated errors.

Two families matter to callers:

- ``ConfigurationError`` and ``AuthError`` raised while building a
  provider are fatal at startup: no analysis can succeed afterwards.
- Every other ``AnalysisError`` is scoped to the operation that raised it
  (one file of a batch, one chat turn) and is safe to report and move on.
"""

from __future__ import annotations


class TyrError(Exception):
    """Base exception for all Tyr errors."""


class ConfigurationError(TyrError):
    """Raised when the provider selection or a required setting is invalid.

    Covers a missing or unknown ``AI_PROVIDER`` value and malformed
    numeric settings such as the request timeout.
    """


class AnalysisError(TyrError):
    """Base class for errors scoped to a single analysis or chat turn."""


class InvalidInputError(AnalysisError):
    """Raised when the content submitted for analysis is unusable.

    Covers empty documents and whitespace-only queries.
    """


class ProviderError(AnalysisError):
    """Raised when a backend provider request fails.

    Attributes:
        provider: Human-readable name of the provider that failed.
    """

    def __init__(self, message: str, provider: str = "") -> None:
        self.provider = provider
        super().__init__(message)


class AuthError(ProviderError):
    """Raised for a missing, malformed or rejected credential.

    Detected at construction time when the key is absent, and per call
    when the backend answers 401/403.
    """


class ProviderUnavailable(ProviderError):
    """Raised when the backend cannot be reached or cannot serve the model.

    Covers refused connections, DNS failures, and a local daemon that does
    not have the configured model installed.
    """


class ProviderTimeout(ProviderError):
    """Raised when a single backend request exceeds its time budget."""


class ParseError(AnalysisError):
    """Raised when backend output cannot be turned into an analysis result."""


class MalformedResponseError(ParseError):
    """Raised when no usable JSON structure is present in the response.

    Either no balanced JSON object could be found, or the object carries
    no ``threats`` array. There is no meaningful partial data to keep.

    Attributes:
        excerpt: The first characters of the offending response, for logs.
    """

    def __init__(self, message: str, excerpt: str = "") -> None:
        self.excerpt = excerpt
        super().__init__(message)
