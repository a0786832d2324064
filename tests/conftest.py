"""Shared fixtures for Tyr tests.

Provides a canned, well-formed backend response and a scriptable fake
provider so that no test touches the network.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from typing import Any

import pytest

from tyr.core.models import InputType
from tyr.providers.base import BackendProvider


class FakeProvider(BackendProvider):
    """Provider that answers from a script instead of a model.

    ``analysis`` is either a fixed reply, an exception to raise, or a
    callable receiving the document content and returning either.
    ``chat`` works the same way for interactive queries.
    """

    def __init__(
        self,
        analysis: Any = "",
        chat: Any = "ok",
    ) -> None:
        self._analysis = analysis
        self._chat = chat
        self.analysis_calls: list[tuple[str, InputType, bool]] = []
        self.chat_calls: list[tuple[str, tuple]] = []
        self.availability_checks = 0

    @property
    def name(self) -> str:
        return "Fake"

    @property
    def model(self) -> str:
        return "fake-model"

    @staticmethod
    def _answer(script: Any, arg: str) -> str:
        outcome = script(arg) if callable(script) and not isinstance(script, type) else script
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def analyze_threats(
        self, content: str, input_type: InputType, include_education: bool
    ) -> str:
        self.analysis_calls.append((content, input_type, include_education))
        return self._answer(self._analysis, content)

    async def interactive_query(self, query: str, history: Sequence[Any]) -> str:
        self.chat_calls.append((query, tuple(history)))
        return self._answer(self._chat, query)

    async def check_available(self) -> None:
        self.availability_checks += 1


@pytest.fixture
def sample_response() -> dict[str, Any]:
    """A well-formed backend answer with three threats and every field."""
    return {
        "threats": [
            {
                "id": "T001",
                "title": "Stolen session tokens",
                "category": "Spoofing",
                "risk_level": "Critical",
                "description": "Session tokens are sent over plain HTTP.",
                "impact": "Account takeover",
                "attack_path": ["Sniff traffic", "Replay token"],
                "affected_components": ["web", "api"],
                "mitigations": [
                    {
                        "title": "Enforce TLS",
                        "description": "Redirect HTTP to HTTPS and set HSTS.",
                        "effort": "Low",
                        "effectiveness": "High",
                    }
                ],
                "educational_note": "Bearer tokens grant access to whoever holds them.",
            },
            {
                "id": "T002",
                "title": "Unsigned audit log",
                "category": "Repudiation",
                "risk_level": "High",
                "description": "Admins can edit the audit log.",
            },
            {
                "id": "T003",
                "title": "Unbounded uploads",
                "category": "DenialOfService",
                "risk_level": "Medium",
                "description": "No size limit on uploads.",
                "mitigations": [],
            },
        ],
        "overall_risk_score": 62,
        "recommendations": ["Adopt TLS everywhere", "Ship logs to WORM storage"],
    }


@pytest.fixture
def sample_response_text(sample_response: dict[str, Any]) -> str:
    return json.dumps(sample_response, indent=2)


@pytest.fixture
def make_provider() -> Callable[..., FakeProvider]:
    """Factory for ``FakeProvider`` instances."""
    return FakeProvider
