"""Prompt construction for threat analysis and interactive chat.

The two backends share no native structured-output mechanism, so this
module is the only place where the expected JSON schema is stated to the
model. The parser treats that schema as expected but unverified.

Both providers build their prompts from the same pieces:

- ``analysis_system_prompt`` -- role, STRIDE taxonomy, JSON schema, rules.
- ``analysis_user_prompt``   -- the document to analyze.
- ``build_analysis_prompt``  -- both joined into one text (local backend).
- ``build_interactive_prompt`` / ``build_chat_messages`` -- chat history as
  a flat transcript (local backend) or as role-tagged messages (remote).
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from tyr.core.models import InputType, RiskLevel, StrideCategory

if TYPE_CHECKING:
    from tyr.core.session import ChatMessage

_ROLE_PREAMBLE = (
    "You are an expert security architect and threat modeling specialist. "
    "Your role is to analyze system architectures, infrastructure code, and "
    "API specifications to identify security threats using the STRIDE "
    "methodology."
)

_STRIDE_SECTION = """STRIDE Categories:
- Spoofing: Identity theft, authentication bypass
- Tampering: Data modification, code injection
- Repudiation: Denying actions, lack of audit trails
- Information Disclosure: Data leaks, unauthorized access
- Denial of Service: Resource exhaustion, availability attacks
- Elevation of Privilege: Unauthorized access escalation"""

_FIELDS_SECTION = """For each threat you identify, provide:

1. **Threat Title**: Clear, concise name
2. **STRIDE Category**: Which category it falls under
3. **Risk Level**: Critical, High, Medium, or Low
4. **Description**: What the threat is and why it matters
5. **Attack Path**: Step-by-step how an attacker could exploit this
6. **Impact**: What damage could result
7. **Affected Components**: Which parts of the system are vulnerable
8. **Mitigations**: Specific countermeasures (with effort and effectiveness ratings)"""

_EDUCATION_FIELD = (
    ',\n      "educational_note": "Detailed explanation of why this threat '
    "matters in real-world scenarios, including examples and common "
    'mistakes"'
)

_RULES_SECTION = """IMPORTANT RULES:
1. Respond with ONLY the JSON object, no markdown code blocks, no explanations
2. Do not include ```json or ``` markers
3. Give every threat a unique id (T001, T002, ...)
4. Use exactly the category and risk_level spellings shown in the schema
5. Be thorough but focus on realistic, high-impact threats
6. Prioritize vulnerabilities that are commonly exploited or have severe consequences"""

CHAT_SYSTEM_PROMPT = """You are a security expert helping with threat modeling. Provide clear, actionable security advice.

When discussing threats:
- Be specific and practical
- Reference STRIDE categories where relevant
- Suggest concrete mitigations
- Explain in plain language
- Use real-world examples when helpful"""


def _schema_block(include_education: bool) -> str:
    categories = "|".join(c.value for c in StrideCategory.known())
    levels = "|".join(level.label for level in RiskLevel.known())
    education = _EDUCATION_FIELD if include_education else ""
    return (
        "{\n"
        '  "threats": [\n'
        "    {\n"
        '      "id": "T001",\n'
        '      "title": "...",\n'
        f'      "category": "{categories}",\n'
        f'      "risk_level": "{levels}",\n'
        '      "description": "...",\n'
        '      "impact": "...",\n'
        '      "attack_path": ["step1", "step2", ...],\n'
        '      "affected_components": ["component1", ...],\n'
        '      "mitigations": [\n'
        "        {\n"
        '          "title": "...",\n'
        '          "description": "...",\n'
        '          "effort": "Low|Medium|High",\n'
        '          "effectiveness": "Partial|High|Complete"\n'
        "        }\n"
        f"      ]{education}\n"
        "    }\n"
        "  ],\n"
        '  "overall_risk_score": 0-100,\n'
        '  "recommendations": ["overall recommendation 1", ...]\n'
        "}"
    )


def analysis_system_prompt(include_education: bool) -> str:
    """Return the instruction block that fixes the output schema.

    Args:
        include_education: Whether to request an ``educational_note`` per
            threat.
    """
    return "\n\n".join([
        _ROLE_PREAMBLE,
        _STRIDE_SECTION,
        _FIELDS_SECTION,
        "You MUST respond with ONLY valid JSON in this EXACT format:\n"
        + _schema_block(include_education),
        _RULES_SECTION,
    ])


def analysis_user_prompt(content: str, input_type: InputType) -> str:
    """Return the user request wrapping the document under analysis."""
    return (
        f"Analyze the following {input_type.description} for security "
        f"threats:\n\n{content}"
    )


def build_analysis_prompt(
    content: str,
    input_type: InputType,
    include_education: bool,
) -> str:
    """Build the complete single-text analysis prompt.

    Args:
        content: The document to analyze.
        input_type: What kind of document it is.
        include_education: Whether to request educational notes.

    Returns:
        System instructions followed by the user request.
    """
    return (
        analysis_system_prompt(include_education)
        + "\n\n"
        + analysis_user_prompt(content, input_type)
    )


def build_interactive_prompt(query: str, history: Sequence[ChatMessage]) -> str:
    """Flatten the conversation into a linear transcript prompt.

    No summarization or truncation is applied; keeping the history within
    the model's context window is the caller's concern.

    Args:
        query: The new user question.
        history: Prior messages, oldest first.

    Returns:
        Chat system prompt, the transcript, and a trailing ``Assistant:``.
    """
    lines = [CHAT_SYSTEM_PROMPT, ""]
    for message in history:
        speaker = "User" if message.role == "user" else "Assistant"
        lines.append(f"{speaker}: {message.content}\n")
    lines.append(f"User: {query}\n")
    lines.append("Assistant:")
    return "\n".join(lines)


def build_chat_messages(
    query: str,
    history: Sequence[ChatMessage],
) -> list[dict[str, str]]:
    """Convert history plus the new query into role-tagged messages.

    Consecutive messages from the same role are merged so the result
    always alternates and starts with a user turn.
    """
    messages: list[dict[str, str]] = []
    for role, content in [(m.role, m.content) for m in history] + [("user", query)]:
        if messages and messages[-1]["role"] == role:
            messages[-1]["content"] += "\n\n" + content
        elif not messages and role != "user":
            # A conversation cannot open with an assistant turn
            continue
        else:
            messages.append({"role": role, "content": content})
    return messages
