"""Core schema models.

Provides the ContextVariable model used for prompt rendering and the
StructuredResult wrapper for JSON responses from the LLM.
"""

from __future__ import annotations

import json
import re
from typing import Any

from pydantic import BaseModel, Field

# Some models wrap JSON in a fenced code block even in JSON mode
_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)

# =============================================================================
# MODELS
# =============================================================================


class ContextVariable(BaseModel):
    """A named, user-supplied value substituted into a prompt template.

    Attributes:
        key: Placeholder name (free-form, uniqueness not enforced).
        value: Replacement text. Empty means "not specified".
        description: Optional hint shown to the user.
    """

    key: str = Field(max_length=200)
    value: str = Field(default="", max_length=50_000)
    description: str | None = Field(default=None, max_length=1000)


class StructuredResult(BaseModel):
    """Outcome of parsing a structured (JSON) LLM response.

    Attributes:
        ok: Whether the response parsed into a JSON object.
        data: Parsed object; empty when parsing failed.
        reason: Why parsing failed (None on success).
    """

    ok: bool
    data: dict[str, Any] = Field(default_factory=dict)
    reason: str | None = None

    @classmethod
    def success(cls, data: dict[str, Any]) -> StructuredResult:
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, reason: str) -> StructuredResult:
        return cls(ok=False, data={}, reason=reason)


# =============================================================================
# PARSING
# =============================================================================


def parse_structured(text: str | None) -> StructuredResult:
    """Parse raw LLM output into a StructuredResult.

    Never raises. Empty output, invalid JSON and JSON that is not an
    object all become failures with an empty ``data`` dict.
    """
    if not text or not text.strip():
        return StructuredResult.failure("empty response")

    candidate = text.strip()
    fenced = _FENCE_RE.match(candidate)
    if fenced:
        candidate = fenced.group(1)

    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as e:
        return StructuredResult.failure(f"invalid JSON: {e.msg} at position {e.pos}")

    if not isinstance(parsed, dict):
        return StructuredResult.failure(f"expected a JSON object, got {type(parsed).__name__}")

    return StructuredResult.success(parsed)
