"""Prompt loader and variable substitution for agent system prompts.

Templates are Markdown files in this directory containing ``{{name}}``
placeholders. Rendering is purely textual: every placeholder is
replaced in a single pass, so substituted values are never re-scanned
for placeholders of their own.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from functools import lru_cache
from pathlib import Path
from typing import Any

from src.agents.registry import AgentType

PROMPT_DIR = Path(__file__).parent

PLACEHOLDER_RE = re.compile(r"\{\{([A-Za-z0-9_.\-]+)\}\}")

# Reserved placeholder pointing at the governance document
CONSTITUTION_PLACEHOLDER = "constitution_file"
CONSTITUTION_PHRASE = "the project constitution"
CONSTITUTION_DELIMITER = "\n\n---\nProject Constitution:\n"

# Agent type -> prompt file name mapping
_AGENT_PROMPT_MAP: dict[AgentType, str] = {
    AgentType.DECISION_AUTHOR: "decision_author_system",
    AgentType.ANALYST: "analyst_system",
    AgentType.ARCHITECT: "architect_system",
    AgentType.SCRUM_MASTER: "scrum_master_system",
    AgentType.DEVELOPER: "developer_system",
}

VALIDATION_PROMPT = "validation_review"
DECISION_FRAMEWORK_PROMPT = "decision_framework"


def unspecified(key: str) -> str:
    """Sentinel text for a placeholder that received no value."""
    return f"[{key} not specified]"


@lru_cache(maxsize=32)
def _load_raw(name: str) -> str:
    """Load raw prompt template from disk (cached).

    Raises:
        FileNotFoundError: If prompt file doesn't exist
    """
    path = PROMPT_DIR / f"{name}.md"
    if not path.exists():
        raise FileNotFoundError(f"Prompt template not found: {name}.md")
    return path.read_text(encoding="utf-8").rstrip()


def load_prompt(name: str) -> str:
    """Load a named prompt template without rendering it."""
    return _load_raw(name)


def get_template(agent_type: AgentType | str) -> str:
    """Return the raw system prompt template for an agent."""
    return _load_raw(_AGENT_PROMPT_MAP[AgentType(agent_type)])


def find_placeholders(template: str) -> list[str]:
    """Placeholder names in order of first appearance."""
    seen: dict[str, None] = {}
    for match in PLACEHOLDER_RE.finditer(template):
        seen.setdefault(match.group(1), None)
    return list(seen)


def _as_values(variables: Iterable[Any] | Mapping[str, str] | None) -> dict[str, str]:
    """Collapse variables into a key -> value dict; later keys win.

    Accepts a mapping, or an iterable of ContextVariable models / dicts
    with ``key`` and ``value``.
    """
    if variables is None:
        return {}
    if isinstance(variables, Mapping):
        return {str(k): "" if v is None else str(v) for k, v in variables.items()}

    values: dict[str, str] = {}
    for var in variables:
        if isinstance(var, Mapping):
            key, value = var.get("key"), var.get("value")
        else:
            key, value = getattr(var, "key", None), getattr(var, "value", None)
        if key is None:
            continue
        values[str(key)] = "" if value is None else str(value)
    return values


def render_template(
    template: str,
    variables: Iterable[Any] | Mapping[str, str] | None = None,
    constitution: str | None = None,
) -> str:
    """Substitute variables into a template.

    For each ``{{key}}`` in the template:
    1. a supplied, non-empty value replaces it;
    2. otherwise, if a constitution is supplied, ``{{constitution_file}}``
       becomes CONSTITUTION_PHRASE;
    3. otherwise the unspecified() sentinel is used.

    A non-empty constitution is then appended after the rendered text.
    Supplied keys with no matching placeholder are ignored.
    """
    values = _as_values(variables)

    def _replace(match: re.Match[str]) -> str:
        key = match.group(1)
        value = values.get(key)
        if value:
            return value
        if constitution and key == CONSTITUTION_PLACEHOLDER:
            return CONSTITUTION_PHRASE
        return unspecified(key)

    rendered = PLACEHOLDER_RE.sub(_replace, template)

    if constitution:
        rendered = f"{rendered}{CONSTITUTION_DELIMITER}{constitution}"

    return rendered


def fill_template(template: str, values: Mapping[str, Any]) -> str:
    """Substitute values verbatim, empty ones included.

    Used for the internal review templates, where the placeholders carry
    data (document text, questionnaire answers) rather than user-facing
    context. Placeholders without a value become empty strings.
    """
    strings = _as_values(values)
    return PLACEHOLDER_RE.sub(lambda match: strings.get(match.group(1), ""), template)


def render_prompt(
    agent_type: AgentType | str,
    variables: Iterable[Any] | Mapping[str, str] | None = None,
    constitution: str | None = None,
) -> str:
    """Render an agent's system prompt.

    Args:
        agent_type: One of the five agents
        variables: Context variables (models, dicts, or a key->value mapping)
        constitution: Governance document to append; empty/None skips it

    Returns:
        Fully rendered prompt text
    """
    return render_template(get_template(agent_type), variables, constitution)


__all__ = [
    "CONSTITUTION_DELIMITER",
    "CONSTITUTION_PHRASE",
    "CONSTITUTION_PLACEHOLDER",
    "DECISION_FRAMEWORK_PROMPT",
    "PLACEHOLDER_RE",
    "VALIDATION_PROMPT",
    "fill_template",
    "find_placeholders",
    "get_template",
    "load_prompt",
    "render_prompt",
    "render_template",
    "unspecified",
]
