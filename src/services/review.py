"""Structured, non-streaming LLM reviews.

Document quality validation and decision-framework recommendation.
Both make a single JSON-mode call and return a StructuredResult; a
malformed response is reported as a failed parse, never raised.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import SystemMessage
from sqlalchemy.ext.asyncio import AsyncSession

from src.agents.prompts import (
    DECISION_FRAMEWORK_PROMPT,
    VALIDATION_PROMPT,
    fill_template,
    load_prompt,
)
from src.dal.app_settings import AppSettingsRepository
from src.dal.documents import DocumentRepository
from src.exceptions import LLMError, NotFoundError
from src.llm import get_llm, message_text
from src.schema import StructuredResult, parse_structured

logger = logging.getLogger(__name__)


def constitution_section(constitution: str) -> str:
    """Constitution block for the validation prompt."""
    if constitution:
        return f"Constitutional Standards:\n{constitution}"
    return "Constitutional Standards: none defined"


def format_characteristics(answers: Mapping[str, Any]) -> str:
    """Render questionnaire answers as "- key: value" lines."""
    return "\n".join(f"- {key}: {value}" for key, value in answers.items())


class ReviewService:
    """LLM-backed document validation and framework recommendation."""

    def __init__(
        self,
        session: AsyncSession,
        llm_factory: Callable[..., BaseChatModel] = get_llm,
    ):
        self.session = session
        self._llm_factory = llm_factory

    async def validate_document(self, document_id: str) -> StructuredResult:
        """Score a document against the review rubric and the constitution.

        Raises:
            NotFoundError: If the document does not exist
            LLMError: If the provider call fails
        """
        document = await DocumentRepository(self.session).get_by_id(document_id)
        if document is None:
            raise NotFoundError(f"Document {document_id} not found", resource="document")

        constitution = await AppSettingsRepository(self.session).get_constitution()
        prompt = fill_template(
            load_prompt(VALIDATION_PROMPT),
            {
                "title": document.title,
                "output_type": document.output_type,
                "agent_type": document.agent_type,
                "content": document.content,
                "constitution_section": constitution_section(constitution),
            },
        )
        return await self._ask(prompt, purpose="validation")

    async def recommend_framework(self, answers: Mapping[str, Any]) -> StructuredResult:
        """Recommend SDDD tools for the described project.

        Raises:
            LLMError: If the provider call fails
        """
        prompt = fill_template(
            load_prompt(DECISION_FRAMEWORK_PROMPT),
            {"project_characteristics": format_characteristics(answers)},
        )
        return await self._ask(prompt, purpose="recommendation")

    async def _ask(self, prompt: str, purpose: str) -> StructuredResult:
        try:
            llm = self._llm_factory(json_mode=True)
            response = await llm.ainvoke([SystemMessage(content=prompt)])
        except Exception as e:
            raise LLMError(f"LLM {purpose} call failed: {e}") from e

        result = parse_structured(message_text(response.content))
        if not result.ok:
            logger.warning("Unparseable %s response: %s", purpose, result.reason)
        return result
