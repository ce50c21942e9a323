"""Agent execution: render, stream, persist.

Execution happens in two steps so that rejections surface as plain
HTTP errors before any bytes are streamed:

1. ``prepare_workflow`` / ``prepare_agent`` load the context, render
   the system prompt and, for workflows, check the workflow may start
   (raising NotFoundError / InvalidTransitionError).
2. ``run`` moves the workflow to ``in_progress``, relays the provider
   stream as events and persists the outcome.

Events are plain dicts, one of:
    {"stepIndex": int}
    {"content": str}
    {"done": True, "document": Document}
    {"error": str}
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable, Iterable
from contextlib import AbstractAsyncContextManager, aclosing
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from sqlalchemy.ext.asyncio import AsyncSession

from src.agents.prompts import render_prompt
from src.agents.registry import AgentType, get_output_type, pipeline_index
from src.dal.app_settings import AppSettingsRepository
from src.dal.documents import DocumentRepository
from src.dal.workflows import WorkflowRepository, check_transition
from src.exceptions import NotFoundError
from src.llm import get_llm, message_text
from src.settings import get_settings
from src.storage import get_session
from src.storage.entities.document import Document
from src.storage.entities.workflow import WorkflowStatus

logger = logging.getLogger(__name__)

USER_INSTRUCTION = (
    "Generate the specification document based on the provided context. "
    "Be thorough and professional."
)
GENERIC_ERROR = "Failed to generate content"

Event = dict[str, Any]
SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


@dataclass(frozen=True)
class ExecutionRun:
    """A prepared agent execution, ready to stream."""

    agent_type: AgentType
    system_prompt: str
    workflow_id: str | None = None


def _stale_after() -> timedelta:
    return timedelta(seconds=get_settings().execution_stale_after_seconds)


def document_title(agent_type: AgentType | str, now: datetime | None = None) -> str:
    """Title for a generated document: "<output type> - <YYYY-MM-DD>"."""
    day = (now or datetime.now(UTC)).date().isoformat()
    return f"{get_output_type(agent_type)} - {day}"


class WorkflowExecutor:
    """Runs one agent against the LLM and persists the document.

    Args:
        session_factory: Async context manager yielding a session
        llm_factory: Callable returning a chat model; receives ``max_tokens``
    """

    def __init__(
        self,
        session_factory: SessionFactory = get_session,
        llm_factory: Callable[..., BaseChatModel] = get_llm,
    ):
        self._session_factory = session_factory
        self._llm_factory = llm_factory

    # ─── Preparation ──────────────────────────────────────────────────────

    async def prepare_workflow(self, workflow_id: str) -> ExecutionRun:
        """Render the workflow's current agent and check it may start.

        Nothing is written here; ``run`` makes the move to ``in_progress``.

        Raises:
            NotFoundError: If the workflow does not exist
            InvalidTransitionError: If the workflow is already running
        """
        async with self._session_factory() as session:
            workflow = await WorkflowRepository(session).get_by_id(workflow_id)
            if workflow is None:
                raise NotFoundError(f"Workflow {workflow_id} not found", resource="workflow")
            check_transition(workflow, WorkflowStatus.IN_PROGRESS, stale_after=_stale_after())

            agent_type = AgentType(workflow.current_agent or AgentType.ANALYST)
            constitution = (
                workflow.constitution_content
                or await AppSettingsRepository(session).get_constitution()
            )
            prompt = render_prompt(agent_type, workflow.context_variables, constitution)

        logger.info("Workflow %s: executing %s", workflow_id, agent_type.value)
        return ExecutionRun(agent_type=agent_type, system_prompt=prompt, workflow_id=workflow_id)

    async def prepare_agent(
        self,
        agent_type: AgentType | str,
        variables: Iterable[Any] | None = None,
    ) -> ExecutionRun:
        """Render an agent's prompt for a standalone execution."""
        agent = AgentType(agent_type)
        async with self._session_factory() as session:
            constitution = await AppSettingsRepository(session).get_constitution()
        prompt = render_prompt(agent, variables, constitution)
        return ExecutionRun(agent_type=agent, system_prompt=prompt)

    # ─── Streaming ────────────────────────────────────────────────────────

    async def run(self, run: ExecutionRun) -> AsyncIterator[Event]:
        """Stream a prepared execution.

        A workflow-bound run first moves the workflow to ``in_progress``;
        if that fails (another run won the race) a single generic error
        event ends the stream and the workflow is left as it was.

        Chunks are relayed in provider order. On provider failure the
        workflow moves to ``error``, no document is written and a single
        generic error event ends the stream. If the consumer closes the
        stream early the workflow also moves to ``error``.
        """
        settled = False
        try:
            if run.workflow_id is not None:
                try:
                    await self._start(run.workflow_id)
                except Exception:
                    logger.exception("Could not start workflow %s", run.workflow_id)
                    settled = True
                    yield {"error": GENERIC_ERROR}
                    return
                yield {"stepIndex": pipeline_index(run.agent_type)}

            parts: list[str] = []
            try:
                llm = self._llm_factory(max_tokens=get_settings().llm_max_output_tokens)
                messages = [
                    SystemMessage(content=run.system_prompt),
                    HumanMessage(content=USER_INSTRUCTION),
                ]
                async for chunk in llm.astream(messages):
                    text = message_text(chunk.content)
                    if text:
                        parts.append(text)
                        yield {"content": text}

                document = await self._persist(run, "".join(parts))
            except Exception:
                logger.exception(
                    "Generation failed for %s (workflow=%s)",
                    run.agent_type.value,
                    run.workflow_id,
                )
                await self._mark_error(run.workflow_id)
                settled = True
                yield {"error": GENERIC_ERROR}
                return

            settled = True
            yield {"done": True, "document": document}
        finally:
            if not settled:
                logger.warning("Stream closed early (workflow=%s)", run.workflow_id)
                await asyncio.shield(self._mark_error(run.workflow_id))

    async def execute_workflow(self, workflow_id: str) -> AsyncIterator[Event]:
        """Prepare and stream the workflow's current agent."""
        run = await self.prepare_workflow(workflow_id)
        async with aclosing(self.run(run)) as events:
            async for event in events:
                yield event

    async def execute_agent(
        self,
        agent_type: AgentType | str,
        variables: Iterable[Any] | None = None,
    ) -> AsyncIterator[Event]:
        """Prepare and stream a standalone agent execution."""
        run = await self.prepare_agent(agent_type, variables)
        async with aclosing(self.run(run)) as events:
            async for event in events:
                yield event

    # ─── Persistence ──────────────────────────────────────────────────────

    async def _start(self, workflow_id: str) -> None:
        async with self._session_factory() as session:
            await WorkflowRepository(session).transition(
                workflow_id, WorkflowStatus.IN_PROGRESS, stale_after=_stale_after()
            )
            await session.commit()

    async def _persist(self, run: ExecutionRun, content: str) -> Document:
        """Create the document and complete the workflow in one commit."""
        async with self._session_factory() as session:
            document = await DocumentRepository(session).create(
                agent_type=run.agent_type.value,
                title=document_title(run.agent_type),
                content=content,
                output_type=get_output_type(run.agent_type),
                workflow_id=run.workflow_id,
            )
            if run.workflow_id is not None:
                await WorkflowRepository(session).transition(
                    run.workflow_id, WorkflowStatus.COMPLETED
                )
            await session.commit()
        logger.info("Generated document %s (%d chars)", document.id, len(content))
        return document

    async def _mark_error(self, workflow_id: str | None) -> None:
        if workflow_id is None:
            return
        try:
            async with self._session_factory() as session:
                await WorkflowRepository(session).transition(workflow_id, WorkflowStatus.ERROR)
                await session.commit()
        except Exception:
            logger.exception("Could not mark workflow %s as error", workflow_id)
