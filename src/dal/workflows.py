"""Workflow repository.

CRUD for workflows plus the guarded status transition used by the
executor. Status is never written through ``update``.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

from sqlalchemy import func, select

from src.agents.registry import AgentType, get_default_variables
from src.dal.base import BaseRepository
from src.exceptions import InvalidTransitionError, NotFoundError
from src.storage.entities.document import Document
from src.storage.entities.workflow import (
    VALID_WORKFLOW_TRANSITIONS,
    Workflow,
    WorkflowStatus,
)

logger = logging.getLogger(__name__)

# Fields a caller may change through update()
UPDATABLE_FIELDS = frozenset(
    {"name", "description", "current_agent", "context_variables", "constitution_content"}
)
# Fields that may be cleared with None
NULLABLE_FIELDS = frozenset({"description", "constitution_content"})


def is_stale(workflow: Workflow, stale_after: timedelta, now: datetime | None = None) -> bool:
    """True if an ``in_progress`` workflow has not been touched for ``stale_after``."""
    if workflow.status != WorkflowStatus.IN_PROGRESS.value or workflow.updated_at is None:
        return False
    return workflow.updated_at <= (now or datetime.now(UTC)) - stale_after


def check_transition(
    workflow: Workflow,
    target: WorkflowStatus,
    stale_after: timedelta | None = None,
) -> None:
    """Raise InvalidTransitionError unless ``workflow`` may move to ``target``.

    A run whose stream never settled leaves the workflow ``in_progress``;
    once it is stale it may be started again.
    """
    if workflow.can_transition_to(target):
        return
    if (
        target is WorkflowStatus.IN_PROGRESS
        and stale_after is not None
        and is_stale(workflow, stale_after)
    ):
        logger.warning("Workflow %s: restarting stale run", workflow.id)
        return

    current = WorkflowStatus(workflow.status)
    allowed = ", ".join(s.value for s in VALID_WORKFLOW_TRANSITIONS.get(current, set()))
    raise InvalidTransitionError(
        f"Invalid status transition: {current.value} -> {target.value}. "
        f"Allowed: {allowed or 'none'}",
        current=current.value,
        target=target.value,
    )


class WorkflowRepository(BaseRepository[Workflow]):
    """Repository for Workflow CRUD and status transitions."""

    model = Workflow

    async def create(
        self,
        name: str,
        description: str | None = None,
        starting_agent: AgentType | str = AgentType.ANALYST,
        context_variables: list[dict[str, Any]] | None = None,
        constitution_content: str | None = None,
    ) -> Workflow:
        """Create a draft workflow.

        Args:
            name: Display name
            description: Optional description
            starting_agent: Agent the first execution will run
            context_variables: Initial variables; seeded from the starting
                agent's defaults when omitted
            constitution_content: Optional constitution snapshot

        Returns:
            Created workflow
        """
        agent = AgentType(starting_agent)
        if context_variables is None:
            context_variables = get_default_variables(agent)

        workflow = Workflow(
            id=str(uuid4()),
            name=name,
            description=description,
            status=WorkflowStatus.DRAFT.value,
            current_agent=agent.value,
            context_variables=context_variables,
            constitution_content=constitution_content,
        )
        self.session.add(workflow)
        await self.session.flush()
        return workflow

    async def update(self, workflow_id: str, changes: dict[str, Any]) -> Workflow | None:
        """Apply a partial update.

        Unknown keys and ``status`` are ignored, as is None for a
        required field.

        Returns:
            Updated workflow, or None if not found
        """
        workflow = await self.get_by_id(workflow_id)
        if workflow is None:
            return None

        for key, value in changes.items():
            if key not in UPDATABLE_FIELDS:
                continue
            if value is None and key not in NULLABLE_FIELDS:
                continue
            setattr(workflow, key, value)
        workflow.updated_at = datetime.now(UTC)
        await self.session.flush()
        return workflow

    async def duplicate(self, workflow_id: str) -> Workflow | None:
        """Copy a workflow's configuration into a new draft.

        Documents are not copied.

        Returns:
            The copy named "<name> (Copy)", or None if not found
        """
        source = await self.get_by_id(workflow_id)
        if source is None:
            return None

        copy = Workflow(
            id=str(uuid4()),
            name=f"{source.name} (Copy)",
            description=source.description,
            status=WorkflowStatus.DRAFT.value,
            current_agent=source.current_agent,
            context_variables=[dict(v) for v in source.context_variables or []],
            constitution_content=source.constitution_content,
        )
        self.session.add(copy)
        await self.session.flush()
        return copy

    async def transition(
        self,
        workflow_id: str,
        target: WorkflowStatus,
        stale_after: timedelta | None = None,
    ) -> Workflow:
        """Move a workflow to a new status.

        The row is read with ``SELECT ... FOR UPDATE`` so two concurrent
        transitions out of the same status cannot both succeed.

        Args:
            workflow_id: Workflow to move
            target: New status
            stale_after: When set, an ``in_progress`` workflow untouched
                for this long may be started again

        Raises:
            NotFoundError: If the workflow does not exist
            InvalidTransitionError: If the state machine forbids the move
        """
        result = await self.session.execute(
            select(Workflow)
            .where(Workflow.id == workflow_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        workflow = result.scalar_one_or_none()
        if workflow is None:
            raise NotFoundError(f"Workflow {workflow_id} not found", resource="workflow")

        check_transition(workflow, target, stale_after=stale_after)

        logger.debug("Workflow %s: %s -> %s", workflow_id, workflow.status, target.value)
        workflow.status = target.value
        workflow.updated_at = datetime.now(UTC)
        await self.session.flush()
        return workflow

    async def stats(self) -> dict[str, int]:
        """Dashboard counters.

        Returns:
            Dict with total_workflows, completed_workflows, documents_generated
        """
        total = await self.count()
        completed = await self.count(status=WorkflowStatus.COMPLETED.value)
        result = await self.session.execute(select(func.count(Document.id)))
        documents = result.scalar() or 0
        return {
            "total_workflows": total,
            "completed_workflows": completed,
            "documents_generated": documents,
        }
