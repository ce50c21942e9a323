"""Workflow CRUD and execution API.

A workflow carries the context variables for the agent pipeline and
the documents each run produced. Executing a workflow runs its current
agent and streams the output as server-sent events.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request, Response
from fastapi.responses import StreamingResponse

from src.api.rate_limit import LLM_LIMIT, limiter
from src.api.schemas import (
    DocumentResponse,
    WorkflowCreate,
    WorkflowResponse,
    WorkflowUpdate,
)
from src.api.streaming import sse_response
from src.dal import DocumentRepository, WorkflowRepository
from src.services.executor import WorkflowExecutor
from src.storage import get_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workflows", tags=["Workflows"])


@router.get("", response_model=list[WorkflowResponse])
async def list_workflows() -> list[WorkflowResponse]:
    """List workflows, newest first."""
    async with get_session() as session:
        workflows = await WorkflowRepository(session).list_all()
        return [WorkflowResponse.model_validate(w) for w in workflows]


@router.post("", response_model=WorkflowResponse, status_code=201)
async def create_workflow(body: WorkflowCreate) -> WorkflowResponse:
    """Create a draft workflow seeded with the starting agent's defaults."""
    async with get_session() as session:
        workflow = await WorkflowRepository(session).create(
            name=body.name,
            description=body.description,
            starting_agent=body.starting_agent,
        )
        await session.commit()
        logger.info("Created workflow %s (%s)", workflow.id, workflow.name)
        return WorkflowResponse.model_validate(workflow)


@router.get("/{workflow_id}", response_model=WorkflowResponse)
async def get_workflow(workflow_id: str) -> WorkflowResponse:
    """Get a workflow by ID."""
    async with get_session() as session:
        workflow = await WorkflowRepository(session).get_by_id(workflow_id)
        if workflow is None:
            raise HTTPException(status_code=404, detail="Workflow not found")
        return WorkflowResponse.model_validate(workflow)


@router.patch("/{workflow_id}", response_model=WorkflowResponse)
async def update_workflow(workflow_id: str, body: WorkflowUpdate) -> WorkflowResponse:
    """Partially update a workflow. Status is managed by execution only."""
    changes = body.model_dump(exclude_unset=True, mode="json")
    async with get_session() as session:
        workflow = await WorkflowRepository(session).update(workflow_id, changes)
        if workflow is None:
            raise HTTPException(status_code=404, detail="Workflow not found")
        await session.commit()
        return WorkflowResponse.model_validate(workflow)


@router.delete("/{workflow_id}", status_code=204)
async def delete_workflow(workflow_id: str) -> Response:
    """Delete a workflow with its documents and their versions."""
    async with get_session() as session:
        deleted = await WorkflowRepository(session).delete(workflow_id)
        if not deleted:
            raise HTTPException(status_code=404, detail="Workflow not found")
        await session.commit()
    logger.info("Deleted workflow %s", workflow_id)
    return Response(status_code=204)


@router.post("/{workflow_id}/duplicate", response_model=WorkflowResponse, status_code=201)
async def duplicate_workflow(workflow_id: str) -> WorkflowResponse:
    """Copy a workflow's configuration into a new draft."""
    async with get_session() as session:
        workflow = await WorkflowRepository(session).duplicate(workflow_id)
        if workflow is None:
            raise HTTPException(status_code=404, detail="Workflow not found")
        await session.commit()
        return WorkflowResponse.model_validate(workflow)


@router.get("/{workflow_id}/documents", response_model=list[DocumentResponse])
async def list_workflow_documents(workflow_id: str) -> list[DocumentResponse]:
    """Documents generated for a workflow, newest first."""
    async with get_session() as session:
        documents = await DocumentRepository(session).list_by_workflow(workflow_id)
        return [DocumentResponse.model_validate(d) for d in documents]


@router.post("/{workflow_id}/execute", response_model=None)
@limiter.limit(LLM_LIMIT)
async def execute_workflow(request: Request, workflow_id: str) -> StreamingResponse:
    """Run the workflow's current agent and stream the output.

    Returns 404 for an unknown workflow and 409 while the workflow is
    already running; both are decided before streaming starts.

    Rate limited to 10/minute (LLM-backed).
    """
    executor = WorkflowExecutor()
    run = await executor.prepare_workflow(workflow_id)
    return sse_response(executor, run)
