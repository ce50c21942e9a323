"""Agent catalog and standalone execution API.

The five pipeline agents are static. A standalone execution renders
the agent's prompt with the supplied variables and streams the output;
the resulting document is not attached to any workflow.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import StreamingResponse

from src.agents.registry import AGENT_REGISTRY, PIPELINE, get_agent_info
from src.api.rate_limit import LLM_LIMIT, limiter
from src.api.schemas import AgentExecuteRequest, AgentResponse
from src.api.streaming import sse_response
from src.exceptions import AgentError
from src.services.executor import WorkflowExecutor

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/agents", tags=["Agents"])


@router.get("", response_model=list[AgentResponse])
async def list_agents() -> list[AgentResponse]:
    """List the agents in pipeline order."""
    return [AgentResponse.from_info(AGENT_REGISTRY[agent]) for agent in PIPELINE]


@router.get("/{agent_type}", response_model=AgentResponse)
async def get_agent(agent_type: str) -> AgentResponse:
    """Get one agent with its default context variables."""
    try:
        info = get_agent_info(agent_type)
    except AgentError as e:
        raise HTTPException(status_code=404, detail=f"Agent '{agent_type}' not found") from e
    return AgentResponse.from_info(info)


@router.post("/execute", response_model=None)
@limiter.limit(LLM_LIMIT)
async def execute_agent(request: Request, body: AgentExecuteRequest) -> StreamingResponse:
    """Run one agent outside any workflow and stream the output.

    Rate limited to 10/minute (LLM-backed).
    """
    executor = WorkflowExecutor()
    run = await executor.prepare_agent(body.agent_type, body.context_variables)
    logger.info("Standalone execution of %s", body.agent_type.value)
    return sse_response(executor, run)
