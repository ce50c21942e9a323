"""Workflow API schemas."""

from datetime import datetime

from pydantic import Field

from src.agents.registry import AgentType
from src.api.schemas.common import CamelModel
from src.schema import ContextVariable


class WorkflowCreate(CamelModel):
    """Schema for creating a workflow."""

    name: str = Field(min_length=1, max_length=100, description="Workflow name")
    description: str | None = Field(default=None, max_length=500, description="Description")
    starting_agent: AgentType = Field(
        default=AgentType.ANALYST,
        description="Agent the first execution runs; its defaults seed the variables",
    )


class WorkflowUpdate(CamelModel):
    """Partial update. Status is not writable."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    current_agent: AgentType | None = Field(default=None, description="Agent for the next run")
    context_variables: list[ContextVariable] | None = Field(
        default=None,
        description="Replaces the full variable list",
    )
    constitution_content: str | None = Field(default=None, max_length=200_000)


class WorkflowResponse(CamelModel):
    """Schema for workflow response."""

    id: str = Field(description="Workflow UUID")
    name: str
    description: str | None = None
    status: str = Field(description="draft, in_progress, completed or error")
    current_agent: str | None = None
    context_variables: list[ContextVariable] = Field(default_factory=list)
    constitution_content: str | None = None
    created_at: datetime
    updated_at: datetime


class StatsResponse(CamelModel):
    """Dashboard counters."""

    total_workflows: int
    completed_workflows: int
    documents_generated: int
