"""Common Pydantic schemas for API requests and responses.

Provides reusable schema definitions for consistent
API responses across all endpoints.
"""

from datetime import datetime, timezone
from enum import StrEnum

from pydantic import BaseModel, Field

from src.api.schemas.agents import (
    AgentExecuteRequest,
    AgentResponse,
    ConstitutionBody,
    DefaultVariableResponse,
    RecommendRequest,
    SuccessFlag,
)
from src.api.schemas.common import CamelModel
from src.api.schemas.documents import (
    DocumentExport,
    DocumentResponse,
    DocumentUpdate,
    DocumentVersionResponse,
)
from src.api.schemas.workflows import (
    StatsResponse,
    WorkflowCreate,
    WorkflowResponse,
    WorkflowUpdate,
)


class HealthStatus(StrEnum):
    """Health check status values."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class ComponentHealth(BaseModel):
    """Health status for a single component."""

    name: str = Field(..., description="Component name")
    status: HealthStatus = Field(..., description="Component health status")
    message: str | None = Field(default=None, description="Additional status message")
    latency_ms: float | None = Field(
        default=None,
        description="Component response latency in milliseconds",
    )


class HealthResponse(BaseModel):
    """Health check response."""

    status: HealthStatus = Field(..., description="Overall system health")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Health check timestamp",
    )
    version: str = Field(default="0.1.0", description="Application version")


# Exports
__all__ = [
    "CamelModel",
    # Health
    "HealthStatus",
    "ComponentHealth",
    "HealthResponse",
    # Workflows
    "WorkflowCreate",
    "WorkflowUpdate",
    "WorkflowResponse",
    "StatsResponse",
    # Documents
    "DocumentResponse",
    "DocumentUpdate",
    "DocumentVersionResponse",
    "DocumentExport",
    # Agents, constitution, decision framework
    "AgentResponse",
    "DefaultVariableResponse",
    "AgentExecuteRequest",
    "ConstitutionBody",
    "SuccessFlag",
    "RecommendRequest",
]
