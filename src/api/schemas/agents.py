"""Agent catalog, execution and review schemas."""

from typing import Any

from pydantic import Field

from src.agents.registry import AgentInfo, AgentType
from src.api.schemas.common import CamelModel
from src.schema import ContextVariable


class DefaultVariableResponse(CamelModel):
    key: str
    value: str
    description: str | None = None


class AgentResponse(CamelModel):
    """Catalog entry for one agent."""

    id: AgentType = Field(description="Agent type identifier")
    name: str
    description: str
    icon: str
    primary_output: str = Field(description="Output type stamped on generated documents")
    output_types: list[str]
    default_variables: list[DefaultVariableResponse]

    @classmethod
    def from_info(cls, info: AgentInfo) -> "AgentResponse":
        return cls(
            id=info.agent_type,
            name=info.name,
            description=info.description,
            icon=info.icon,
            primary_output=info.primary_output,
            output_types=list(info.output_types),
            default_variables=[
                DefaultVariableResponse(key=v.key, value=v.value, description=v.description)
                for v in info.default_variables
            ],
        )


class AgentExecuteRequest(CamelModel):
    """Standalone agent execution."""

    agent_type: AgentType
    context_variables: list[ContextVariable] = Field(default_factory=list)


class ConstitutionBody(CamelModel):
    """Constitution text; missing content saves an empty constitution."""

    content: str | None = Field(default="", max_length=200_000)


class SuccessFlag(CamelModel):
    success: bool = True


class RecommendRequest(CamelModel):
    """Decision-framework questionnaire answers."""

    answers: dict[str, Any] = Field(default_factory=dict)
