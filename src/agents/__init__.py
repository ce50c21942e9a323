"""Agent catalog and prompt rendering.

The five pipeline agents are static: each is a prompt template plus
metadata. Executing an agent is handled by ``src.services.executor``.
"""

from src.agents.prompts import render_prompt
from src.agents.registry import (
    AGENT_REGISTRY,
    PIPELINE,
    AgentInfo,
    AgentType,
    DefaultVariable,
    get_agent_info,
    get_default_variables,
    get_output_type,
    pipeline_index,
)

__all__ = [
    "AGENT_REGISTRY",
    "PIPELINE",
    "AgentInfo",
    "AgentType",
    "DefaultVariable",
    "get_agent_info",
    "get_default_variables",
    "get_output_type",
    "pipeline_index",
    "render_prompt",
]
