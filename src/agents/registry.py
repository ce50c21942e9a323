"""Agent catalog for the spec-driven development pipeline.

The five agents form a fixed pipeline. Each one owns a prompt
template (see ``src.agents.prompts``), a set of output-type labels and
a default set of context variables that seeds new workflows.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from src.exceptions import AgentError


class AgentType(str, Enum):
    """Agent identifiers, in pipeline order."""

    DECISION_AUTHOR = "decision_author"
    ANALYST = "analyst"
    ARCHITECT = "architect"
    SCRUM_MASTER = "scrum_master"
    DEVELOPER = "developer"


@dataclass(frozen=True)
class DefaultVariable:
    """A context variable default shipped with an agent."""

    key: str
    value: str = ""
    description: str | None = None


@dataclass(frozen=True)
class AgentInfo:
    """Static metadata for one agent.

    Attributes:
        agent_type: Agent identifier
        name: Display name
        description: One-line purpose
        icon: UI icon hint
        primary_output: Output-type label stamped on generated documents
        output_types: All artifact kinds the agent may produce
        default_variables: Context variables seeded into new workflows
    """

    agent_type: AgentType
    name: str
    description: str
    icon: str
    primary_output: str
    output_types: tuple[str, ...]
    default_variables: tuple[DefaultVariable, ...] = field(default_factory=tuple)


_CONSTITUTION_FILE = DefaultVariable(
    "constitution_file", "constitution.md", "Path to constitution/standards file"
)

AGENT_REGISTRY: dict[AgentType, AgentInfo] = {
    AgentType.DECISION_AUTHOR: AgentInfo(
        agent_type=AgentType.DECISION_AUTHOR,
        name="Decision Specification Author",
        description=(
            "Produces formal, decision-oriented specifications for SDDD tool "
            "and methodology selection"
        ),
        icon="FileText",
        primary_output="SDDD Decision Specification",
        output_types=("SDDD Decision Specification",),
        default_variables=(
            DefaultVariable("target_audience", "", "Intended audience for the specification"),
            DefaultVariable(
                "organization_type", "", "Type of organization (startup, enterprise, etc.)"
            ),
            DefaultVariable(
                "regulatory_level", "", "Level of regulatory sensitivity (low, medium, high)"
            ),
            DefaultVariable(
                "ai_maturity_level",
                "",
                "Organization's AI maturity (beginner, intermediate, advanced)",
            ),
            DefaultVariable("tool_1", "AWS Kiro", "First tool/method to evaluate"),
            DefaultVariable("tool_2", "GitHub Spec Kit", "Second tool/method to evaluate"),
            DefaultVariable("tool_3", "OpenSpec", "Third tool/method to evaluate"),
            DefaultVariable("tool_4", "BMAD Method", "Fourth tool/method to evaluate"),
            DefaultVariable("project_type", "", "Type of project (web app, API, mobile, etc.)"),
            DefaultVariable("system_complexity", "", "Complexity level of the system"),
            DefaultVariable("governance_priority", "", "Priority level for governance"),
            DefaultVariable(
                "existing_codebase_state",
                "",
                "State of existing codebase (greenfield, legacy, etc.)",
            ),
        ),
    ),
    AgentType.ANALYST: AgentInfo(
        agent_type=AgentType.ANALYST,
        name="Analyst / Product Manager",
        description=(
            "Produces professional documentation including Project Briefs, PRDs, "
            "and Initial Specifications"
        ),
        icon="ClipboardList",
        primary_output="Product Requirements Document",
        output_types=("Project Brief", "PRD", "Initial Specification"),
        default_variables=(
            DefaultVariable(
                "input_sources", "", "Sources of requirements (stakeholders, documents, etc.)"
            ),
            DefaultVariable("organization_type", "", "Type of organization"),
            DefaultVariable("product_domain", "", "Domain of the product"),
            DefaultVariable("target_users", "", "Target user personas"),
            DefaultVariable("regulatory_level", "", "Regulatory sensitivity level"),
            DefaultVariable("delivery_constraints", "", "Delivery timeline and constraints"),
        ),
    ),
    AgentType.ARCHITECT: AgentInfo(
        agent_type=AgentType.ARCHITECT,
        name="Architect Agent",
        description=(
            "Translates requirements into coherent system architecture with "
            "constitutional compliance"
        ),
        icon="Building2",
        primary_output="Architecture Overview",
        output_types=("Architecture Overview", "Component Definition", "ADRs"),
        default_variables=(
            _CONSTITUTION_FILE,
            DefaultVariable(
                "organizational_constraints", "", "Organizational constraints and policies"
            ),
            DefaultVariable("system_type", "", "Type of system being designed"),
            DefaultVariable("deployment_environment", "", "Target deployment environment"),
            DefaultVariable("scalability_requirements", "", "Scalability expectations"),
            DefaultVariable("availability_targets", "", "Availability and uptime targets"),
            DefaultVariable("regulatory_level", "", "Regulatory sensitivity level"),
        ),
    ),
    AgentType.SCRUM_MASTER: AgentInfo(
        agent_type=AgentType.SCRUM_MASTER,
        name="Scrum Master Agent",
        description="Decomposes plans into hyper-detailed, testable user stories and tasks",
        icon="ListTodo",
        primary_output="Sprint Plan",
        output_types=("User Stories", "Task Breakdown", "Sprint Plan"),
        default_variables=(
            _CONSTITUTION_FILE,
            DefaultVariable("sprint_duration", "2 weeks", "Duration of sprints"),
            DefaultVariable("team_size", "", "Size of development team"),
            DefaultVariable("velocity_baseline", "", "Team velocity baseline"),
        ),
    ),
    AgentType.DEVELOPER: AgentInfo(
        agent_type=AgentType.DEVELOPER,
        name="Developer Agent",
        description=(
            "Produces implementation code following specifications and "
            "architectural decisions"
        ),
        icon="Code2",
        primary_output="Implementation Plan",
        output_types=("Implementation Code", "Tests", "Documentation"),
        default_variables=(
            _CONSTITUTION_FILE,
            DefaultVariable("coding_standards", "", "Coding standards to follow"),
            DefaultVariable(
                "testing_requirements", "", "Testing requirements (TDD, coverage, etc.)"
            ),
            DefaultVariable("tech_stack", "", "Technology stack to use"),
        ),
    ),
}

PIPELINE: tuple[AgentType, ...] = tuple(AgentType)


def get_agent_info(agent_type: AgentType | str) -> AgentInfo:
    """Look up catalog metadata for an agent.

    Raises:
        AgentError: If the identifier is not one of the five agents
    """
    try:
        return AGENT_REGISTRY[AgentType(agent_type)]
    except ValueError as e:
        raise AgentError(f"Unknown agent type: {agent_type}", agent_type=str(agent_type)) from e


def get_output_type(agent_type: AgentType | str) -> str:
    """Output-type label stamped on documents the agent generates."""
    return get_agent_info(agent_type).primary_output


def get_default_variables(agent_type: AgentType | str) -> list[dict[str, str | None]]:
    """Default context variables for an agent as plain dicts (JSON-ready)."""
    return [
        {"key": v.key, "value": v.value, "description": v.description}
        for v in get_agent_info(agent_type).default_variables
    ]


def pipeline_index(agent_type: AgentType | str) -> int:
    """Position of the agent in the pipeline (0-based)."""
    return PIPELINE.index(AgentType(agent_type))
