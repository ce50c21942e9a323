"""Workflow entity model.

A named container tracking one run of the agent pipeline and the
documents it generated. Status changes go through an explicit
transition table and are driven only by agent execution.
"""

from enum import Enum
from typing import TYPE_CHECKING, Any

from sqlalchemy import String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.storage.models import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from src.storage.entities.document import Document


class WorkflowStatus(str, Enum):
    """Workflow execution status."""

    DRAFT = "draft"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ERROR = "error"


# Valid status transitions
VALID_WORKFLOW_TRANSITIONS: dict[WorkflowStatus, set[WorkflowStatus]] = {
    WorkflowStatus.DRAFT: {WorkflowStatus.IN_PROGRESS},
    WorkflowStatus.IN_PROGRESS: {WorkflowStatus.COMPLETED, WorkflowStatus.ERROR},
    WorkflowStatus.COMPLETED: {WorkflowStatus.IN_PROGRESS},
    WorkflowStatus.ERROR: {WorkflowStatus.IN_PROGRESS},
}


class Workflow(Base, UUIDMixin, TimestampMixin):
    """One run of the agent pipeline.

    Attributes:
        id: Unique identifier (UUID)
        name: Display name
        description: Optional free text
        status: draft, in_progress, completed or error
        current_agent: Agent type the next execution will run
        context_variables: Ordered list of {key, value, description} dicts
        constitution_content: Optional snapshot of the constitution
        documents: Generated documents (deleted with the workflow)
    """

    __tablename__ = "workflow"

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        doc="Workflow display name",
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        doc="Optional description",
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=WorkflowStatus.DRAFT.value,
        index=True,
        doc="Execution status: draft, in_progress, completed, error",
    )
    current_agent: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
        doc="Agent type executed by the next run",
    )
    context_variables: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONB,
        nullable=False,
        default=list,
        server_default="[]",
        doc="Ordered context variables substituted into the prompt",
    )
    constitution_content: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        doc="Optional snapshot of the constitution at creation time",
    )

    # Relationships
    documents: Mapped[list["Document"]] = relationship(
        "Document",
        back_populates="workflow",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="desc(Document.created_at)",
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<Workflow(id={self.id!r}, name={self.name!r}, status={self.status!r})>"

    def can_transition_to(self, new_status: WorkflowStatus) -> bool:
        """Check if a status transition is valid.

        Args:
            new_status: Target status

        Returns:
            True if the transition is allowed
        """
        current = WorkflowStatus(self.status)
        return new_status in VALID_WORKFLOW_TRANSITIONS.get(current, set())
