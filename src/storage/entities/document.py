"""Document entity model.

A generated artifact from one agent execution. Edits overwrite the
live row and snapshot the previous content as a DocumentVersion.
"""

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.storage.models import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from src.storage.entities.document_version import DocumentVersion
    from src.storage.entities.workflow import Workflow


class Document(Base, UUIDMixin, TimestampMixin):
    """A versioned document produced by an agent.

    Invariant: ``version`` is one greater than the highest version of
    its DocumentVersion rows, or 1 when there are none.

    Attributes:
        id: Unique identifier (UUID)
        workflow_id: Owning workflow (None for standalone agent runs)
        agent_type: Agent that generated the document
        title: Display title (not unique)
        content: Live content
        output_type: Output-type label of the generating agent
        version: Live version number, starting at 1
    """

    __tablename__ = "document"

    workflow_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("workflow.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
        doc="FK to owning workflow (null for standalone runs)",
    )
    agent_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True,
        doc="Agent type that generated this document",
    )
    title: Mapped[str] = mapped_column(
        String(300),
        nullable=False,
        doc="Document title",
    )
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        doc="Live document content",
    )
    output_type: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        doc="Output-type label (e.g. 'Architecture Overview')",
    )
    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
        server_default="1",
        doc="Live version number",
    )

    # Relationships
    workflow: Mapped["Workflow | None"] = relationship(
        "Workflow",
        back_populates="documents",
    )
    versions: Mapped[list["DocumentVersion"]] = relationship(
        "DocumentVersion",
        back_populates="document",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="desc(DocumentVersion.version)",
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<Document(id={self.id!r}, title={self.title!r}, v{self.version})>"
