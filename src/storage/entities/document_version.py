"""Document version entity model.

Immutable snapshot of a document's content taken immediately before
an edit. Rows are append-only and only disappear with their document.
"""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import uuid4

from sqlalchemy import DateTime, ForeignKey, Integer, Text, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.storage.models import Base, UUIDMixin

if TYPE_CHECKING:
    from src.storage.entities.document import Document


class DocumentVersion(Base, UUIDMixin):
    """Pre-edit snapshot of a Document.

    Attributes:
        id: Unique identifier (UUID)
        document_id: FK to parent Document
        version: Version number the content had while it was live
        content: Content snapshot
        created_at: When the snapshot was taken
    """

    __tablename__ = "document_version"
    __table_args__ = (UniqueConstraint("document_id", "version"),)

    document_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("document.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        doc="FK to parent Document",
    )
    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        doc="Version number of the snapshotted content",
    )
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        doc="Content snapshot",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        doc="Snapshot timestamp",
    )

    # Relationships
    document: Mapped["Document"] = relationship(
        "Document",
        back_populates="versions",
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<DocumentVersion(document_id={self.document_id!r}, v{self.version})>"

    @classmethod
    def snapshot(cls, document: "Document") -> "DocumentVersion":
        """Capture the live content and version of a document.

        Returns:
            New DocumentVersion instance (not yet persisted)
        """
        return cls(
            id=str(uuid4()),
            document_id=document.id,
            version=document.version,
            content=document.content,
        )
