"""Document API schemas."""

from datetime import datetime

from pydantic import Field

from src.api.schemas.common import CamelModel


class DocumentResponse(CamelModel):
    """Schema for document response."""

    id: str = Field(description="Document UUID")
    workflow_id: str | None = Field(default=None, description="Owning workflow, if any")
    agent_type: str
    title: str
    content: str
    output_type: str
    version: int = Field(description="Live version number")
    created_at: datetime
    updated_at: datetime


class DocumentUpdate(CamelModel):
    """Edit a document. Every edit snapshots the previous content."""

    title: str | None = Field(default=None, min_length=1, max_length=300)
    content: str | None = None
    output_type: str | None = Field(default=None, max_length=100)


class DocumentVersionResponse(CamelModel):
    """A historical (pre-edit) snapshot."""

    id: str
    document_id: str
    version: int
    content: str
    created_at: datetime


class DocumentExport(CamelModel):
    """JSON export body."""

    title: str
    content: str
    output_type: str
    agent_type: str
    version: int
    created_at: datetime
    updated_at: datetime
