"""Document repository.

Documents are edited in place; every edit first snapshots the live
content into a DocumentVersion row so that

    live version == 1 + number of version rows

holds after any sequence of edits and restores.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import select

from src.dal.base import BaseRepository
from src.exceptions import NotFoundError
from src.storage.entities.document import Document
from src.storage.entities.document_version import DocumentVersion

# Fields a caller may change through update()
EDITABLE_FIELDS = frozenset({"title", "content", "output_type"})


class DocumentRepository(BaseRepository[Document]):
    """Repository for Document CRUD and version history."""

    model = Document

    async def create(
        self,
        agent_type: str,
        title: str,
        content: str,
        output_type: str,
        workflow_id: str | None = None,
    ) -> Document:
        """Create a document at version 1."""
        document = Document(
            id=str(uuid4()),
            workflow_id=workflow_id,
            agent_type=agent_type,
            title=title,
            content=content,
            output_type=output_type,
            version=1,
        )
        self.session.add(document)
        await self.session.flush()
        return document

    async def list_by_workflow(self, workflow_id: str) -> list[Document]:
        """Documents of a workflow, newest first."""
        return await self.list_all(workflow_id=workflow_id)

    async def list_by_agent(self, agent_type: str) -> list[Document]:
        """Documents generated by an agent, newest first."""
        return await self.list_all(agent_type=agent_type)

    async def update(self, document_id: str, changes: dict[str, Any]) -> Document | None:
        """Edit a document, snapshotting the previous content.

        The row is locked for the duration of the transaction. The
        version row and the live-row update are flushed together and
        committed by the caller.

        Args:
            document_id: Document to edit
            changes: Any of title, content, output_type

        Returns:
            Updated document, or None if not found (nothing is written)
        """
        result = await self.session.execute(
            select(Document)
            .where(Document.id == document_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        document = result.scalar_one_or_none()
        if document is None:
            return None

        self.session.add(DocumentVersion.snapshot(document))

        for key, value in changes.items():
            if key in EDITABLE_FIELDS and value is not None:
                setattr(document, key, value)
        document.version = document.version + 1
        document.updated_at = datetime.now(UTC)

        await self.session.flush()
        return document

    async def list_versions(self, document_id: str) -> list[DocumentVersion]:
        """Historical versions, highest version first.

        The live content is not included.
        """
        result = await self.session.execute(
            select(DocumentVersion)
            .where(DocumentVersion.document_id == document_id)
            .order_by(DocumentVersion.version.desc())
        )
        return list(result.scalars().all())

    async def get_version(self, version_id: str) -> DocumentVersion | None:
        """Get a version row by ID."""
        result = await self.session.execute(
            select(DocumentVersion).where(DocumentVersion.id == version_id)
        )
        return result.scalar_one_or_none()

    async def restore_version(self, document_id: str, version_id: str) -> Document:
        """Restore a historical version as a new edit.

        Existing version rows are left untouched; the content live before
        the restore becomes a new version row.

        Raises:
            NotFoundError: If the version does not exist or belongs to
                another document, or the document is gone
        """
        version = await self.get_version(version_id)
        if version is None or version.document_id != document_id:
            raise NotFoundError(
                f"Version {version_id} not found for document {document_id}",
                resource="document_version",
            )

        document = await self.update(document_id, {"content": version.content})
        if document is None:
            raise NotFoundError(f"Document {document_id} not found", resource="document")
        return document
