"""Document API: read, edit-and-version, export, validate."""

from __future__ import annotations

import logging
from enum import StrEnum
from urllib.parse import quote

from fastapi import APIRouter, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse

from src.agents.registry import AgentType
from src.api.rate_limit import LLM_LIMIT, limiter
from src.api.schemas import (
    DocumentExport,
    DocumentResponse,
    DocumentUpdate,
    DocumentVersionResponse,
)
from src.dal import DocumentRepository
from src.services.review import ReviewService
from src.storage import get_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["Documents"])

PARSE_STATUS_HEADER = "X-Parse-Status"


class ExportFormat(StrEnum):
    MARKDOWN = "markdown"
    JSON = "json"


def _attachment(title: str, ext: str) -> dict[str, str]:
    """Content-Disposition with an ASCII fallback and an RFC 5987 UTF-8 name."""
    filename = f"{title}.{ext}"
    fallback = filename.encode("ascii", "replace").decode("ascii").replace('"', "'")
    return {
        "Content-Disposition": (
            f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"
        )
    }


@router.get("/agent/{agent_type}", response_model=list[DocumentResponse])
async def list_agent_documents(agent_type: AgentType) -> list[DocumentResponse]:
    """Documents generated by one agent, newest first."""
    async with get_session() as session:
        documents = await DocumentRepository(session).list_by_agent(agent_type.value)
        return [DocumentResponse.model_validate(d) for d in documents]


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(document_id: str) -> DocumentResponse:
    """Get a document by ID."""
    async with get_session() as session:
        document = await DocumentRepository(session).get_by_id(document_id)
        if document is None:
            raise HTTPException(status_code=404, detail="Document not found")
        return DocumentResponse.model_validate(document)


@router.patch("/{document_id}", response_model=DocumentResponse)
async def update_document(document_id: str, body: DocumentUpdate) -> DocumentResponse:
    """Edit a document; the previous content becomes a version row."""
    # None means "leave unchanged" for every editable field
    changes = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None}
    if not changes:
        raise HTTPException(status_code=400, detail="No changes supplied")

    async with get_session() as session:
        document = await DocumentRepository(session).update(document_id, changes)
        if document is None:
            raise HTTPException(status_code=404, detail="Document not found")
        await session.commit()
        logger.info("Document %s edited (now v%d)", document_id, document.version)
        return DocumentResponse.model_validate(document)


@router.delete("/{document_id}", status_code=204)
async def delete_document(document_id: str) -> Response:
    """Delete a document and its version history."""
    async with get_session() as session:
        deleted = await DocumentRepository(session).delete(document_id)
        if not deleted:
            raise HTTPException(status_code=404, detail="Document not found")
        await session.commit()
    return Response(status_code=204)


@router.get("/{document_id}/versions", response_model=list[DocumentVersionResponse])
async def list_document_versions(document_id: str) -> list[DocumentVersionResponse]:
    """Historical versions, highest first. The live content is not included."""
    async with get_session() as session:
        versions = await DocumentRepository(session).list_versions(document_id)
        return [DocumentVersionResponse.model_validate(v) for v in versions]


@router.post(
    "/{document_id}/versions/{version_id}/restore",
    response_model=DocumentResponse,
)
async def restore_document_version(document_id: str, version_id: str) -> DocumentResponse:
    """Restore a version's content as a new edit.

    No version row is deleted or renumbered.
    """
    async with get_session() as session:
        document = await DocumentRepository(session).restore_version(document_id, version_id)
        await session.commit()
        logger.info("Document %s restored from version %s", document_id, version_id)
        return DocumentResponse.model_validate(document)


@router.get("/{document_id}/export", response_model=None)
async def export_document(
    document_id: str,
    format: str = Query(default=ExportFormat.MARKDOWN.value),
) -> Response:
    """Download a document as Markdown or JSON."""
    try:
        export_format = ExportFormat(format)
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported export format '{format}'. Use 'markdown' or 'json'.",
        ) from None

    async with get_session() as session:
        document = await DocumentRepository(session).get_by_id(document_id)
        if document is None:
            raise HTTPException(status_code=404, detail="Document not found")

        if export_format is ExportFormat.JSON:
            body = DocumentExport.model_validate(document)
            return JSONResponse(
                content=body.model_dump(mode="json", by_alias=True),
                headers=_attachment(document.title, "json"),
            )

        return Response(
            content=f"# {document.title}\n\n{document.content}",
            media_type="text/markdown",
            headers=_attachment(document.title, "md"),
        )


@router.post("/{document_id}/validate")
@limiter.limit(LLM_LIMIT)
async def validate_document(request: Request, document_id: str) -> JSONResponse:
    """Quality review of a document against the rubric and constitution.

    The body is always a JSON object; ``X-Parse-Status`` reports whether
    the model's answer parsed (``ok``) or was discarded (``failed``).

    Rate limited to 10/minute (LLM-backed).
    """
    async with get_session() as session:
        result = await ReviewService(session).validate_document(document_id)
    return JSONResponse(
        content=result.data,
        headers={PARSE_STATUS_HEADER: "ok" if result.ok else "failed"},
    )
