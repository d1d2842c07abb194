"""
Document Repository — persistence for Document records.

All writes go through the request's AsyncSession and are flushed; the
services call commit() once their write path is complete, before the
response is sent. A failed commit surfaces as a DocumentServiceError (500).

There is no per-document lock. Two concurrent analyze calls for the same
id both read, both call the AI provider and both write; the last commit to
reach the database wins. Each write replaces all four analysis fields at
once, so the stored record always matches exactly one AI response.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from documind.core.errors import DocumentServiceError, NotFoundError
from documind.models.documents import Document, utcnow
from documind.schemas.documents import AnalysisResult

logger = logging.getLogger(__name__)


def parse_document_id(document_id: str | uuid.UUID) -> uuid.UUID:
    """Malformed ids can never match a record, so they are reported as not found."""
    if isinstance(document_id, uuid.UUID):
        return document_id
    try:
        return uuid.UUID(str(document_id))
    except ValueError as exc:
        raise NotFoundError.document(document_id) from exc


class DocumentRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        original_filename: str,
        mime_type: str,
        storage_key: str,
        extracted_text: str | None,
    ) -> Document:
        """Insert a new record. id and timestamps are assigned here, never by the caller."""
        now = utcnow()
        document = Document(
            id=uuid.uuid4(),
            original_filename=original_filename,
            mime_type=mime_type,
            storage_key=storage_key,
            extracted_text=extracted_text,
            created_at=now,
            updated_at=now,
        )
        self._session.add(document)
        await self._session.flush()

        logger.info("Document created | doc=%s key=%s", document.id, storage_key)
        return document

    async def get(self, document_id: str | uuid.UUID) -> Document:
        doc_uuid = parse_document_id(document_id)
        document = await self._session.get(Document, doc_uuid)
        if document is None:
            raise NotFoundError.document(document_id)
        return document

    async def save(self, document: Document) -> Document:
        self._session.add(document)
        await self._session.flush()
        return document

    async def apply_analysis(self, document: Document, result: AnalysisResult) -> Document:
        """Write the four analysis fields together, then flush."""
        metadata: dict[str, Any] = dict(result.attributes or {})

        document.extracted_text = result.extracted_text
        document.summary        = result.summary
        document.document_type  = result.type
        document.doc_metadata   = metadata
        document.updated_at     = utcnow()

        return await self.save(document)

    async def commit(self) -> None:
        """Make every flushed write durable. Called by the services, never by routes."""
        try:
            await self._session.commit()
        except SQLAlchemyError as exc:
            logger.error("Commit failed | error=%s", exc)
            raise DocumentServiceError(f"Failed to persist document: {exc}") from exc
