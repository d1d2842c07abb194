"""
SQLAlchemy ORM Models — Documents

Using SQLAlchemy mapped classes (2.x style) for full async support.
Tables are created by db/session.init_models() when DB_AUTO_CREATE is on.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import DateTime, Index, Text, func
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Declarative base — shared across all models
# ---------------------------------------------------------------------------

class Base(DeclarativeBase):
    pass


# ---------------------------------------------------------------------------
# Document model — documents
# ---------------------------------------------------------------------------

class Document(Base):
    """
    One uploaded file and everything the pipeline learned about it.

    Lifecycle:
        created   — bytes stored, extracted_text holds local text or a placeholder
        analyzed  — summary / document_type / metadata written by the AI step

    id, original_filename, mime_type, storage_key and created_at never change
    after insert. The four analysis fields are only ever written together
    (see DocumentRepository.apply_analysis).
    """

    __tablename__ = "documents"
    __table_args__ = (
        Index("idx_documents_storage_key", "storage_key", unique=True),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    original_filename: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Filename as supplied by the client, unsanitized",
    )
    mime_type: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Gates extraction and analysis behaviour",
    )
    storage_key: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Object key in the blob store: <uuid>-<sanitized filename>",
    )

    # Extraction / analysis output
    extracted_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    summary:        Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    document_type:  Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    doc_metadata:   Mapped[Optional[dict[str, Any]]] = mapped_column(
        "metadata",                 # column name stays 'metadata'
        JSONB,
        nullable=True,
        comment="Open key/value attributes; keys depend on document_type",
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    @property
    def status(self) -> str:
        return "analyzed" if self.document_type is not None else "created"

    def __repr__(self) -> str:
        return (
            f"<Document id={self.id} type={self.mime_type} "
            f"status={self.status} file={self.original_filename!r}>"
        )
