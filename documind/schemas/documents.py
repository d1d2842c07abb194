"""
Documents — Pydantic Request/Response Schemas

Covers the public surface of the document pipeline:
  - Upload constraints (allowed MIME types, size ceiling)
  - Extraction placeholders stored when local text is unavailable
  - Upload projection (201) and the full Document record (200)
  - The JSON object the AI model must return
  - Uniform error envelope for all 4xx/5xx responses

Design decisions:
  - Wire field names are camelCase (originalFilename, storageKey, ...);
    Python attributes stay snake_case via alias_generator.
  - id is always server-generated (UUID4); never client-supplied.
  - Timestamps are timezone-aware UTC and serialised as ISO-8601.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# ---------------------------------------------------------------------------
# Allowed MIME types — enforced before touching the blob store
# ---------------------------------------------------------------------------

PDF_MIME_TYPE: str = "application/pdf"
DOCX_MIME_TYPE: str = (
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
)

ALLOWED_MIME_TYPES: frozenset[str] = frozenset({PDF_MIME_TYPE, DOCX_MIME_TYPE})

# 5 MB hard ceiling, inclusive
MAX_FILE_SIZE_BYTES: int = 5 * 1024 * 1024

# Non-PDF documents need at least this much stored text before analysis
MIN_ANALYZABLE_TEXT_LENGTH: int = 10


# ---------------------------------------------------------------------------
# Extraction placeholders: stored in extracted_text, never raised
# ---------------------------------------------------------------------------

PDF_DEFERRED_TEXT = "Text extraction will be performed by AI."
EXTRACTION_FAILED_TEXT = "Error during local text extraction."
UNSUPPORTED_EXTRACTION_TEXT = "Text extraction not supported for this file type."


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ---------------------------------------------------------------------------
# Upload response — 201 Created
# ---------------------------------------------------------------------------

class DocumentUploadResponse(CamelModel):
    """Projection returned right after a successful upload."""
    id:                UUID     = Field(..., description="Server-generated document UUID")
    original_filename: str      = Field(..., description="Filename as supplied by the client")
    mime_type:         str      = Field(..., description="Resolved MIME type")
    storage_key:       str      = Field(..., description="Object key in the blob store")
    created_at:        datetime = Field(..., description="UTC timestamp of record creation")


# ---------------------------------------------------------------------------
# Full record — GET /documents/{id}, POST /documents/{id}/analyze
# ---------------------------------------------------------------------------

class DocumentResponse(CamelModel):
    id:                UUID
    original_filename: str
    mime_type:         str
    storage_key:       str
    extracted_text:    str | None = None
    summary:           str | None = None
    document_type:     str | None = None
    metadata:          dict[str, Any] | None = Field(
        None,
        validation_alias="doc_metadata",
        serialization_alias="metadata",
    )
    status:            str      = Field(..., description="created | analyzed")
    created_at:        datetime
    updated_at:        datetime


# ---------------------------------------------------------------------------
# AI output — the single JSON object the model is instructed to return
# ---------------------------------------------------------------------------

class AnalysisResult(BaseModel):
    """
    Parsed model reply. Keys are exactly the ones named in the prompt;
    unknown keys are ignored.
    """
    extracted_text: str            = Field(..., alias="extractedText")
    summary:        str
    type:           str
    attributes:     dict[str, Any] | None = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True)


# ---------------------------------------------------------------------------
# Structured error bodies
# ---------------------------------------------------------------------------

class ErrorDetail(BaseModel):
    """Single structured error — may appear in a list."""
    field:   str | None = Field(None, description="Request field that caused the error, if applicable")
    message: str
    code:    str         = Field(..., description="Machine-readable error code for client handling")


class ErrorResponse(BaseModel):
    """
    Uniform error envelope for all 4xx/5xx responses.
    Clients should check `error_code` for programmatic handling.
    """
    error_code: str               = Field(..., description="Stable machine-readable code")
    message:    str               = Field(..., description="Human-readable summary")
    details:    list[ErrorDetail] = Field(default_factory=list)
    request_id: str | None        = Field(None, description="Trace ID for log correlation")
