"""
Documents API Router

  POST /documents/upload          multipart `file` → 201 upload projection
  POST /documents/{id}/analyze    run AI analysis  → 200 full record
  GET  /documents/{id}            fetch record     → 200 full record

Route handlers stay thin: they read the request, call one service method
and serialise the result. Every failure is a DocumentServiceError raised
by the service layer and rendered by the handlers in documind.main.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, File, Request, UploadFile, status

from documind.api.dependencies import Analysis, Ingestion, Repository
from documind.core.errors import UploadValidationError
from documind.schemas.documents import (
    MAX_FILE_SIZE_BYTES,
    DocumentResponse,
    DocumentUploadResponse,
    ErrorResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/documents",
    tags=["Documents"],
)

# Multipart framing (boundaries, part headers) on top of the file itself
_MULTIPART_OVERHEAD_BYTES = 4096


# ---------------------------------------------------------------------------
# POST /documents/upload
# ---------------------------------------------------------------------------

@router.post(
    "/upload",
    response_model=DocumentUploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a PDF or DOCX document",
    responses={
        201: {"model": DocumentUploadResponse, "description": "Stored and recorded"},
        422: {"model": ErrorResponse, "description": "Unsupported type, over 5 MB, or missing file"},
        500: {"model": ErrorResponse, "description": "Blob store or database failure"},
    },
)
async def upload_document(
    request: Request,
    service: Ingestion,
    file:    UploadFile = File(..., description="Document file (PDF or DOCX, max 5 MB)"),
) -> DocumentUploadResponse:
    # Guard: the multipart body is already spooled here; this only skips
    # reading an obviously oversized file back into memory
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit():
        declared = int(content_length)
        if declared > MAX_FILE_SIZE_BYTES + _MULTIPART_OVERHEAD_BYTES:
            raise UploadValidationError.file_too_large(declared, MAX_FILE_SIZE_BYTES)

    data = await file.read()
    return await service.ingest(
        data=data,
        mime_type=file.content_type,
        filename=file.filename or "",
    )


# ---------------------------------------------------------------------------
# POST /documents/{document_id}/analyze
# ---------------------------------------------------------------------------

@router.post(
    "/{document_id}/analyze",
    response_model=DocumentResponse,
    summary="Analyze a stored document with the AI model",
    responses={
        200: {"model": DocumentResponse},
        400: {"model": ErrorResponse, "description": "Not enough stored text to analyze"},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse, "description": "Storage, AI provider or response parsing failure"},
    },
)
async def analyze_document(document_id: str, service: Analysis) -> DocumentResponse:
    document = await service.analyze(document_id)
    return DocumentResponse.model_validate(document)


# ---------------------------------------------------------------------------
# GET /documents/{document_id}
# ---------------------------------------------------------------------------

@router.get(
    "/{document_id}",
    response_model=DocumentResponse,
    summary="Fetch a document record",
    responses={
        200: {"model": DocumentResponse},
        404: {"model": ErrorResponse},
    },
)
async def get_document(document_id: str, repository: Repository) -> DocumentResponse:
    document = await repository.get(document_id)
    return DocumentResponse.model_validate(document)
