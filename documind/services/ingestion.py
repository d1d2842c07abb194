"""
Document Ingestion Service

Orchestrates the upload pipeline:
  1. Resolve the MIME type (client-declared, sniffed only when absent/generic)
  2. Validate type and size; nothing is written when either check fails
  3. Build the storage key <uuid4>-<sanitized filename>
  4. Ensure the bucket exists, then store the bytes
  5. Extract text locally (never fails the upload; placeholder on error)
  6. Insert and commit the Document record (id assigned by the repository)
  7. Return the upload projection

Invariants enforced here:
  - Storage keys are built server-side and are unique per upload, so two
    uploads of the same file never overwrite each other.
  - A storage failure aborts before the database is touched.
  - A database failure after the put leaves an orphaned object; no
    compensating delete is attempted.
"""

from __future__ import annotations

import logging
import re
import uuid

from documind.core.errors import UploadValidationError
from documind.processing.extractor import extract_text_async
from documind.repositories.documents import DocumentRepository
from documind.schemas.documents import (
    ALLOWED_MIME_TYPES,
    DOCX_MIME_TYPE,
    MAX_FILE_SIZE_BYTES,
    PDF_MIME_TYPE,
    DocumentUploadResponse,
)
from documind.storage.blob import BlobStore

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# File type helpers
# ---------------------------------------------------------------------------

# Declared types that carry no information and trigger sniffing
_GENERIC_MIME_TYPES = frozenset({"", "application/octet-stream"})

_UNSAFE_KEY_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


def resolve_mime_type(declared: str | None, filename: str, file_head: bytes) -> str:
    """
    Trust the declared type when the client sent a specific one.
    Fall back to magic bytes only for a missing or generic declaration.
    """
    declared = (declared or "").split(";", 1)[0].strip().lower()
    if declared not in _GENERIC_MIME_TYPES:
        return declared

    if file_head.startswith(b"%PDF"):
        return PDF_MIME_TYPE
    # DOCX is a zip container; the extension tells it apart from other zips
    if file_head.startswith(b"PK\x03\x04") and filename.lower().endswith(".docx"):
        return DOCX_MIME_TYPE
    return declared or "application/octet-stream"


def sanitize_filename(filename: str) -> str:
    """Drop every character outside [A-Za-z0-9._-]. May return ''."""
    return _UNSAFE_KEY_CHARS.sub("", filename)


def build_storage_key(filename: str) -> str:
    return f"{uuid.uuid4()}-{sanitize_filename(filename)}"


def validate_upload(mime_type: str, size_bytes: int) -> None:
    if mime_type not in ALLOWED_MIME_TYPES:
        raise UploadValidationError.unsupported_file_type(mime_type)
    if size_bytes > MAX_FILE_SIZE_BYTES:
        raise UploadValidationError.file_too_large(size_bytes, MAX_FILE_SIZE_BYTES)


# ---------------------------------------------------------------------------
# Core ingestion orchestrator
# ---------------------------------------------------------------------------

class IngestionService:
    """
    Stateless service object — one instance per request.
    All dependencies are injected (testable, no hidden globals).
    """

    def __init__(
        self,
        repository: DocumentRepository,
        storage:    BlobStore,
    ) -> None:
        self._repo    = repository
        self._storage = storage

    async def ingest(
        self,
        data:      bytes,
        mime_type: str | None,
        filename:  str,
    ) -> DocumentUploadResponse:
        """
        Full upload pipeline. Raises UploadValidationError (422) or
        StorageError (500); the database is untouched in both cases.
        """
        filename = filename or "upload"
        resolved = resolve_mime_type(mime_type, filename, data[:8])

        # ---- Step 1: Validate before any side effect -------------------
        try:
            validate_upload(resolved, len(data))
        except UploadValidationError as exc:
            logger.warning(
                "Upload rejected | file=%s type=%s size=%d reason=%s",
                filename, resolved, len(data), exc.error_code,
            )
            raise

        storage_key = build_storage_key(filename)
        logger.info(
            "Ingest start | file=%s type=%s size=%d key=%s",
            filename, resolved, len(data), storage_key,
        )

        # ---- Step 2: Store bytes ---------------------------------------
        bucket = await self._storage.ensure_bucket()
        await self._storage.put_object(bucket, storage_key, data, resolved)

        # ---- Step 3: Local extraction (placeholder on failure) ---------
        outcome = await extract_text_async(data, resolved)
        if not outcome.succeeded:
            logger.warning(
                "Stored placeholder text | key=%s method=%s", storage_key, outcome.method,
            )

        # ---- Step 4: Persist record ------------------------------------
        document = await self._repo.create(
            original_filename=filename,
            mime_type=resolved,
            storage_key=storage_key,
            extracted_text=outcome.text,
        )
        await self._repo.commit()

        logger.info("Upload ok | doc=%s key=%s size=%d", document.id, storage_key, len(data))

        return DocumentUploadResponse(
            id=document.id,
            original_filename=document.original_filename,
            mime_type=document.mime_type,
            storage_key=document.storage_key,
            created_at=document.created_at,
        )
