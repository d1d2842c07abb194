"""
Document pipeline error taxonomy.

Every failure the upload / analyze pipeline can produce is one of these
types. Services raise them; the exception handlers registered in
documind.main translate them into the uniform ErrorResponse envelope.
Nothing here is retried automatically; retry is up to the caller.

    DocumentServiceError              500  INTERNAL_ERROR
    ├── ValidationError               422  VALIDATION_ERROR
    │   ├── UploadValidationError     422  UNSUPPORTED_FILE_TYPE | FILE_TOO_LARGE
    │   └── InsufficientTextError     400  INSUFFICIENT_TEXT
    ├── NotFoundError                 404  DOCUMENT_NOT_FOUND
    ├── StorageError                  500  STORAGE_ERROR
    ├── RemoteProviderError           500  AI_PROVIDER_ERROR
    │   └── CreditExhaustedError      500  AI_CREDITS_EXHAUSTED
    └── AnalysisParseError            500  AI_RESPONSE_INVALID
"""

from __future__ import annotations


class DocumentServiceError(Exception):
    """Base class — carries the HTTP status and machine-readable code."""

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        field: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        if error_code is not None:
            self.error_code = error_code


class ValidationError(DocumentServiceError):
    status_code = 422
    error_code = "VALIDATION_ERROR"


class UploadValidationError(ValidationError):
    """Rejected upload: wrong mimetype or over the size ceiling."""

    @classmethod
    def unsupported_file_type(cls, mime_type: str | None) -> "UploadValidationError":
        return cls(
            f"File type '{mime_type}' is not supported. Allowed: PDF, DOCX.",
            error_code="UNSUPPORTED_FILE_TYPE",
            field="file",
        )

    @classmethod
    def file_too_large(cls, size_bytes: int, limit_bytes: int) -> "UploadValidationError":
        return cls(
            f"Received {size_bytes:,} bytes; limit is {limit_bytes:,} bytes.",
            error_code="FILE_TOO_LARGE",
            field="file",
        )


class InsufficientTextError(ValidationError):
    status_code = 400
    error_code = "INSUFFICIENT_TEXT"


class NotFoundError(DocumentServiceError):
    status_code = 404
    error_code = "DOCUMENT_NOT_FOUND"

    @classmethod
    def document(cls, document_id: object) -> "NotFoundError":
        return cls(f'Document with ID "{document_id}" not found')


class StorageError(DocumentServiceError):
    error_code = "STORAGE_ERROR"


class RemoteProviderError(DocumentServiceError):
    error_code = "AI_PROVIDER_ERROR"

    def __init__(
        self,
        message: str,
        *,
        upstream_status: int | None = None,
        error_code: str | None = None,
    ) -> None:
        super().__init__(message, error_code=error_code)
        self.upstream_status = upstream_status


class CreditExhaustedError(RemoteProviderError):
    """Provider answered 402 Payment Required."""

    error_code = "AI_CREDITS_EXHAUSTED"


class AnalysisParseError(DocumentServiceError):
    error_code = "AI_RESPONSE_INVALID"
