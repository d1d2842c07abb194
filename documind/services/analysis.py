"""
Document Analysis Service

Runs one AI analysis pass over a stored document:

  1. Load the record (unknown / malformed id → NotFoundError)
  2. Non-PDF documents need stored text of at least 10 characters
     (InsufficientTextError, no network call)
  3. Fetch the original bytes from the blob store
  4. Encode as a base64 data URI and build the chat request
  5. Call the AI provider (PDFs also request the file-parser plugin)
  6. Strip code fences (json tag in any case), parse, validate against AnalysisResult
  7. Write extracted_text / summary / document_type / metadata together
     and commit

Nothing is written unless every step succeeds. Re-analysis of an already
analyzed document is allowed and overwrites the previous result.
"""

from __future__ import annotations

import json
import logging
import re
import time

from pydantic import ValidationError as PydanticValidationError

from documind.core.errors import AnalysisParseError, InsufficientTextError
from documind.llm.openrouter import OpenRouterClient
from documind.llm.prompts import build_analysis_messages, plugins_for, to_data_uri
from documind.models.documents import Document
from documind.repositories.documents import DocumentRepository
from documind.schemas.documents import (
    MIN_ANALYZABLE_TEXT_LENGTH,
    PDF_MIME_TYPE,
    AnalysisResult,
)
from documind.storage.blob import BlobStore

logger = logging.getLogger(__name__)

_CODE_FENCE_RE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)

INSUFFICIENT_TEXT_MESSAGE = (
    "Document has no text content or content is too short to be analyzed."
)


def parse_analysis_content(content: str) -> AnalysisResult:
    """Turn the model's reply into an AnalysisResult or raise AnalysisParseError."""
    cleaned = _CODE_FENCE_RE.sub("", content).strip()
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise AnalysisParseError(f"AI response is not valid JSON: {exc.msg}") from exc

    if not isinstance(payload, dict):
        raise AnalysisParseError("AI response is not a JSON object.")

    try:
        return AnalysisResult.model_validate(payload)
    except PydanticValidationError as exc:
        fields = ", ".join(".".join(str(p) for p in e["loc"]) for e in exc.errors())
        raise AnalysisParseError(f"AI response is missing or has invalid fields: {fields}") from exc


class AnalysisService:
    """One instance per request; collaborators are injected."""

    def __init__(
        self,
        repository: DocumentRepository,
        storage:    BlobStore,
        ai_client:  OpenRouterClient,
    ) -> None:
        self._repo    = repository
        self._storage = storage
        self._ai      = ai_client

    async def analyze(self, document_id: str) -> Document:
        document = await self._repo.get(document_id)

        # ---- Precondition: enough stored text for non-PDF types --------
        if document.mime_type != PDF_MIME_TYPE:
            text = document.extracted_text
            if not text or len(text) < MIN_ANALYZABLE_TEXT_LENGTH:
                logger.info(
                    "Analysis refused | doc=%s type=%s chars=%d",
                    document.id, document.mime_type, len(text or ""),
                )
                raise InsufficientTextError(INSUFFICIENT_TEXT_MESSAGE)

        t0 = time.monotonic()

        # ---- Fetch bytes -----------------------------------------------
        data = await self._storage.get_object(self._storage.default_bucket, document.storage_key)

        # ---- Call the model --------------------------------------------
        messages = build_analysis_messages(
            document.original_filename,
            to_data_uri(data, document.mime_type),
        )
        content = await self._ai.complete(messages, plugins=plugins_for(document.mime_type))

        # ---- Parse, then write all four fields together ----------------
        try:
            result = parse_analysis_content(content)
        except AnalysisParseError:
            logger.error("Unparseable AI response | doc=%s preview=%r", document.id, content[:200])
            raise

        document = await self._repo.apply_analysis(document, result)
        await self._repo.commit()

        logger.info(
            "Successfully analyzed document %s. Type: %s | elapsed=%.1fms",
            document.id, document.document_type, (time.monotonic() - t0) * 1000,
        )
        return document
