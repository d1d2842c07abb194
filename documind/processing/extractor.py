"""
Local Text Extraction
═════════════════════

Best-effort text extraction performed at upload time, before any AI call.

Strategy per MIME type:
  DOCX   → python-docx: paragraph text, then table cell text, newline-joined
  PDF    → deferred; the AI provider parses PDFs itself during analysis
  other  → not supported (unreachable through the upload endpoint)

Extraction never raises. A parse failure yields ExtractionOutcome with
succeeded=False and a fixed placeholder text, and the upload continues.
"""

from __future__ import annotations

import asyncio
import io
import logging
import time
from dataclasses import dataclass

import docx

from documind.schemas.documents import (
    DOCX_MIME_TYPE,
    EXTRACTION_FAILED_TEXT,
    PDF_DEFERRED_TEXT,
    PDF_MIME_TYPE,
    UNSUPPORTED_EXTRACTION_TEXT,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result dataclass
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ExtractionOutcome:
    """
    text       : extracted text, or one of the fixed placeholders
    succeeded  : False only when a supported format failed to parse
    method     : "python-docx" | "deferred" | "unsupported" | "failed"
    """
    text:      str
    succeeded: bool
    method:    str


# ---------------------------------------------------------------------------
# Format handlers
# ---------------------------------------------------------------------------

def _extract_docx(data: bytes) -> str:
    """Extract text from DOCX bytes using python-docx."""
    document = docx.Document(io.BytesIO(data))

    parts: list[str] = [para.text for para in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            for cell in row.cells:
                if cell.text:
                    parts.append(cell.text)

    return "\n".join(parts)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_text(data: bytes, mime_type: str) -> ExtractionOutcome:
    """Synchronous extraction; CPU-bound for DOCX, so call from a thread."""
    if mime_type == PDF_MIME_TYPE:
        return ExtractionOutcome(text=PDF_DEFERRED_TEXT, succeeded=True, method="deferred")

    if mime_type == DOCX_MIME_TYPE:
        t0 = time.monotonic()
        try:
            text = _extract_docx(data)
        except Exception as exc:
            logger.warning("Local extraction failed | type=%s error=%s", mime_type, exc)
            return ExtractionOutcome(text=EXTRACTION_FAILED_TEXT, succeeded=False, method="failed")

        logger.info(
            "Local extraction ok | method=python-docx chars=%d elapsed=%.1fms",
            len(text), (time.monotonic() - t0) * 1000,
        )
        return ExtractionOutcome(text=text, succeeded=True, method="python-docx")

    logger.info("Local extraction skipped | type=%s", mime_type)
    return ExtractionOutcome(text=UNSUPPORTED_EXTRACTION_TEXT, succeeded=False, method="unsupported")


async def extract_text_async(data: bytes, mime_type: str) -> ExtractionOutcome:
    """Run extract_text in the default thread pool so the event loop stays free."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, extract_text, data, mime_type)
