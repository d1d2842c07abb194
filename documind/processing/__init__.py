"""
Document Processing Package
════════════════════════════

Local, in-process work done on uploaded bytes before they reach the AI step.

Modules
───────
  extractor.py  Per-MIME-type text extraction (python-docx for DOCX, deferred for PDF)
"""

from documind.processing.extractor import ExtractionOutcome, extract_text, extract_text_async

__all__ = [
    "ExtractionOutcome",
    "extract_text",
    "extract_text_async",
]
