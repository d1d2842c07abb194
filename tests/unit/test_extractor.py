"""
Unit Tests — Local text extraction
═══════════════════════════════════
  ✅ DOCX → paragraph text, newline-joined
  ✅ DOCX tables → cell text included
  ✅ Corrupt DOCX → placeholder, succeeded=False, never raises
  ✅ PDF → deferred placeholder
  ✅ Unknown type → unsupported placeholder
  ✅ Async wrapper returns the same outcome
"""

from __future__ import annotations

import io

import docx
import pytest

from documind.processing.extractor import extract_text, extract_text_async
from documind.schemas.documents import (
    EXTRACTION_FAILED_TEXT,
    PDF_DEFERRED_TEXT,
    UNSUPPORTED_EXTRACTION_TEXT,
)
from tests.conftest import DOCX_MIME, PDF_MIME, build_docx


@pytest.mark.unit
class TestDocxExtraction:

    def test_paragraphs_joined_with_newlines(self):
        data = build_docx("First paragraph", "Second paragraph")

        outcome = extract_text(data, DOCX_MIME)

        assert outcome.succeeded is True
        assert outcome.method == "python-docx"
        assert "First paragraph\nSecond paragraph" in outcome.text

    def test_table_cells_included(self):
        document = docx.Document()
        document.add_paragraph("Line items")
        table = document.add_table(rows=1, cols=2)
        table.cell(0, 0).text = "Widget"
        table.cell(0, 1).text = "$40.00"
        buf = io.BytesIO()
        document.save(buf)

        outcome = extract_text(buf.getvalue(), DOCX_MIME)

        assert "Line items" in outcome.text
        assert "Widget" in outcome.text
        assert "$40.00" in outcome.text

    def test_corrupt_docx_yields_placeholder(self):
        outcome = extract_text(b"PK\x03\x04" + b"\x00" * 64, DOCX_MIME)

        assert outcome.succeeded is False
        assert outcome.method == "failed"
        assert outcome.text == EXTRACTION_FAILED_TEXT

    def test_empty_bytes_yield_placeholder(self):
        outcome = extract_text(b"", DOCX_MIME)

        assert outcome.succeeded is False
        assert outcome.text == EXTRACTION_FAILED_TEXT


@pytest.mark.unit
class TestOtherTypes:

    def test_pdf_is_deferred_to_ai(self, sample_pdf_bytes):
        outcome = extract_text(sample_pdf_bytes, PDF_MIME)

        assert outcome.succeeded is True
        assert outcome.method == "deferred"
        assert outcome.text == PDF_DEFERRED_TEXT

    def test_unknown_type_not_supported(self):
        outcome = extract_text(b"hello", "text/plain")

        assert outcome.succeeded is False
        assert outcome.method == "unsupported"
        assert outcome.text == UNSUPPORTED_EXTRACTION_TEXT


@pytest.mark.unit
async def test_async_wrapper_matches_sync(sample_docx_bytes):
    sync_outcome = extract_text(sample_docx_bytes, DOCX_MIME)
    async_outcome = await extract_text_async(sample_docx_bytes, DOCX_MIME)

    assert async_outcome == sync_outcome
    assert "INVOICE #1001" in async_outcome.text
