"""
Prompt construction for document analysis.

The model receives one user message with two content parts: the instruction
text and the document itself as a base64 data URI. PDFs additionally request
OpenRouter's file-parser plugin so the provider extracts the text layer.
"""

from __future__ import annotations

import base64
from typing import Any

from documind.schemas.documents import PDF_MIME_TYPE

ANALYSIS_PROMPT = (
    "Analyze the attached document and extract its full text content.\n"
    "Based on the content, return a single, valid JSON object with the following structure:\n"
    '- "extractedText": "The full, raw text content of the document."\n'
    '- "summary": "A concise 2-3 sentence summary of the document."\n'
    "- \"type\": \"The type of document (e.g., 'Invoice', 'Resume', 'Contract', 'Report').\"\n"
    '- "attributes": "An object containing key extracted metadata (like dates, names, amounts, etc.)."\n'
    "\n"
    "Extract relevant metadata in attributes based on document type."
)

PDF_PARSER_PLUGIN: dict[str, Any] = {"id": "file-parser", "pdf": {"engine": "pdf-text"}}


def to_data_uri(data: bytes, mime_type: str) -> str:
    """data:<mime>;base64,<payload>"""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def build_analysis_messages(filename: str, data_uri: str) -> list[dict[str, Any]]:
    return [
        {
            "role": "user",
            "content": [
                {"type": "text", "text": ANALYSIS_PROMPT},
                {
                    "type": "file",
                    "file": {"filename": filename, "file_data": data_uri},
                },
            ],
        }
    ]


def plugins_for(mime_type: str) -> list[dict[str, Any]]:
    return [PDF_PARSER_PLUGIN] if mime_type == PDF_MIME_TYPE else []
