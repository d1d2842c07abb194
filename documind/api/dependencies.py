"""
Composed FastAPI Dependencies

Combines the DB session and the process-wide collaborators (blob store,
AI client) into the service objects route handlers use. Route handlers
import from here, never from db/session or app.state directly.

This is the single wiring point for the request context; tests replace
any of these via app.dependency_overrides.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from documind.db.session import get_db
from documind.llm.openrouter import OpenRouterClient
from documind.repositories.documents import DocumentRepository
from documind.services.analysis import AnalysisService
from documind.services.ingestion import IngestionService
from documind.storage.blob import BlobStore


# ---------------------------------------------------------------------------
# 1. Shared collaborators, built once in the app lifespan
# ---------------------------------------------------------------------------

def get_blob_store(request: Request) -> BlobStore:
    return request.app.state.blob_store


def get_ai_client(request: Request) -> OpenRouterClient:
    return request.app.state.ai_client


# ---------------------------------------------------------------------------
# 2. Per-request repository and services
# ---------------------------------------------------------------------------

def get_repository(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DocumentRepository:
    return DocumentRepository(db)


def get_ingestion_service(
    repository: Annotated[DocumentRepository, Depends(get_repository)],
    storage:    Annotated[BlobStore, Depends(get_blob_store)],
) -> IngestionService:
    return IngestionService(repository=repository, storage=storage)


def get_analysis_service(
    repository: Annotated[DocumentRepository, Depends(get_repository)],
    storage:    Annotated[BlobStore, Depends(get_blob_store)],
    ai_client:  Annotated[OpenRouterClient, Depends(get_ai_client)],
) -> AnalysisService:
    return AnalysisService(repository=repository, storage=storage, ai_client=ai_client)


# ---------------------------------------------------------------------------
# Type aliases for cleaner route signatures
# ---------------------------------------------------------------------------

Repository       = Annotated[DocumentRepository, Depends(get_repository)]
Ingestion        = Annotated[IngestionService, Depends(get_ingestion_service)]
Analysis         = Annotated[AnalysisService, Depends(get_analysis_service)]
