"""
FastAPI Application — Entry Point

Document analysis service: upload PDF/DOCX files, store them in an
S3-compatible blob store, and classify them with an AI model.

Architecture:
  - Routes live under /documents (see documind.api.documents)
  - Process-wide collaborators (BlobStore, OpenRouterClient) are built once
    in the lifespan, stored on app.state and injected via Depends
  - One DB session / transaction per request (documind.db.session.get_db)
  - Structured JSON error responses on all 4xx/5xx

Middleware stack (innermost → outermost):
  1. Request ID injection — X-Request-ID header on every response
  2. Request logging — one log line per request with latency
  3. CORS — open in development, closed otherwise
"""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from documind.api.documents import router as documents_router
from documind.core.config import settings
from documind.core.errors import DocumentServiceError
from documind.db.session import check_db_health, engine, init_models
from documind.llm.openrouter import OpenRouterClient
from documind.schemas.documents import ErrorDetail, ErrorResponse
from documind.storage.blob import BlobStore

logger = logging.getLogger(__name__)

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or request.headers.get(
        "X-Request-ID", str(uuid.uuid4())
    )


# ---------------------------------------------------------------------------
# Application lifespan — startup / shutdown hooks
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Run on startup: validate DB connectivity, create tables, build the
    shared blob store and AI client.
    Run on shutdown: close the HTTP pool and dispose the DB engine.
    """
    logger.info(
        "Starting document service | env=%s model=%s",
        settings.app_env, settings.openrouter_model,
    )

    db_health = await check_db_health()
    if db_health["status"] != "ok":
        logger.critical("Database health check failed at startup: %s", db_health)
        raise RuntimeError(f"DB unavailable: {db_health}")
    logger.info("Database: connected")

    if settings.db_auto_create:
        await init_models()

    if not settings.openrouter_api_key:
        logger.warning("OPENROUTER_API_KEY is not set; analyze requests will be rejected upstream")

    app.state.blob_store = BlobStore(settings)
    app.state.ai_client = OpenRouterClient(settings)
    logger.info(
        "Blob store: %s bucket=%s", settings.storage_endpoint_url, settings.storage_bucket,
    )

    yield

    logger.info("Shutting down document service")
    await app.state.ai_client.aclose()
    await engine.dispose()


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------

def create_app() -> FastAPI:
    app = FastAPI(
        title="Document Analysis Service",
        description=(
            "Upload PDF and DOCX documents, extract their text and classify "
            "them with an AI model."
        ),
        version="1.0.0",
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        openapi_url="/openapi.json" if not settings.is_production else None,
        lifespan=lifespan,
    )

    # ----------------------------------------------------------------
    # Middleware (applied in reverse order — last added = outermost)
    # ----------------------------------------------------------------

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.app_env == "development" else [],
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )

    # ----------------------------------------------------------------
    # Request ID + structured logging middleware
    # ----------------------------------------------------------------

    @app.middleware("http")
    async def request_id_and_logging(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        start = time.perf_counter()

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start) * 1000
        response.headers["X-Request-ID"] = request_id

        logger.info(
            "HTTP %s %s %d %.1fms | request_id=%s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            request_id,
        )
        return response

    # ----------------------------------------------------------------
    # Exception handlers — uniform structured error responses
    # ----------------------------------------------------------------

    @app.exception_handler(DocumentServiceError)
    async def document_service_exception_handler(request: Request, exc: DocumentServiceError):
        """Render any pipeline error with its own status code and error_code."""
        request_id = _request_id(request)
        if exc.status_code >= 500:
            logger.error(
                "Request failed | path=%s code=%s request_id=%s error=%s",
                request.url.path, exc.error_code, request_id, exc.message,
            )
        else:
            logger.info(
                "Request rejected | path=%s code=%s request_id=%s",
                request.url.path, exc.error_code, request_id,
            )

        details = (
            [ErrorDetail(field=exc.field, message=exc.message, code=exc.error_code)]
            if exc.field
            else []
        )
        body = ErrorResponse(
            error_code=exc.error_code,
            message=exc.message,
            details=details,
            request_id=request_id,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=body.model_dump(mode="json"),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Convert Pydantic/FastAPI validation errors to structured ErrorResponse."""
        details = [
            ErrorDetail(
                field=" → ".join(str(loc) for loc in err["loc"]),
                message=err["msg"],
                code="VALIDATION_ERROR",
            )
            for err in exc.errors()
        ]
        body = ErrorResponse(
            error_code="VALIDATION_ERROR",
            message="Request validation failed.",
            details=details,
            request_id=_request_id(request),
        )
        return JSONResponse(
            status_code=422,
            content=body.model_dump(mode="json"),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        """Catch-all for unhandled exceptions — never expose stack traces."""
        request_id = _request_id(request)
        logger.exception(
            "Unhandled exception | path=%s request_id=%s",
            request.url.path, request_id,
        )
        body = ErrorResponse(
            error_code="INTERNAL_ERROR",
            message="An unexpected error occurred.",
            request_id=request_id,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=body.model_dump(mode="json"),
            headers={"X-Request-ID": request_id},
        )

    # ----------------------------------------------------------------
    # Routers
    # ----------------------------------------------------------------

    app.include_router(documents_router)

    # ----------------------------------------------------------------
    # Health & readiness endpoints (used by load balancer)
    # ----------------------------------------------------------------

    @app.get(
        "/health",
        tags=["Operations"],
        summary="Liveness probe",
        description="Returns 200 if the process is alive. No external checks.",
    )
    async def health() -> dict:
        return {"status": "ok", "service": "documind"}

    @app.get(
        "/ready",
        tags=["Operations"],
        summary="Readiness probe",
        description="Returns 200 only if the database is reachable.",
    )
    async def readiness() -> JSONResponse:
        db_status = await check_db_health()
        if db_status["status"] != "ok":
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "not_ready", "database": db_status},
            )
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={"status": "ready", "database": db_status},
        )

    return app


# ---------------------------------------------------------------------------
# Application instance (imported by uvicorn)
# ---------------------------------------------------------------------------

app = create_app()


# ---------------------------------------------------------------------------
# Local development entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "documind.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.app_env == "development",
        log_level="debug" if settings.debug else "info",
        access_log=True,
    )
