"""FastAPI application exposing document ingestion as a REST API."""

from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from rag_ingestion import __version__
from rag_ingestion.config import settings
from rag_ingestion.errors import IngestionError, InputError
from rag_ingestion.ingestion.pipeline import IngestionPipeline
from rag_ingestion.models import IngestionOutcome, IngestionReport, InlineFile
from rag_ingestion.vectorstore.base import VectorStoreBase
from rag_ingestion.vectorstore.weaviate_store import WeaviateVectorStore

logger = logging.getLogger(__name__)

app = FastAPI(
    title="RAG Ingestion API",
    version=__version__,
    description="Extracts, chunks and uploads documents into the RAG vector index.",
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)


# ── Request / Response schemas ────────────────────────────────────────
class InlineIngestRequest(BaseModel):
    """Text / JSON sources sent inline."""

    files: list[InlineFile] | None = None


class StoredIngestRequest(BaseModel):
    """Ids of files previously uploaded to storage."""

    model_config = ConfigDict(populate_by_name=True)

    file_ids: list[str] | None = Field(default=None, alias="fileIds")


class ProcessedFile(BaseModel):
    """One successfully ingested file."""

    id: str | None = None
    name: str
    chunks: int
    extracted_length: int


class IngestResponse(BaseModel):
    """Successes under ``files``; every tagged outcome under ``outcomes``."""

    message: str
    files: list[ProcessedFile] = []
    outcomes: list[IngestionOutcome] = []

    @classmethod
    def from_report(cls, message: str, report: IngestionReport) -> IngestResponse:
        return cls(
            message=message,
            files=[
                ProcessedFile(
                    id=o.file_id, name=o.name, chunks=o.chunks, extracted_length=o.extracted_length
                )
                for o in report.processed
            ],
            outcomes=report.outcomes,
        )


# ── Dependencies ──────────────────────────────────────────────────────
def get_inline_pipeline() -> IngestionPipeline:
    return IngestionPipeline.from_settings(settings, with_storage=False)


def get_stored_pipeline() -> IngestionPipeline:
    return IngestionPipeline.from_settings(settings, with_storage=True)


def get_vector_store() -> VectorStoreBase:
    settings.require("weaviate_url", "weaviate_api_key")
    return WeaviateVectorStore.from_settings(settings)


@app.exception_handler(IngestionError)
async def ingestion_error_handler(request: Request, exc: IngestionError) -> JSONResponse:
    logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    logger.warning("%s %s rejected: %s", request.method, request.url.path, problems)
    return JSONResponse(
        status_code=InputError.status_code,
        content={"error": f"Invalid request body: {problems}"},
    )


# ── Routes ────────────────────────────────────────────────────────────
@app.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


@app.get("/ready")
def ready(store: VectorStoreBase = Depends(get_vector_store)) -> JSONResponse:
    """Readiness probe: the vector store answers its health check."""
    if not store.health_check():
        return JSONResponse(status_code=503, content={"error": "Vector store is not ready"})
    return JSONResponse(status_code=200, content={"status": "ready"})


@app.post("/ingest/documents", response_model=IngestResponse)
def ingest_documents(
    request: InlineIngestRequest,
    pipeline: IngestionPipeline = Depends(get_inline_pipeline),
) -> IngestResponse:
    """Chunk and upload inline text / JSON files."""
    report = pipeline.ingest_inline_files(request.files)
    return IngestResponse.from_report("Files uploaded successfully", report)


@app.post("/ingest/files", response_model=IngestResponse)
def ingest_files(
    request: StoredIngestRequest,
    pipeline: IngestionPipeline = Depends(get_stored_pipeline),
) -> IngestResponse:
    """Download, extract, chunk and upload previously stored files."""
    report = pipeline.ingest_stored_files(request.file_ids)
    return IngestResponse.from_report("Binary files processed successfully", report)
