"""Domain models for source files, chunks and per-file ingestion outcomes."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SourceFile(BaseModel):
    """A previously uploaded file, as recorded in the files table.

    Attributes
    ----------
    id:
        Opaque identifier of the stored row.
    name:
        Display name (original filename).
    mime_type:
        Declared MIME type, e.g. ``"application/pdf"``.
    storage_path:
        Object key inside the storage bucket.
    size:
        Byte size reported at upload time, when known.
    processed:
        ``True`` once the file's chunks have been uploaded.  The only
        field ingestion ever changes.
    content:
        Raw bytes, when already downloaded.
    """

    id: str
    name: str
    mime_type: str = ""
    storage_path: str = ""
    size: int | None = None
    processed: bool = False
    content: bytes | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> SourceFile:
        """Build from an ``uploaded_files`` row."""
        return cls(
            id=str(row["id"]),
            name=row.get("file_name") or "",
            mime_type=row.get("file_type") or "",
            storage_path=row.get("storage_path") or "",
            size=row.get("file_size"),
            processed=bool(row.get("rag_processed")),
        )


class InlineFile(BaseModel):
    """A text or JSON source sent directly in the request body."""

    name: str = ""
    content: str = ""


class Chunk(BaseModel):
    """One retrieval passage, exactly as stored in the vector collection."""

    model_config = ConfigDict(frozen=True)

    content: str
    title: str
    document_name: str
    chunk_index: int = Field(ge=0)

    def to_properties(self) -> dict[str, Any]:
        return {
            "content": self.content,
            "title": self.title,
            "document_name": self.document_name,
            "chunk_index": self.chunk_index,
        }


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


class IngestionOutcome(BaseModel):
    """Tagged result for one requested file.

    ``skipped`` means there was nothing to ingest (unsupported format,
    empty text, already processed, over a size cap); ``failed`` means an
    extraction, storage or upload call went wrong.
    """

    status: OutcomeStatus
    name: str
    file_id: str | None = None
    chunks: int = 0
    extracted_length: int = 0
    reason: str | None = None

    @classmethod
    def success(
        cls, name: str, *, chunks: int, extracted_length: int, file_id: str | None = None
    ) -> IngestionOutcome:
        return cls(
            status=OutcomeStatus.SUCCESS,
            name=name,
            file_id=file_id,
            chunks=chunks,
            extracted_length=extracted_length,
        )

    @classmethod
    def skipped(cls, name: str, reason: str, *, file_id: str | None = None) -> IngestionOutcome:
        return cls(status=OutcomeStatus.SKIPPED, name=name, file_id=file_id, reason=reason)

    @classmethod
    def failed(cls, name: str, reason: str, *, file_id: str | None = None) -> IngestionOutcome:
        return cls(status=OutcomeStatus.FAILED, name=name, file_id=file_id, reason=reason)


class IngestionReport(BaseModel):
    """Outcomes for one request, in processing order."""

    outcomes: list[IngestionOutcome] = Field(default_factory=list)

    def add(self, outcome: IngestionOutcome) -> None:
        self.outcomes.append(outcome)

    def _with_status(self, status: OutcomeStatus) -> list[IngestionOutcome]:
        return [o for o in self.outcomes if o.status is status]

    @property
    def processed(self) -> list[IngestionOutcome]:
        return self._with_status(OutcomeStatus.SUCCESS)

    @property
    def skipped(self) -> list[IngestionOutcome]:
        return self._with_status(OutcomeStatus.SKIPPED)

    @property
    def failed(self) -> list[IngestionOutcome]:
        return self._with_status(OutcomeStatus.FAILED)

    @property
    def total_chunks(self) -> int:
        return sum(o.chunks for o in self.processed)
