"""Ingestion orchestrator: one sequential pass over the requested files.

Per file::

    PENDING → EXTRACTING → CHUNKING → UPLOADING → DONE
    PENDING → SKIPPED
    any     → FAILED

A file-scoped error becomes that file's ``skipped`` / ``failed``
outcome and processing moves on.  Only request-scoped problems (no
files, missing configuration, schema bootstrap failure) raise.

Usage::

    from rag_ingestion.config import settings
    from rag_ingestion.ingestion.pipeline import IngestionPipeline

    pipeline = IngestionPipeline.from_settings(settings)
    report = pipeline.ingest_stored_files(["7f3c…"])
    for outcome in report.processed:
        print(outcome.name, outcome.chunks)
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from enum import Enum
from typing import TypeVar

from rag_ingestion.config import INLINE_REQUIRED, STORED_REQUIRED, Settings
from rag_ingestion.errors import (
    ConfigurationError,
    IngestionError,
    InputError,
    UnsupportedFormatError,
)
from rag_ingestion.ingestion.chunker import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_OVERLAP,
    build_json_chunks,
    build_text_chunks,
    is_json_source,
    validate_window,
)
from rag_ingestion.ingestion.extractor import FileFormat, TextExtractor, classify
from rag_ingestion.models import Chunk, IngestionOutcome, IngestionReport, InlineFile
from rag_ingestion.storage.base import FileRepository
from rag_ingestion.vectorstore.base import VectorStoreBase
from rag_ingestion.vectorstore.schema import CollectionSchema
from rag_ingestion.vectorstore.uploader import DEFAULT_BATCH_SIZE, BatchUploader

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FileState(str, Enum):
    PENDING = "pending"
    EXTRACTING = "extracting"
    CHUNKING = "chunking"
    UPLOADING = "uploading"
    DONE = "done"
    SKIPPED = "skipped"
    FAILED = "failed"


class _Skip(Exception):
    """Internal signal: nothing to ingest for the current file."""


class _FileRun:
    """Tracks one file through the state machine."""

    def __init__(self, name: str, file_id: str | None = None) -> None:
        self.name = name
        self.file_id = file_id
        self.state = FileState.PENDING

    def to(self, state: FileState) -> None:
        logger.debug("%s: %s → %s", self.name or self.file_id, self.state.value, state.value)
        self.state = state


class IngestionPipeline:
    """Extract, chunk and upload files into one vector-store collection.

    Parameters
    ----------
    store:
        Destination vector store; its ``collection_name`` is the target.
    extractor:
        Text extractor for stored (binary) files.
    repository:
        Resolves stored file ids; required by :meth:`ingest_stored_files`.
    chunk_size / chunk_overlap:
        Word-window parameters.
    batch_size:
        Objects per insert call.
    max_file_bytes:
        Files larger than this are skipped before extraction.
    max_chunks_per_file:
        Files producing more chunks are skipped before any upload.
    embedding_model:
        Embedding model bound to the collection if it has to be created.
    """

    def __init__(
        self,
        store: VectorStoreBase,
        *,
        extractor: TextExtractor | None = None,
        repository: FileRepository | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        chunk_overlap: int = DEFAULT_OVERLAP,
        batch_size: int = DEFAULT_BATCH_SIZE,
        max_file_bytes: int | None = None,
        max_chunks_per_file: int | None = None,
        embedding_model: str = "text-embedding-3-large",
    ) -> None:
        validate_window(chunk_size, chunk_overlap)
        self.store = store
        self.extractor = extractor or TextExtractor()
        self.repository = repository
        self.uploader = BatchUploader(store, batch_size=batch_size)
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.max_file_bytes = max_file_bytes
        self.max_chunks_per_file = max_chunks_per_file
        self.schema = CollectionSchema.for_chunks(store.collection_name, embedding_model)
        self._collection_ready = False

    @classmethod
    def from_settings(cls, settings: Settings, *, with_storage: bool = True) -> IngestionPipeline:
        """Wire the Weaviate, Anthropic and Supabase backends from *settings*.

        Raises
        ------
        ConfigurationError
            A credential needed for the requested mode is missing.
        """
        from rag_ingestion.storage.supabase_store import SupabaseFileRepository
        from rag_ingestion.vectorstore.weaviate_store import WeaviateVectorStore

        settings.require(*(STORED_REQUIRED if with_storage else INLINE_REQUIRED))
        return cls(
            WeaviateVectorStore.from_settings(settings),
            extractor=TextExtractor.from_settings(settings),
            repository=SupabaseFileRepository.from_settings(settings) if with_storage else None,
            chunk_size=settings.chunk_size,
            chunk_overlap=settings.chunk_overlap,
            batch_size=settings.upload_batch_size,
            max_file_bytes=settings.max_file_bytes,
            max_chunks_per_file=settings.max_chunks_per_file,
            embedding_model=settings.embedding_model,
        )

    # -- public API -----------------------------------------------------------

    def ensure_collection(self) -> None:
        """Bootstrap the destination collection once per pipeline instance.

        Raises
        ------
        UploadError
            The probe or the create call failed; fatal for the request.
        """
        if self._collection_ready:
            return
        self.store.ensure_collection(self.schema)
        self._collection_ready = True

    def ingest_inline_files(
        self,
        files: Sequence[InlineFile] | None,
        cancel_event: threading.Event | None = None,
    ) -> IngestionReport:
        """Chunk and upload ``{name, content}`` text / JSON sources."""
        if not files:
            raise InputError("No files provided")
        logger.info("Processing %d files...", len(files))
        return self._run(files, self._ingest_inline, cancel_event)

    def ingest_stored_files(
        self,
        file_ids: Sequence[str] | None,
        cancel_event: threading.Event | None = None,
    ) -> IngestionReport:
        """Download, extract, chunk and upload previously stored files."""
        if not file_ids:
            raise InputError("No file IDs provided")
        self._require_repository()
        logger.info("Processing %d binary files...", len(file_ids))
        return self._run(file_ids, self._ingest_stored, cancel_event)

    # -- per-file work --------------------------------------------------------

    def _run(
        self,
        items: Sequence[T],
        handle: Callable[[T], IngestionOutcome],
        cancel_event: threading.Event | None,
    ) -> IngestionReport:
        self.ensure_collection()

        report = IngestionReport()
        for item in items:
            if cancel_event is not None and cancel_event.is_set():
                logger.warning("Ingestion cancelled; %d file(s) not processed",
                               len(items) - len(report.outcomes))
                break
            report.add(handle(item))

        logger.info(
            "Ingestion finished: %d processed, %d skipped, %d failed",
            len(report.processed), len(report.skipped), len(report.failed),
        )
        return report

    def _ingest_inline(self, file: InlineFile) -> IngestionOutcome:
        run = _FileRun(file.name)

        def work() -> IngestionOutcome:
            if not file.name or not file.content:
                raise _Skip("missing name or content")
            self._check_size(len(file.content.encode("utf-8")))
            run.to(FileState.CHUNKING)
            chunks = self._chunk(file.name, file.content)
            self._upload(run, chunks)
            return IngestionOutcome.success(
                file.name, chunks=len(chunks), extracted_length=len(file.content)
            )

        return self._guard(run, work)

    def _ingest_stored(self, file_id: str) -> IngestionOutcome:
        run = _FileRun("", file_id)
        repository = self._require_repository()

        def work() -> IngestionOutcome:
            source = repository.get_file(file_id)
            run.name = source.name
            if source.processed:
                raise _Skip("already processed")
            if classify(source.mime_type) is FileFormat.UNSUPPORTED:
                raise UnsupportedFormatError(f"Unsupported file type: {source.mime_type}")
            if source.size is not None:
                self._check_size(source.size)

            data = source.content if source.content is not None else repository.download(source)
            self._check_size(len(data))

            run.to(FileState.EXTRACTING)
            text = self.extractor.extract(data, source.mime_type, source.name)
            if not text or not text.strip():
                raise _Skip("no text extracted")
            logger.info("Extracted %d characters from %s", len(text), source.name)

            run.to(FileState.CHUNKING)
            chunks = self._chunk(source.name, text, source.mime_type)
            self._upload(run, chunks)
            repository.mark_processed(file_id)
            return IngestionOutcome.success(
                source.name, file_id=file_id, chunks=len(chunks), extracted_length=len(text)
            )

        return self._guard(run, work)

    def _guard(self, run: _FileRun, work: Callable[[], IngestionOutcome]) -> IngestionOutcome:
        """Run *work*, converting file-scoped errors into outcomes."""
        label = run.name or run.file_id or "<unnamed>"
        logger.info("Processing file: %s", label)
        try:
            outcome = work()
        except (_Skip, UnsupportedFormatError) as exc:
            run.to(FileState.SKIPPED)
            logger.warning("Skipping %s: %s", run.name or label, exc)
            return IngestionOutcome.skipped(run.name, str(exc), file_id=run.file_id)
        except IngestionError as exc:
            failed_in = run.state
            run.to(FileState.FAILED)
            logger.exception("Failed to process %s while %s", run.name or label, failed_in.value)
            return IngestionOutcome.failed(run.name, str(exc), file_id=run.file_id)

        run.to(FileState.DONE)
        logger.info("Successfully processed %s (%d chunks)", run.name, outcome.chunks)
        return outcome

    # -- helpers --------------------------------------------------------------

    def _require_repository(self) -> FileRepository:
        if self.repository is None:
            raise ConfigurationError("No file repository configured for stored files")
        return self.repository

    def _check_size(self, n_bytes: int) -> None:
        if self.max_file_bytes is not None and n_bytes > self.max_file_bytes:
            raise _Skip(f"file is {n_bytes} bytes, limit is {self.max_file_bytes}")

    def _chunk(self, name: str, text: str, mime_type: str = "") -> list[Chunk]:
        if is_json_source(name, mime_type):
            chunks = build_json_chunks(
                text, name, chunk_size=self.chunk_size, overlap=self.chunk_overlap
            )
        else:
            chunks = build_text_chunks(
                text, name, chunk_size=self.chunk_size, overlap=self.chunk_overlap
            )
        logger.info("%s split into %d chunks", name, len(chunks))
        if not chunks:
            raise _Skip("no chunks produced")
        if self.max_chunks_per_file is not None and len(chunks) > self.max_chunks_per_file:
            raise _Skip(f"{len(chunks)} chunks exceeds limit of {self.max_chunks_per_file}")
        return chunks

    def _upload(self, run: _FileRun, chunks: list[Chunk]) -> None:
        run.to(FileState.UPLOADING)
        logger.info("Inserting %d chunks for %s", len(chunks), run.name)
        self.uploader.upload(chunks)
