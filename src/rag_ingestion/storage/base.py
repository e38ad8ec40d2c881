"""Abstract access to previously uploaded files."""

from __future__ import annotations

from abc import ABC, abstractmethod

from rag_ingestion.models import SourceFile


class FileRepository(ABC):
    """Resolve file ids to metadata and bytes, and record ingestion.

    Every method raises :class:`~rag_ingestion.errors.StorageError` on
    failure.
    """

    @abstractmethod
    def get_file(self, file_id: str) -> SourceFile:
        """Return the metadata row for *file_id*."""
        ...

    @abstractmethod
    def download(self, source: SourceFile) -> bytes:
        """Return the stored bytes of *source*."""
        ...

    @abstractmethod
    def mark_processed(self, file_id: str) -> None:
        """Set the processed flag of *file_id*."""
        ...
