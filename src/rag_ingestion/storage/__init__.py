"""Storage: resolving uploaded file ids to metadata and bytes."""

from rag_ingestion.storage.base import FileRepository
from rag_ingestion.storage.supabase_store import SupabaseFileRepository

__all__ = ["FileRepository", "SupabaseFileRepository"]
