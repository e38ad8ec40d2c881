"""
Vector store: schema bootstrap and batched chunk upload.

Public surface
--------------
- :class:`VectorStoreBase`: abstract backend (subclass for Qdrant, etc.).
- :class:`WeaviateVectorStore`: default Weaviate REST backend.
- :class:`CollectionSchema`: collection fields + embedding config.
- :class:`BatchUploader`: ordered fixed-size batch insertion.
"""

from rag_ingestion.vectorstore.base import VectorStoreBase
from rag_ingestion.vectorstore.schema import CollectionSchema, PropertySpec
from rag_ingestion.vectorstore.uploader import BatchUploader
from rag_ingestion.vectorstore.weaviate_store import WeaviateVectorStore

__all__ = [
    "BatchUploader",
    "CollectionSchema",
    "PropertySpec",
    "VectorStoreBase",
    "WeaviateVectorStore",
]
