"""Abstract base class for vector-store backends.

Adding a new backend (Qdrant, Pinecone, Chroma …) only requires
subclassing :class:`VectorStoreBase` and implementing the abstract
methods.  Schema bootstrap and batch upload are backend-agnostic.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from rag_ingestion.vectorstore.schema import CollectionSchema

logger = logging.getLogger(__name__)


class VectorStoreBase(ABC):
    """Backend-agnostic vector-store interface.

    Parameters
    ----------
    collection_name:
        Logical name of the collection / class / index.
    """

    def __init__(self, collection_name: str) -> None:
        self.collection_name = collection_name

    # -- required overrides ---------------------------------------------------

    @abstractmethod
    def get_collection(self, name: str) -> dict[str, Any] | None:
        """Return the stored definition of *name*, or ``None`` if absent.

        Raises
        ------
        UploadError
            The probe itself failed (anything other than "not found").
        """
        ...

    @abstractmethod
    def create_collection(self, schema: CollectionSchema) -> bool:
        """Create *schema*; return ``False`` if another caller created it first.

        Raises
        ------
        UploadError
            The store rejected the definition.
        """
        ...

    @abstractmethod
    def insert_objects(self, objects: list[dict[str, Any]]) -> int:
        """Insert one batch of ``{"class", "properties"}`` objects.

        Returns the number of objects accepted.  Any failure raises
        :class:`~rag_ingestion.errors.UploadError`; nothing is rolled back.
        """
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable and ready."""
        ...

    # -- schema bootstrap -----------------------------------------------------

    def ensure_collection(self, schema: CollectionSchema) -> bool:
        """Create *schema* unless a collection of that name already exists.

        An existing collection is never altered.  Returns ``True`` only
        when this call created the collection.
        """
        if self.get_collection(schema.name) is not None:
            logger.info("Collection %s already exists", schema.name)
            return False

        logger.info("Creating collection %s", schema.name)
        created = self.create_collection(schema)
        if created:
            logger.info("Collection %s created", schema.name)
        else:
            logger.info("Collection %s was created concurrently", schema.name)
        return created
