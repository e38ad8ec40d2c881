"""Ordered, fixed-size batch upload of chunk records."""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Sequence

from rag_ingestion.models import Chunk
from rag_ingestion.vectorstore.base import VectorStoreBase

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 100


class BatchUploader:
    """Push chunks to a vector store in groups of *batch_size*.

    The first failing group aborts the call.  Groups already sent stay
    in the store, so one file's upload is all-or-nothing only from the
    caller's point of view.
    """

    def __init__(self, store: VectorStoreBase, batch_size: int = DEFAULT_BATCH_SIZE) -> None:
        if batch_size <= 0:
            raise ValueError(f"batch_size ({batch_size}) must be > 0")
        self.store = store
        self.batch_size = batch_size

    def upload(self, chunks: Sequence[Chunk], collection_name: str | None = None) -> int:
        """Insert *chunks* in order; return the number of objects inserted.

        Raises
        ------
        UploadError
            Propagated from the store on the first failing group.
        """
        collection = collection_name or self.store.collection_name
        total_batches = math.ceil(len(chunks) / self.batch_size)
        inserted = 0

        t0 = time.monotonic()
        for batch_no, start in enumerate(range(0, len(chunks), self.batch_size), 1):
            batch = chunks[start:start + self.batch_size]
            logger.info("Processing batch %d/%d", batch_no, total_batches)
            objects = [{"class": collection, "properties": c.to_properties()} for c in batch]
            inserted += self.store.insert_objects(objects)
            logger.debug("  batch %d completed (%d-%d)", batch_no, start, start + len(batch))

        logger.info(
            "Inserted %d objects into %s in %.1fs (%d batches)",
            inserted, collection, time.monotonic() - t0, total_batches,
        )
        return inserted
