"""Collection schema definition for the chunk collection."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class PropertySpec(BaseModel):
    """One typed field of a collection."""

    name: str
    data_type: str
    description: str = ""


CHUNK_PROPERTIES: tuple[PropertySpec, ...] = (
    PropertySpec(name="content", data_type="text", description="Chunk text"),
    PropertySpec(name="document_name", data_type="text", description="Source filename"),
    PropertySpec(name="chunk_index", data_type="int", description="Chunk index"),
    PropertySpec(name="title", data_type="text", description="Original title"),
)


class CollectionSchema(BaseModel):
    """A named collection with a fixed property set and embedding config.

    Attributes
    ----------
    name:
        Collection (Weaviate class) name.
    description:
        Free-text description stored with the schema.
    properties:
        Field definitions; defaults to the four chunk fields.
    vectorizer:
        Embedding module that vectorises objects at insert time.
    vectorizer_config:
        Module configuration bound when the collection is created.
    """

    name: str
    description: str = "Chunks of documents for RAG"
    properties: list[PropertySpec] = Field(default_factory=lambda: list(CHUNK_PROPERTIES))
    vectorizer: str = "text2vec-openai"
    vectorizer_config: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def for_chunks(cls, name: str, embedding_model: str = "text-embedding-3-large") -> CollectionSchema:
        return cls(
            name=name,
            vectorizer_config={"model": embedding_model, "type": "text"},
        )

    def to_weaviate(self) -> dict[str, Any]:
        """Render as a Weaviate ``/v1/schema`` class definition."""
        return {
            "class": self.name,
            "description": self.description,
            "vectorizer": self.vectorizer,
            "moduleConfig": {self.vectorizer: self.vectorizer_config},
            "properties": [
                {"name": p.name, "dataType": [p.data_type], "description": p.description}
                for p in self.properties
            ],
        }
