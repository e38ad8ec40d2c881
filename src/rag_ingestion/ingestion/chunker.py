"""Word-window chunking and chunk-record builders."""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from rag_ingestion.errors import InputError
from rag_ingestion.models import Chunk

DEFAULT_CHUNK_SIZE = 220
DEFAULT_OVERLAP = 40


def validate_window(chunk_size: int, overlap: int) -> None:
    """Reject window parameters whose stride would not advance."""
    if chunk_size <= 0:
        raise ValueError(f"chunk_size ({chunk_size}) must be > 0")
    if overlap < 0:
        raise ValueError(f"overlap ({overlap}) must be >= 0")
    if overlap >= chunk_size:
        raise ValueError(f"overlap ({overlap}) must be < chunk_size ({chunk_size})")


def chunk_text(
    text: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_OVERLAP,
) -> list[str]:
    """Split *text* into overlapping windows of whitespace-delimited words.

    Parameters
    ----------
    text:
        Source text.  Runs of any whitespace separate words.
    chunk_size:
        Number of words per window.
    overlap:
        Number of words shared by consecutive windows.

    Returns
    -------
    list[str]
        Windows starting at word ``0, stride, 2*stride, ...`` where
        ``stride = chunk_size - overlap``, each rejoined with single
        spaces.  The last window may be shorter than *chunk_size*.
    """
    validate_window(chunk_size, overlap)

    words = text.split()
    stride = chunk_size - overlap
    return [" ".join(words[start:start + chunk_size]) for start in range(0, len(words), stride)]


def build_text_chunks(
    text: str,
    document_name: str,
    title: str | None = None,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_OVERLAP,
) -> list[Chunk]:
    """Chunk a flat text document; every chunk carries the same title."""
    title = document_name if title is None else title
    return [
        Chunk(content=piece, title=title, document_name=document_name, chunk_index=idx)
        for idx, piece in enumerate(chunk_text(text, chunk_size, overlap))
    ]


def build_json_chunks(
    payload: str | list[Any] | dict[str, Any],
    document_name: str,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_OVERLAP,
) -> list[Chunk]:
    """Chunk a JSON array of ``{content, title | name}`` items.

    Each item is chunked on its own: ``chunk_index`` restarts at ``0``
    for every item and chunks after the first get a ``" (Part N)"``
    title suffix.  Two chunks from different items can therefore share
    an index while their titles differ.

    Raises
    ------
    InputError
        If *payload* is not valid JSON, is not an array or object, or
        holds an item whose fields cannot form a chunk.
    """
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise InputError(f"JSON parse failed for {document_name}: {exc}") from exc

    if isinstance(payload, dict):
        payload = [payload]
    if not isinstance(payload, list):
        raise InputError(
            f"JSON source {document_name} must be an array of objects, "
            f"got {type(payload).__name__}"
        )

    chunks: list[Chunk] = []
    for item in payload:
        if not isinstance(item, dict):
            raise InputError(f"JSON source {document_name} contains a non-object item")
        text = item.get("content") or ""
        title = str(item.get("title") or item.get("name") or "")
        try:
            for idx, piece in enumerate(chunk_text(str(text), chunk_size, overlap)):
                chunks.append(
                    Chunk(
                        content=piece,
                        title=title if idx == 0 else f"{title} (Part {idx + 1})",
                        document_name=document_name,
                        chunk_index=idx,
                    )
                )
        except ValidationError as exc:
            raise InputError(f"JSON source {document_name} has an invalid item: {exc}") from exc
    return chunks


def is_json_source(name: str, mime_type: str = "") -> bool:
    return name.lower().endswith(".json") or "json" in mime_type.lower()
