"""
Ingestion: extraction, chunking, and the per-request orchestrator.

This module turns uploaded files (text, JSON, PDF, images, office
documents) into chunk records and hands them to the vector-store layer.
"""

from rag_ingestion.ingestion.chunker import build_json_chunks, build_text_chunks, chunk_text
from rag_ingestion.ingestion.extractor import FileFormat, TextExtractor, classify
from rag_ingestion.ingestion.pipeline import FileState, IngestionPipeline

__all__ = [
    "FileFormat",
    "FileState",
    "IngestionPipeline",
    "TextExtractor",
    "build_json_chunks",
    "build_text_chunks",
    "chunk_text",
    "classify",
]
