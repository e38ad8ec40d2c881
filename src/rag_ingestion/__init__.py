"""Document ingestion for a retrieval-augmented chat application."""

__version__ = "0.1.0"
