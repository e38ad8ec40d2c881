"""
Serving: FastAPI application for the ingestion service.

This module exposes the ingestion pipeline over HTTP so the chat
front-end can trigger ingestion after an upload.
"""
