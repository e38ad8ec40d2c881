"""Weaviate implementation of the vector-store abstraction (REST API)."""

from __future__ import annotations

import logging
from typing import Any

import requests

from rag_ingestion.config import Settings
from rag_ingestion.errors import UploadError
from rag_ingestion.http import send
from rag_ingestion.vectorstore.base import VectorStoreBase
from rag_ingestion.vectorstore.schema import CollectionSchema

logger = logging.getLogger(__name__)


def _object_errors(result: Any) -> list[str]:
    """Collect per-object error messages from a ``/v1/batch/objects`` body."""
    if not isinstance(result, list):
        return []
    messages: list[str] = []
    for obj in result:
        errors = ((obj or {}).get("result") or {}).get("errors") or {}
        for err in errors.get("error") or []:
            messages.append(str(err.get("message", err)))
    return messages


class WeaviateVectorStore(VectorStoreBase):
    """Weaviate-backed vector store, spoken to over plain HTTP.

    Parameters
    ----------
    base_url:
        Weaviate root URL, scheme included.
    api_key:
        Weaviate API key (sent as a bearer token).
    collection_name:
        Weaviate class that receives chunk objects.
    embedding_api_key:
        Key forwarded in ``X-OpenAI-Api-Key`` so the ``text2vec-openai``
        module can embed objects at insert time.
    session:
        Optional pre-configured :class:`requests.Session`.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        collection_name: str,
        *,
        embedding_api_key: str = "",
        session: requests.Session | None = None,
        timeout: float = 120.0,
        max_attempts: int = 1,
    ) -> None:
        super().__init__(collection_name)
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._max_attempts = max_attempts
        self._session = session or requests.Session()
        self._auth = {"Authorization": f"Bearer {api_key}"}
        self._embedding_api_key = embedding_api_key

    @classmethod
    def from_settings(cls, settings: Settings) -> WeaviateVectorStore:
        return cls(
            settings.weaviate_base_url,
            settings.weaviate_api_key,
            settings.collection_name,
            embedding_api_key=settings.openai_api_key,
            timeout=settings.request_timeout,
            max_attempts=settings.http_max_attempts,
        )

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        url = f"{self._base_url}{path}"
        try:
            return send(
                self._session,
                method,
                url,
                timeout=self._timeout,
                max_attempts=self._max_attempts,
                **kwargs,
            )
        except requests.RequestException as exc:
            raise UploadError(f"Weaviate request {method} {path} failed: {exc}") from exc

    # -- VectorStoreBase overrides --------------------------------------------

    def get_collection(self, name: str) -> dict[str, Any] | None:
        resp = self._request("GET", f"/v1/schema/{name}", headers=self._auth)
        if resp.status_code == 404:
            return None
        if not resp.ok:
            raise UploadError(f"Failed to check schema: {resp.text}")
        try:
            definition = resp.json()
        except ValueError:
            definition = None
        return definition if isinstance(definition, dict) else {}

    def create_collection(self, schema: CollectionSchema) -> bool:
        resp = self._request(
            "POST",
            "/v1/schema",
            headers={**self._auth, "Content-Type": "application/json"},
            json=schema.to_weaviate(),
        )
        if resp.ok:
            return True
        if resp.status_code == 422 and "already exists" in resp.text.lower():
            return False
        raise UploadError(f"Failed to create schema: {resp.text}")

    def insert_objects(self, objects: list[dict[str, Any]]) -> int:
        headers = {**self._auth, "Content-Type": "application/json"}
        if self._embedding_api_key:
            headers["X-OpenAI-Api-Key"] = self._embedding_api_key

        resp = self._request("POST", "/v1/batch/objects", headers=headers, json={"objects": objects})
        if not resp.ok:
            logger.error("Batch insert failed: %.500s", resp.text)
            raise UploadError(f"Failed to insert batch: {resp.text}")

        try:
            result = resp.json()
        except ValueError:
            result = None
        errors = _object_errors(result)
        if errors:
            raise UploadError(f"Failed to insert batch: {len(errors)} object error(s): {errors[0]}")
        return len(result) if isinstance(result, list) else len(objects)

    def health_check(self) -> bool:
        try:
            resp = self._request("GET", "/v1/.well-known/ready", headers=self._auth)
        except UploadError:
            logger.warning("Weaviate health-check failed", exc_info=True)
            return False
        return resp.ok
