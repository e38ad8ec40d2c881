"""Supabase-backed file repository (PostgREST table + Storage bucket)."""

from __future__ import annotations

import logging
from typing import Any

import requests

from rag_ingestion.config import Settings
from rag_ingestion.errors import StorageError
from rag_ingestion.http import send
from rag_ingestion.models import SourceFile
from rag_ingestion.storage.base import FileRepository

logger = logging.getLogger(__name__)


class SupabaseFileRepository(FileRepository):
    """Read ``uploaded_files`` rows and bucket objects with a service key.

    Parameters
    ----------
    url:
        Supabase project URL.
    service_key:
        Service-role key; bypasses row-level security.
    table:
        Table holding one row per uploaded file.
    bucket:
        Storage bucket holding the file bytes.
    """

    def __init__(
        self,
        url: str,
        service_key: str,
        *,
        table: str = "uploaded_files",
        bucket: str = "uploaded-files",
        session: requests.Session | None = None,
        timeout: float = 120.0,
        max_attempts: int = 1,
    ) -> None:
        self._url = url.rstrip("/")
        self._table = table
        self._bucket = bucket
        self._timeout = timeout
        self._max_attempts = max_attempts
        self._session = session or requests.Session()
        self._headers = {"apikey": service_key, "Authorization": f"Bearer {service_key}"}

    @classmethod
    def from_settings(cls, settings: Settings) -> SupabaseFileRepository:
        return cls(
            settings.supabase_url,
            settings.supabase_service_role_key,
            table=settings.supabase_files_table,
            bucket=settings.supabase_bucket,
            timeout=settings.request_timeout,
            max_attempts=settings.http_max_attempts,
        )

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        headers = {**self._headers, **kwargs.pop("headers", {})}
        try:
            return send(
                self._session,
                method,
                url,
                timeout=self._timeout,
                max_attempts=self._max_attempts,
                headers=headers,
                **kwargs,
            )
        except requests.RequestException as exc:
            raise StorageError(f"Storage request {method} {url} failed: {exc}") from exc

    # -- FileRepository overrides ---------------------------------------------

    def get_file(self, file_id: str) -> SourceFile:
        resp = self._request(
            "GET",
            f"{self._url}/rest/v1/{self._table}",
            params={"id": f"eq.{file_id}", "select": "*"},
        )
        if not resp.ok:
            raise StorageError(f"File lookup failed for {file_id}: {resp.text}")
        try:
            rows = resp.json()
        except ValueError as exc:
            raise StorageError(f"File lookup for {file_id} returned invalid JSON") from exc
        if not rows:
            raise StorageError(f"File not found: {file_id}")
        return SourceFile.from_row(rows[0])

    def download(self, source: SourceFile) -> bytes:
        if not source.storage_path:
            raise StorageError(f"File {source.name} has no storage path")
        resp = self._request(
            "GET", f"{self._url}/storage/v1/object/{self._bucket}/{source.storage_path}"
        )
        if not resp.ok:
            raise StorageError(f"Failed to download file: {source.name} ({resp.status_code})")
        return resp.content

    def mark_processed(self, file_id: str) -> None:
        resp = self._request(
            "PATCH",
            f"{self._url}/rest/v1/{self._table}",
            params={"id": f"eq.{file_id}"},
            headers={"Prefer": "return=representation"},
            json={"rag_processed": True},
        )
        if not resp.ok:
            raise StorageError(f"Failed to mark {file_id} processed: {resp.text}")
        try:
            rows = resp.json()
        except ValueError as exc:
            raise StorageError(f"Marking {file_id} processed returned invalid JSON") from exc
        if not rows:
            raise StorageError(f"Failed to mark {file_id} processed: no matching row")
