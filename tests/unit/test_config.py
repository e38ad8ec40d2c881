"""Unit tests for settings and the shared HTTP helper."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests

from rag_ingestion.config import INLINE_REQUIRED, STORED_REQUIRED, Settings
from rag_ingestion.errors import ConfigurationError
from rag_ingestion.http import send


class TestSettings:
    def test_defaults(self) -> None:
        s = Settings(_env_file=None)
        assert (s.chunk_size, s.chunk_overlap) == (220, 40)
        assert s.upload_batch_size == 100
        assert s.http_max_attempts == 1

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("WEAVIATE_URL", "https://wv.example.com")
        monkeypatch.setenv("COLLECTION_NAME", "FromEnv")
        s = Settings(_env_file=None)
        assert s.weaviate_url == "https://wv.example.com"
        assert s.collection_name == "FromEnv"

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("my-cluster.weaviate.network", "https://my-cluster.weaviate.network"),
            ("http://localhost:8080/", "http://localhost:8080"),
            ("https://wv.example.com", "https://wv.example.com"),
            ("", ""),
        ],
    )
    def test_weaviate_base_url(self, raw: str, expected: str) -> None:
        assert Settings(_env_file=None, weaviate_url=raw).weaviate_base_url == expected

    def test_require_lists_every_missing_variable(self) -> None:
        s = Settings(_env_file=None, weaviate_url="x", weaviate_api_key="", openai_api_key="")
        with pytest.raises(ConfigurationError) as excinfo:
            s.require(*INLINE_REQUIRED)
        assert "WEAVIATE_API_KEY" in str(excinfo.value)
        assert "OPENAI_API_KEY" in str(excinfo.value)
        assert "WEAVIATE_URL" not in str(excinfo.value)

    def test_stored_mode_needs_extraction_and_storage_keys(self) -> None:
        s = Settings(
            _env_file=None,
            weaviate_url="x",
            weaviate_api_key="k",
            openai_api_key="o",
            anthropic_api_key="",
            supabase_url="",
            supabase_service_role_key="",
        )
        s.require(*INLINE_REQUIRED)
        with pytest.raises(ConfigurationError, match="ANTHROPIC_API_KEY"):
            s.require(*STORED_REQUIRED)


class TestSend:
    def test_single_attempt_by_default(self) -> None:
        session = MagicMock()
        session.request.side_effect = requests.ConnectionError("down")
        with pytest.raises(requests.ConnectionError):
            send(session, "GET", "https://x", timeout=1)
        assert session.request.call_count == 1

    def test_retries_transport_errors(self) -> None:
        session = MagicMock()
        ok = MagicMock(status_code=200)
        session.request.side_effect = [requests.Timeout("slow"), ok]

        with patch("time.sleep") as sleep:
            assert send(session, "POST", "https://x", timeout=1, max_attempts=3, json={}) is ok

        sleep.assert_called_once_with(2)
        assert session.request.call_count == 2

    def test_http_error_status_is_not_retried(self) -> None:
        session = MagicMock()
        session.request.return_value = MagicMock(status_code=503, ok=False)
        resp = send(session, "GET", "https://x", timeout=1, max_attempts=3)
        assert resp.status_code == 503
        assert session.request.call_count == 1

    def test_gives_up_after_max_attempts(self) -> None:
        session = MagicMock()
        session.request.side_effect = requests.ConnectionError("down")
        with patch("time.sleep"), pytest.raises(requests.ConnectionError):
            send(session, "GET", "https://x", timeout=1, max_attempts=2)
        assert session.request.call_count == 2

    def test_invalid_attempts(self) -> None:
        with pytest.raises(ValueError, match="max_attempts"):
            send(MagicMock(), "GET", "https://x", timeout=1, max_attempts=0)
