"""Shared pytest configuration and fixtures."""

import pytest

_SERVICE_ENV = (
    "WEAVIATE_URL",
    "WEAVIATE_API_KEY",
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "SUPABASE_URL",
    "SUPABASE_SERVICE_ROLE_KEY",
    "COLLECTION_NAME",
)


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


@pytest.fixture(autouse=True)
def _isolate_service_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep real credentials in the developer's shell out of unit tests."""
    for name in _SERVICE_ENV:
        monkeypatch.delenv(name, raising=False)
