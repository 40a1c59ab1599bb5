"""Pytest configuration for repository test runs."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Callable, Iterator

import httpx
import pytest

from core.types import SourceConfig
from ingest.source import Source
from store.file_cache import FileCache
from tests.fake_registry import FakeRegistry, legacy_source_config

_PARTONS_ENV_VARS = (
    "PARTONS_CONFIG",
    "PARTONS_DATA_ROOT",
    "PARTONS_HTTP_TIMEOUT",
    "PARTONS_HTTP_RETRIES",
)

SourceFactory = Callable[..., Source]


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


@pytest.fixture(autouse=True)
def _clean_partons_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer PARTONS_* settings out of test runs."""
    for name in _PARTONS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def source_factory(tmp_path: Path) -> Iterator[SourceFactory]:
    """Build sources backed by a fake registry and close their clients."""
    clients: list[httpx.AsyncClient] = []

    def _build(registry: FakeRegistry, config: SourceConfig | None = None) -> Source:
        source_config = config or legacy_source_config()
        client = registry.client()
        clients.append(client)
        return Source(
            config=source_config,
            cache=FileCache.for_registry(tmp_path, source_config.name),
            client=client,
            retries=0,
        )

    yield _build
    for client in clients:
        asyncio.run(client.aclose())
