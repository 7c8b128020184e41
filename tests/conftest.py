"""
pytest configuration and shared fixtures.

Test layout:
- unit/: unit tests (no network, all files under tmp_path)

Usage:
    # run everything
    pytest

    # only the fetcher tests
    pytest tests/unit/test_source_fetcher.py
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

from sadaksathi.core.config import Settings
from sadaksathi.modules.feeds.application.orchestrator import MergeOrchestrator
from sadaksathi.modules.feeds.application.rotation import UrlRotator
from sadaksathi.modules.feeds.domain.entities import SourceDescriptor
from sadaksathi.modules.feeds.infrastructure.cache_store import SourceCacheStore
from sadaksathi.modules.feeds.infrastructure.fetchers import SourceFetcher
from sadaksathi.modules.feeds.infrastructure.rotation_store import RotationStateStore
from sadaksathi.modules.feeds.infrastructure.snapshot_store import SnapshotStore


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


# ============================================
# Settings
# ============================================


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings with every path under tmp_path and no delays."""
    return Settings(
        ENVIRONMENT="local",
        PIPELINE_CONFIG_PATH=tmp_path / "config" / "script-properties.json",
        MERGED_OUTPUT_PATH=tmp_path / "public" / "data" / "merged.json",
        STATIC_DIR=tmp_path / "public",
        STATE_DIR=tmp_path / "var",
        CACHE_DIR=tmp_path / "var" / "cache",
        LOGS_DIR=tmp_path / "var" / "logs",
        LOG_TO_FILE=False,
        FETCH_RETRY_DELAY_SEC=0,
        EMAIL_ENABLED=False,
    )


# ============================================
# Fake upstream
# ============================================

CONNECT_ERROR = "connect_error"

Reply = httpx.Response | str | Callable[[httpx.Request], Any]


class FakeUpstream:
    """Scripted upstream served through httpx.MockTransport.

    Each route holds a queue of replies; the last reply repeats. A reply is
    an httpx.Response, CONNECT_ERROR, or a callable taking the request.
    Routes are keyed by URL without the query string.
    """

    CONNECT_ERROR = CONNECT_ERROR

    def __init__(self) -> None:
        self.routes: dict[str, list[Reply]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, url: str, *replies: Reply) -> None:
        self.routes[url] = list(replies)

    def json(self, url: str, payload: Any, status_code: int = 200) -> None:
        self.add(url, httpx.Response(status_code, json=payload))

    def calls_to(self, url: str) -> int:
        return sum(1 for request in self.requests if _route_key(request) == url)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        replies = self.routes.get(_route_key(request))
        if not replies:
            return httpx.Response(404, text="no route")

        reply = replies.pop(0) if len(replies) > 1 else replies[0]
        if isinstance(reply, str) and reply == CONNECT_ERROR:
            raise httpx.ConnectError("connection refused", request=request)
        if callable(reply):
            result = reply(request)
            if hasattr(result, "__await__"):
                result = await result
            return result
        return reply

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def _route_key(request: httpx.Request) -> str:
    return str(request.url).split("?", 1)[0]


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


# ============================================
# Pipeline components
# ============================================


@pytest.fixture
def snapshot_store(tmp_path: Path) -> SnapshotStore:
    return SnapshotStore(tmp_path / "public" / "data" / "merged.json", tmp_path / "logs")


@pytest.fixture
def cache_store(tmp_path: Path) -> SourceCacheStore:
    return SourceCacheStore(tmp_path / "cache")


@pytest.fixture
def rotation_store(tmp_path: Path) -> RotationStateStore:
    return RotationStateStore(tmp_path / "state" / "fallback-index.json")


@pytest.fixture
def make_orchestrator(
    upstream: FakeUpstream,
    cache_store: SourceCacheStore,
    rotation_store: RotationStateStore,
    snapshot_store: SnapshotStore,
) -> Callable[..., MergeOrchestrator]:
    def _make(sources: list[SourceDescriptor], **kwargs: Any) -> MergeOrchestrator:
        fetcher = SourceFetcher(
            max_attempts=3,
            retry_delay_sec=0,
            timeout_sec=5,
            transport=upstream.transport,
        )
        return MergeOrchestrator(
            sources=sources,
            fetcher=fetcher,
            rotator=UrlRotator(rotation_store),
            cache_store=cache_store,
            snapshot_store=snapshot_store,
            **kwargs,
        )

    return _make
