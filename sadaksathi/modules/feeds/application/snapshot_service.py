"""Read side of the merged snapshot, used by the HTTP server."""

import asyncio
from typing import Any

from loguru import logger

from sadaksathi.core.infrastructure.executor import run_blocking
from sadaksathi.modules.feeds.domain.entities import MergedSnapshot, SourceDescriptor
from sadaksathi.modules.feeds.infrastructure.fetchers import FetchResult, SourceFetcher
from sadaksathi.modules.feeds.infrastructure.snapshot_store import SnapshotStore


class SnapshotQueryService:
    """Serve the persisted snapshot, optionally overlaid with live values.

    Live overlay sources get a single attempt against their first mirror,
    with no rotation and no cache writes. A failed overlay keeps the
    persisted value for that field.
    """

    def __init__(
        self,
        snapshot_store: SnapshotStore,
        sources: list[SourceDescriptor],
        fetcher: SourceFetcher | None = None,
        overlay_enabled: bool = True,
    ):
        self.snapshot_store = snapshot_store
        self.sources = sources
        self.fetcher = fetcher
        self.overlay_enabled = overlay_enabled

    @property
    def overlay_sources(self) -> list[SourceDescriptor]:
        if not self.overlay_enabled or self.fetcher is None:
            return []
        return [source for source in self.sources if source.live_overlay]

    async def get_snapshot(self) -> MergedSnapshot:
        """Latest persisted snapshot with live overlays applied."""
        snapshot = dict(await run_blocking(self.snapshot_store.load_merged))
        for source in self.sources:
            snapshot.setdefault(source.name, {})

        overlay_sources = self.overlay_sources
        if self.fetcher is None or not overlay_sources:
            return snapshot

        results = await asyncio.gather(
            *(self._fetch_live(self.fetcher, source) for source in overlay_sources)
        )
        for source, result in zip(overlay_sources, results, strict=True):
            if result.is_success:
                snapshot[source.name] = result.document
            else:
                logger.debug(
                    f"Live overlay failed for {source.name}, keeping persisted value: "
                    f"{result.error_message}"
                )
        return snapshot

    async def get_health(self) -> dict[str, Any]:
        modified_at = await run_blocking(self.snapshot_store.merged_modified_at)
        last_summary = await run_blocking(self.snapshot_store.load_latest_summary)
        return {
            "status": "healthy" if modified_at else "degraded",
            "snapshot": {
                "exists": modified_at is not None,
                "modified_at": modified_at.isoformat() if modified_at else None,
            },
            "last_run": last_summary,
            "sources": [source.name for source in self.sources],
            "live_overlay": [source.name for source in self.overlay_sources],
        }

    @staticmethod
    async def _fetch_live(
        fetcher: SourceFetcher, source: SourceDescriptor
    ) -> FetchResult:
        return await fetcher.fetch(
            source.urls[0],
            source.format,
            source=source.name,
            params=source.params,
            schema=source.payload_schema,
        )
