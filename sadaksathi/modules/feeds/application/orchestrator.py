"""Merge orchestration.

Resolves every configured source (live mirrors, then cache, then the
previous snapshot, then an empty object) and persists one merged snapshot
plus a run summary.
"""

import asyncio
import math
import time
from typing import TYPE_CHECKING, Any

from loguru import logger

from sadaksathi.core.infrastructure.executor import run_blocking
from sadaksathi.core.infrastructure.logging import FeedEvents
from sadaksathi.modules.feeds.application.rotation import UrlRotator
from sadaksathi.modules.feeds.domain.entities import (
    FetchOutcome,
    MergedSnapshot,
    RunSummary,
    SourceDescriptor,
    SourceResult,
)
from sadaksathi.modules.feeds.infrastructure.cache_store import SourceCacheStore
from sadaksathi.modules.feeds.infrastructure.fetchers import SourceFetcher
from sadaksathi.modules.feeds.infrastructure.snapshot_store import SnapshotStore

if TYPE_CHECKING:
    from sadaksathi.modules.feeds.application.alerting import SourceFailureAlerter


def has_value(value: Any) -> bool:
    """Whether a previous snapshot entry is usable as a fallback.

    null, false, 0, NaN and "" are not; any object or array is, even an
    empty one.
    """
    if isinstance(value, dict | list):
        return True
    if isinstance(value, float) and math.isnan(value):
        return False
    return bool(value)


class MergeOrchestrator:
    """Fetch-or-fallback for all sources, then merge and persist.

    Sources are resolved concurrently. Inside one source, mirrors are
    tried strictly one after another.
    """

    def __init__(
        self,
        sources: list[SourceDescriptor],
        fetcher: SourceFetcher,
        rotator: UrlRotator,
        cache_store: SourceCacheStore,
        snapshot_store: SnapshotStore,
        alerter: "SourceFailureAlerter | None" = None,
    ):
        self.sources = sources
        self.fetcher = fetcher
        self.rotator = rotator
        self.cache_store = cache_store
        self.snapshot_store = snapshot_store
        self.alerter = alerter

    async def run_once(self) -> tuple[MergedSnapshot, RunSummary]:
        """Execute one full run.

        Returns:
            (merged snapshot, run summary)
        """
        start_time = time.time()
        logger.info(f"Starting merge run for {len(self.sources)} source(s)")

        self.rotator.reload()
        previous = await run_blocking(self.snapshot_store.load_merged)

        results = list(
            await asyncio.gather(
                *(self.resolve_source(source, previous) for source in self.sources)
            )
        )

        merged = self.merge(results, previous)
        summary = RunSummary.from_results(results)

        await run_blocking(self.snapshot_store.save_merged, merged)
        summary_path = await run_blocking(self.snapshot_store.save_summary, summary)
        logger.info(f"Run summary saved to {summary_path}")

        duration_ms = int((time.time() - start_time) * 1000)
        FeedEvents.merge_completed(
            sources_total=len(self.sources),
            outcomes={name: outcome.value for name, outcome in summary.sources.items()},
            output_path=str(self.snapshot_store.merged_path),
            duration_ms=duration_ms,
        )

        if self.alerter is not None:
            await self.alerter.process_run(summary, self.sources)

        return merged, summary

    async def resolve_source(
        self,
        source: SourceDescriptor,
        previous: MergedSnapshot,
    ) -> SourceResult:
        """Resolve one source through mirrors, cache and previous snapshot."""
        mirrors = self.rotator.rotate(source.urls, source.name)
        attempts = 0
        last_error: str | None = None

        for url in mirrors:
            result = await self.fetcher.fetch(
                url,
                source.format,
                source=source.name,
                params=source.params,
                schema=source.payload_schema,
            )
            attempts += result.attempts
            if result.is_success:
                await self._write_cache(source.name, result.document)
                return self._resolved(
                    SourceResult(
                        name=source.name,
                        outcome=FetchOutcome.SUCCESS,
                        document=result.document,
                        mirror=url,
                        attempts=attempts,
                    )
                )
            last_error = result.error_message
            logger.warning(f"Mirror failed for {source.name}: {url} ({last_error})")

        cached = await run_blocking(self.cache_store.read, source.name)
        if cached is not None:
            logger.info(f"Using offline cache for {source.name}")
            return self._resolved(
                SourceResult(
                    name=source.name,
                    outcome=FetchOutcome.CACHED,
                    document=cached,
                    attempts=attempts,
                    error=last_error,
                    fallback="cache",
                )
            )

        previous_value = previous.get(source.name)
        if has_value(previous_value):
            logger.info(f"Using last merged fallback for {source.name}")
            return self._resolved(
                SourceResult(
                    name=source.name,
                    outcome=FetchOutcome.CACHED,
                    document=previous_value,
                    attempts=attempts,
                    error=last_error,
                    fallback="previous",
                )
            )

        logger.warning(f"No data for {source.name}, returning empty object")
        return self._resolved(
            SourceResult(
                name=source.name,
                outcome=FetchOutcome.FAILED,
                document={},
                attempts=attempts,
                error=last_error,
            )
        )

    @staticmethod
    def merge(results: list[SourceResult], previous: MergedSnapshot) -> MergedSnapshot:
        """Configured sources first, then entries only the previous run had."""
        merged: MergedSnapshot = {result.name: result.document for result in results}
        for name, value in previous.items():
            if name not in merged:
                merged[name] = value
        return merged

    async def _write_cache(self, source_name: str, document: Any) -> None:
        try:
            await run_blocking(self.cache_store.write, source_name, document)
        except OSError as e:
            logger.warning(f"Could not write cache for {source_name}: {e}")

    @staticmethod
    def _resolved(result: SourceResult) -> SourceResult:
        FeedEvents.source_resolved(
            source=result.name,
            outcome=result.outcome.value,
            mirror=result.mirror,
            attempts=result.attempts,
            fallback=result.fallback,
        )
        return result
