"""Scheduled driver for the merge orchestrator."""

import asyncio

from loguru import logger

from sadaksathi.modules.feeds.application.orchestrator import MergeOrchestrator


async def run_scheduled(
    orchestrator: MergeOrchestrator,
    interval_sec: float,
    *,
    max_runs: int | None = None,
    stop_event: asyncio.Event | None = None,
) -> int:
    """Re-run the orchestrator every interval_sec seconds.

    A run that raises is logged and the loop continues with the next one.

    Args:
        orchestrator: configured orchestrator
        interval_sec: pause between the end of a run and the next start
        max_runs: stop after this many runs (None runs until cancelled)
        stop_event: stop when set

    Returns:
        Number of runs started.
    """
    runs = 0
    logger.info(f"Starting scheduled merge loop, interval {interval_sec}s")

    while max_runs is None or runs < max_runs:
        if stop_event is not None and stop_event.is_set():
            break
        runs += 1
        try:
            await orchestrator.run_once()
        except Exception as e:
            logger.exception(f"Merge run {runs} failed: {e}")

        if max_runs is not None and runs >= max_runs:
            break
        if stop_event is None:
            await asyncio.sleep(interval_sec)
            continue
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=interval_sec)
        except TimeoutError:
            pass

    logger.info(f"Scheduled merge loop stopped after {runs} run(s)")
    return runs
