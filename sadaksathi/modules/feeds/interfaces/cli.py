"""Merge pipeline command line.

Usage:
    # scheduled mode, re-runs every MERGE_INTERVAL_SEC seconds
    sadaksathi-merge

    # single run, for CI and tests
    sadaksathi-merge --once

    # explicit config file and interval
    sadaksathi-merge --config config/script-properties.json --interval 60
"""

import argparse
import asyncio
import sys
from pathlib import Path

from loguru import logger

from sadaksathi.core.config import settings
from sadaksathi.core.infrastructure.logging import prune_old_logs, setup_logging
from sadaksathi.modules.feeds.application.scheduler import run_scheduled
from sadaksathi.modules.feeds.domain.exceptions import PipelineConfigError
from sadaksathi.modules.feeds.infrastructure.config_loader import load_pipeline_config
from sadaksathi.modules.feeds.infrastructure.dependencies import build_orchestrator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sadaksathi-merge",
        description="Fetch Sadak Sathi sources and write merged.json",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="run a single merge and exit",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help=f"static config file (default: {settings.PIPELINE_CONFIG_PATH})",
    )
    parser.add_argument(
        "--interval",
        "-i",
        type=float,
        default=None,
        help=f"seconds between runs (default: {settings.MERGE_INTERVAL_SEC})",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    setup_logging()
    prune_old_logs(settings.LOGS_DIR, settings.LOG_RETENTION_DAYS)

    config_path = args.config or settings.PIPELINE_CONFIG_PATH
    try:
        config = load_pipeline_config(config_path)
    except PipelineConfigError as e:
        logger.critical(f"Error reading {config_path}: {e.reason}")
        return 1

    orchestrator = build_orchestrator(config)

    if args.once:
        try:
            _, summary = asyncio.run(orchestrator.run_once())
        except OSError as e:
            logger.error(f"Merge run could not persist its output: {e}")
            return 1
        logger.info(
            "Run finished: "
            + ", ".join(f"{name}={outcome.value}" for name, outcome in summary.sources.items())
        )
        return 0

    interval = args.interval if args.interval is not None else settings.MERGE_INTERVAL_SEC
    try:
        asyncio.run(run_scheduled(orchestrator, interval))
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping merge loop")
    return 0


if __name__ == "__main__":
    sys.exit(main())
