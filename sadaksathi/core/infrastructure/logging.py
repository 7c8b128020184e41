"""Logging configuration with structlog integration.

Two loggers are used side by side:
1. loguru: operational lines (console plus the daily log file)
2. structlog: structured business events (merge runs, fallbacks, alerts)
"""

import sys
import time
from pathlib import Path
from typing import Any

import structlog
from loguru import logger

from sadaksathi.core.config import Settings, settings

LOG_FILE_PATTERN = "merged-{time:YYYY-MM-DD}.log"


def setup_logging(
    app_settings: Settings | None = None,
    *,
    log_to_file: bool | None = None,
) -> None:
    """Configure application logging with structlog and loguru."""
    app_settings = app_settings or settings
    if log_to_file is None:
        log_to_file = app_settings.LOG_TO_FILE

    _configure_structlog(app_settings)
    _configure_loguru(app_settings, log_to_file=log_to_file)

    logger.info(f"Logging configured with level: {app_settings.LOG_LEVEL}")


def _configure_structlog(app_settings: Settings) -> None:
    if app_settings.ENVIRONMENT == "local":
        renderer: Any = structlog.dev.ConsoleRenderer(colors=True)
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            _get_log_level_number(app_settings.LOG_LEVEL)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def _configure_loguru(app_settings: Settings, *, log_to_file: bool) -> None:
    logger.remove()

    logger.add(
        sys.stderr,
        level=app_settings.LOG_LEVEL,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=True,
    )

    if log_to_file:
        logs_dir = Path(app_settings.LOGS_DIR)
        logs_dir.mkdir(parents=True, exist_ok=True)
        # One file per day; old files are removed by prune_old_logs.
        logger.add(
            str(logs_dir / LOG_FILE_PATTERN),
            rotation="00:00",
            level="INFO",
            encoding="utf-8",
            format="[{time:YYYY-MM-DDTHH:mm:ss.SSSZ}] {level: <8} | {message}",
        )


def prune_old_logs(
    logs_dir: Path,
    retention_days: int,
    *,
    now: float | None = None,
) -> list[Path]:
    """Delete files in logs_dir whose mtime is older than retention_days.

    Run summaries live in the same directory and are pruned with the logs.

    Returns:
        The deleted paths.
    """
    logs_dir = Path(logs_dir)
    if not logs_dir.is_dir():
        return []

    now = time.time() if now is None else now
    max_age_sec = retention_days * 24 * 60 * 60
    removed: list[Path] = []

    for path in logs_dir.iterdir():
        if not path.is_file():
            continue
        try:
            age_sec = now - path.stat().st_mtime
            if age_sec > max_age_sec:
                path.unlink()
                removed.append(path)
        except OSError as e:
            logger.warning(f"Could not prune log file {path}: {e}")

    if removed:
        logger.info(f"Pruned {len(removed)} log file(s) older than {retention_days} days")
    return removed


def _get_log_level_number(level: str) -> int:
    levels = {
        "DEBUG": 10,
        "INFO": 20,
        "WARNING": 30,
        "ERROR": 40,
        "CRITICAL": 50,
    }
    return levels.get(level.upper(), 20)


# ============================================================================
# Business event logger
# ============================================================================


class FeedEvents:
    """Structured feed pipeline events.

    Usage:
        from sadaksathi.core.infrastructure.logging import FeedEvents

        FeedEvents.source_resolved(source="wazeJSON", outcome="success")
    """

    _log = structlog.get_logger("business.events")

    @classmethod
    def source_resolved(
        cls,
        source: str,
        outcome: str,
        mirror: str | None = None,
        attempts: int = 0,
        **extra: Any,
    ) -> None:
        cls._log.info(
            "source_resolved",
            event_type="fetch",
            source=source,
            outcome=outcome,
            mirror=mirror,
            attempts=attempts,
            **extra,
        )

    @classmethod
    def merge_completed(
        cls,
        sources_total: int,
        outcomes: dict[str, str],
        output_path: str,
        duration_ms: int,
        **extra: Any,
    ) -> None:
        counts = {
            outcome: sum(1 for value in outcomes.values() if value == outcome)
            for outcome in ("success", "cached", "failed")
        }
        cls._log.info(
            "merge_completed",
            event_type="merge",
            sources_total=sources_total,
            output_path=output_path,
            duration_ms=duration_ms,
            **counts,
            **extra,
        )

    @classmethod
    def source_alert_sent(
        cls,
        source: str,
        streak: int,
        recipients: int,
        **extra: Any,
    ) -> None:
        cls._log.warning(
            "source_alert_sent",
            event_type="alert",
            source=source,
            streak=streak,
            recipients=recipients,
            **extra,
        )
