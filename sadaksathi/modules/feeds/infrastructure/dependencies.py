"""Feed module wiring: settings + static config -> services."""

import httpx
from loguru import logger

from sadaksathi.core.config import Settings, settings
from sadaksathi.core.infrastructure.email.smtp import EmailService, SMTPProvider
from sadaksathi.modules.feeds.application.alerting import SourceFailureAlerter
from sadaksathi.modules.feeds.application.orchestrator import MergeOrchestrator
from sadaksathi.modules.feeds.application.rotation import UrlRotator
from sadaksathi.modules.feeds.application.snapshot_service import SnapshotQueryService
from sadaksathi.modules.feeds.domain.entities import PipelineConfig
from sadaksathi.modules.feeds.domain.exceptions import PipelineConfigError
from sadaksathi.modules.feeds.infrastructure.cache_store import SourceCacheStore
from sadaksathi.modules.feeds.infrastructure.config_loader import load_pipeline_config
from sadaksathi.modules.feeds.infrastructure.failure_streak_store import (
    FailureStreakStore,
)
from sadaksathi.modules.feeds.infrastructure.fetchers import SourceFetcher
from sadaksathi.modules.feeds.infrastructure.rotation_store import RotationStateStore
from sadaksathi.modules.feeds.infrastructure.snapshot_store import SnapshotStore


def get_snapshot_store(app_settings: Settings | None = None) -> SnapshotStore:
    app_settings = app_settings or settings
    return SnapshotStore(app_settings.MERGED_OUTPUT_PATH, app_settings.LOGS_DIR)


def build_alerter(
    config: PipelineConfig,
    app_settings: Settings | None = None,
) -> SourceFailureAlerter:
    app_settings = app_settings or settings
    provider = SMTPProvider(
        user=config.notify.smtp_user,
        password=config.notify.smtp_password,
    )
    return SourceFailureAlerter(
        store=FailureStreakStore(app_settings.failure_streak_path),
        email_service=EmailService(provider, enabled=app_settings.EMAIL_ENABLED),
        recipients=config.notify.recipients,
        threshold=app_settings.ALERT_FAILURE_STREAK,
    )


def build_orchestrator(
    config: PipelineConfig,
    app_settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> MergeOrchestrator:
    """Wire a MergeOrchestrator from settings and the static config."""
    app_settings = app_settings or settings
    fetcher = SourceFetcher(
        max_attempts=app_settings.FETCH_MAX_ATTEMPTS,
        retry_delay_sec=app_settings.FETCH_RETRY_DELAY_SEC,
        timeout_sec=app_settings.FETCHER_TIMEOUT_SEC,
        user_agent=app_settings.FETCHER_USER_AGENT,
        transport=transport,
    )
    return MergeOrchestrator(
        sources=config.sources,
        fetcher=fetcher,
        rotator=UrlRotator(RotationStateStore(app_settings.rotation_state_path)),
        cache_store=SourceCacheStore(app_settings.CACHE_DIR),
        snapshot_store=get_snapshot_store(app_settings),
        alerter=build_alerter(config, app_settings),
    )


def build_snapshot_service(
    app_settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> SnapshotQueryService:
    """Snapshot service for the server.

    A missing or invalid static config is logged and the server falls back
    to serving the persisted snapshot without live overlay.
    """
    app_settings = app_settings or settings
    try:
        config = load_pipeline_config(app_settings.PIPELINE_CONFIG_PATH)
    except PipelineConfigError as e:
        logger.error(f"{e.message}; serving persisted snapshot only")
        config = PipelineConfig()

    fetcher = SourceFetcher(
        max_attempts=1,
        retry_delay_sec=0,
        timeout_sec=app_settings.LIVE_OVERLAY_TIMEOUT_SEC,
        user_agent=app_settings.FETCHER_USER_AGENT,
        transport=transport,
    )
    return SnapshotQueryService(
        snapshot_store=get_snapshot_store(app_settings),
        sources=config.sources,
        fetcher=fetcher,
        overlay_enabled=app_settings.LIVE_OVERLAY_ENABLED,
    )


_snapshot_service: SnapshotQueryService | None = None


async def get_snapshot_service() -> SnapshotQueryService:
    """Process-wide snapshot service, built on first use."""
    global _snapshot_service
    if _snapshot_service is None:
        _snapshot_service = build_snapshot_service()
    return _snapshot_service


def reset_snapshot_service() -> None:
    global _snapshot_service
    _snapshot_service = None
