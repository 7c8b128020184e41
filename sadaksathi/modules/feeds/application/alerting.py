"""Operator alerts for persistently failing sources."""

from typing import Any

from jinja2 import TemplateError
from loguru import logger

from sadaksathi.core.config import settings
from sadaksathi.core.infrastructure.email.smtp import EmailService
from sadaksathi.core.infrastructure.email.template_loader import render_template
from sadaksathi.core.infrastructure.executor import run_blocking
from sadaksathi.core.infrastructure.logging import FeedEvents
from sadaksathi.modules.feeds.domain.entities import (
    FetchOutcome,
    RunSummary,
    SourceDescriptor,
)
from sadaksathi.modules.feeds.infrastructure.failure_streak_store import (
    FailureStreakStore,
)


class SourceFailureAlerter:
    """Track consecutive non-success runs and e-mail operators once per streak.

    A streak grows on every run whose outcome is not success and resets on
    success. When it reaches the threshold an alert goes to every
    recipient; no further alert is sent until the source recovers.
    """

    def __init__(
        self,
        store: FailureStreakStore,
        email_service: EmailService,
        recipients: list[str],
        threshold: int | None = None,
    ):
        self.store = store
        self.email_service = email_service
        self.recipients = recipients
        self.threshold = threshold or settings.ALERT_FAILURE_STREAK

    async def process_run(
        self,
        summary: RunSummary,
        sources: list[SourceDescriptor],
    ) -> list[str]:
        """Update streaks from a run summary and send due alerts.

        Returns:
            Names of the sources an alert was raised for.
        """
        try:
            state = await run_blocking(self.store.load)
        except OSError as e:
            logger.warning(f"Could not load failure streaks: {e}")
            state = {}

        due: list[str] = []
        for name, outcome in summary.sources.items():
            entry = state.setdefault(name, {"streak": 0, "alerted": False})
            if outcome == FetchOutcome.SUCCESS:
                if entry["alerted"]:
                    logger.info(f"Source {name} recovered after {entry['streak']} run(s)")
                state[name] = {"streak": 0, "alerted": False}
                continue

            entry["streak"] += 1
            if entry["streak"] >= self.threshold and not entry["alerted"]:
                entry["alerted"] = True
                due.append(name)

        try:
            await run_blocking(self.store.save, state)
        except OSError as e:
            logger.warning(f"Could not save failure streaks: {e}")

        descriptors = {source.name: source for source in sources}
        for name in due:
            await self._send_alert(
                name,
                state[name]["streak"],
                summary,
                descriptors.get(name),
            )
        return due

    async def _send_alert(
        self,
        name: str,
        streak: int,
        summary: RunSummary,
        source: SourceDescriptor | None,
    ) -> None:
        if not self.recipients:
            logger.warning(f"Source {name} failing for {streak} runs; no recipients")
            return
        if not self.email_service.is_available():
            logger.warning(f"Source {name} failing for {streak} runs; email disabled")
            return

        detail: dict[str, Any] = summary.details.get(name, {})
        outcome = summary.outcome_of(name)
        try:
            html_body = render_template(
                "source_failing.html",
                project_name=settings.PROJECT_NAME,
                source=name,
                streak=streak,
                outcome=outcome.value if outcome else "unknown",
                timestamp=summary.timestamp.isoformat(),
                error=detail.get("error"),
                mirrors=source.urls if source else [],
            )
        except TemplateError as e:
            logger.error(f"Could not render alert for {name}: {e}")
            return

        subject = f"[{settings.PROJECT_NAME}] {name} failing for {streak} runs"
        plain_body = (
            f"Live fetch for {name} has failed {streak} consecutive runs. "
            f"Last error: {detail.get('error') or 'n/a'}"
        )

        delivered = 0
        for recipient in self.recipients:
            result = await self.email_service.send_email(
                to_email=recipient,
                subject=subject,
                html_body=html_body,
                plain_body=plain_body,
            )
            if result.success:
                delivered += 1
            else:
                logger.warning(f"Alert for {name} not delivered to {recipient}: {result.error}")

        FeedEvents.source_alert_sent(source=name, streak=streak, recipients=delivered)
