"""Source failure alert tests.

Covers:
- Streak counting and reset on success
- One alert per streak at the threshold
- No delivery without recipients or with email disabled
- Alert content
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from sadaksathi.core.infrastructure.email.smtp import EmailResult
from sadaksathi.modules.feeds.application.alerting import SourceFailureAlerter
from sadaksathi.modules.feeds.domain.entities import (
    FetchOutcome,
    RunSummary,
    SourceDescriptor,
    SourceResult,
)
from sadaksathi.modules.feeds.infrastructure.failure_streak_store import (
    FailureStreakStore,
)

pytestmark = pytest.mark.anyio

SOURCES = [SourceDescriptor(name="wazeJSON", urls=["https://waze.example.com/feed"])]


# ============================================
# Helpers
# ============================================


def _make_email_service(available: bool = True) -> MagicMock:
    service = MagicMock()
    service.is_available.return_value = available
    service.send_email = AsyncMock(return_value=EmailResult(success=True))
    return service


def _summary(outcome: FetchOutcome, error: str | None = None) -> RunSummary:
    return RunSummary.from_results(
        [
            SourceResult(
                name="wazeJSON",
                outcome=outcome,
                document={},
                error=error,
            )
        ]
    )


def _alerter(tmp_path, email_service, recipients=None, threshold=3):
    return SourceFailureAlerter(
        store=FailureStreakStore(tmp_path / "source-health.json"),
        email_service=email_service,
        recipients=["ops@example.com"] if recipients is None else recipients,
        threshold=threshold,
    )


# ============================================
# Tests
# ============================================


class TestSourceFailureAlerter:
    """SourceFailureAlerter.process_run."""

    async def test_alert_raised_once_at_threshold(self, tmp_path):
        email_service = _make_email_service()
        alerter = _alerter(tmp_path, email_service)

        raised = []
        for _ in range(5):
            raised.append(await alerter.process_run(_summary(FetchOutcome.FAILED), SOURCES))

        assert raised == [[], [], ["wazeJSON"], [], []]
        email_service.send_email.assert_awaited_once()
        assert alerter.store.load()["wazeJSON"] == {"streak": 5, "alerted": True}

    async def test_cached_runs_count_towards_streak(self, tmp_path):
        email_service = _make_email_service()
        alerter = _alerter(tmp_path, email_service, threshold=2)

        await alerter.process_run(_summary(FetchOutcome.CACHED), SOURCES)
        raised = await alerter.process_run(_summary(FetchOutcome.FAILED), SOURCES)

        assert raised == ["wazeJSON"]

    async def test_success_resets_streak(self, tmp_path):
        email_service = _make_email_service()
        alerter = _alerter(tmp_path, email_service, threshold=2)

        await alerter.process_run(_summary(FetchOutcome.FAILED), SOURCES)
        await alerter.process_run(_summary(FetchOutcome.FAILED), SOURCES)
        await alerter.process_run(_summary(FetchOutcome.SUCCESS), SOURCES)

        assert alerter.store.load()["wazeJSON"] == {"streak": 0, "alerted": False}

        await alerter.process_run(_summary(FetchOutcome.FAILED), SOURCES)
        raised = await alerter.process_run(_summary(FetchOutcome.FAILED), SOURCES)

        assert raised == ["wazeJSON"]
        assert email_service.send_email.await_count == 2

    async def test_alert_content(self, tmp_path):
        email_service = _make_email_service()
        alerter = _alerter(tmp_path, email_service, threshold=1)

        await alerter.process_run(
            _summary(FetchOutcome.FAILED, error="HTTP 500: Internal Server Error"),
            SOURCES,
        )

        kwargs = email_service.send_email.await_args.kwargs
        assert kwargs["to_email"] == "ops@example.com"
        assert "wazeJSON" in kwargs["subject"]
        assert "HTTP 500: Internal Server Error" in kwargs["html_body"]
        assert "https://waze.example.com/feed" in kwargs["html_body"]
        assert "1 consecutive runs" in kwargs["plain_body"]

    async def test_every_recipient_gets_alert(self, tmp_path):
        email_service = _make_email_service()
        alerter = _alerter(
            tmp_path,
            email_service,
            recipients=["a@example.com", "b@example.com"],
            threshold=1,
        )

        await alerter.process_run(_summary(FetchOutcome.FAILED), SOURCES)

        sent_to = [call.kwargs["to_email"] for call in email_service.send_email.await_args_list]
        assert sent_to == ["a@example.com", "b@example.com"]

    async def test_no_recipients_marks_alerted_without_sending(self, tmp_path):
        email_service = _make_email_service()
        alerter = _alerter(tmp_path, email_service, recipients=[], threshold=1)

        raised = await alerter.process_run(_summary(FetchOutcome.FAILED), SOURCES)

        assert raised == ["wazeJSON"]
        email_service.send_email.assert_not_called()

    async def test_email_unavailable(self, tmp_path):
        email_service = _make_email_service(available=False)
        alerter = _alerter(tmp_path, email_service, threshold=1)

        await alerter.process_run(_summary(FetchOutcome.FAILED), SOURCES)

        email_service.send_email.assert_not_called()

    async def test_failed_delivery_does_not_raise(self, tmp_path):
        email_service = _make_email_service()
        email_service.send_email.return_value = EmailResult(
            success=False, error="SMTP error: refused"
        )
        alerter = _alerter(tmp_path, email_service, threshold=1)

        raised = await alerter.process_run(_summary(FetchOutcome.FAILED), SOURCES)

        assert raised == ["wazeJSON"]
