"""SMTP email delivery.

Provides:
- SMTP provider (TLS/SSL, authentication)
- Async wrapper running the blocking send in the default executor
"""

import asyncio
import smtplib
import ssl
from dataclasses import dataclass
from datetime import UTC, datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from loguru import logger

from sadaksathi.core.config import settings


@dataclass
class EmailResult:
    """Email send result."""

    success: bool
    message_id: str | None = None
    error: str | None = None


class SMTPProvider:
    """SMTP email provider."""

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        user: str | None = None,
        password: str | None = None,
        use_tls: bool | None = None,
        use_ssl: bool | None = None,
        from_email: str | None = None,
        from_name: str | None = None,
    ):
        self.host = host or settings.SMTP_HOST
        self.port = port or settings.SMTP_PORT
        self.user = user or settings.SMTP_USER
        self.password = password or settings.SMTP_PASSWORD
        self.use_tls = use_tls if use_tls is not None else settings.SMTP_TLS
        self.use_ssl = use_ssl if use_ssl is not None else settings.SMTP_SSL
        self.from_email = from_email or settings.EMAILS_FROM_EMAIL or self.user
        self.from_name = from_name or settings.EMAILS_FROM_NAME or settings.PROJECT_NAME

    def is_configured(self) -> bool:
        """Check if SMTP is properly configured."""
        return bool(self.host and self.from_email)

    def _create_connection(self) -> smtplib.SMTP | smtplib.SMTP_SSL:
        if self.use_ssl:
            context = ssl.create_default_context()
            server = smtplib.SMTP_SSL(self.host, self.port, context=context)
        else:
            server = smtplib.SMTP(self.host, self.port)
            if self.use_tls:
                context = ssl.create_default_context()
                server.starttls(context=context)

        if self.user and self.password:
            server.login(self.user, self.password)

        return server

    def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        plain_body: str | None = None,
    ) -> EmailResult:
        """Send email synchronously.

        Args:
            to_email: Recipient email
            subject: Email subject
            html_body: HTML body
            plain_body: Plain text fallback

        Returns:
            EmailResult with success status
        """
        if not self.is_configured():
            return EmailResult(success=False, error="SMTP not configured")

        try:
            msg = MIMEMultipart("alternative")
            msg["Subject"] = subject
            msg["From"] = f"{self.from_name} <{self.from_email}>"
            msg["To"] = to_email
            msg["Date"] = datetime.now(UTC).strftime("%a, %d %b %Y %H:%M:%S +0000")

            if plain_body:
                msg.attach(MIMEText(plain_body, "plain", "utf-8"))
            msg.attach(MIMEText(html_body, "html", "utf-8"))

            with self._create_connection() as server:
                server.send_message(msg)

            logger.info(f"Email sent successfully to {to_email}")
            return EmailResult(success=True, message_id=msg.get("Message-ID"))

        except smtplib.SMTPAuthenticationError as e:
            logger.error(f"SMTP authentication failed: {e}")
            return EmailResult(success=False, error=f"Authentication failed: {e}")
        except smtplib.SMTPRecipientsRefused as e:
            logger.error(f"Recipient refused: {to_email}")
            return EmailResult(success=False, error=f"Recipient refused: {e}")
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP error: {e}")
            return EmailResult(success=False, error=f"SMTP error: {e}")


class EmailService:
    """Best-effort email sending on top of an SMTP provider."""

    def __init__(self, provider: SMTPProvider | None = None, enabled: bool | None = None):
        self.provider = provider or SMTPProvider()
        self.enabled = settings.EMAIL_ENABLED if enabled is None else enabled

    def is_available(self) -> bool:
        """Email is enabled and the provider is configured."""
        return self.enabled and self.provider.is_configured()

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        plain_body: str | None = None,
    ) -> EmailResult:
        """Send one email without blocking the event loop."""
        if not self.is_available():
            logger.warning("Email service not available")
            return EmailResult(success=False, error="Email service not available")

        return await asyncio.get_running_loop().run_in_executor(
            None,
            self.provider.send,
            to_email,
            subject,
            html_body,
            plain_body,
        )
