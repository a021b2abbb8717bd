# backend/ldgrowth/services/email_service.py
"""
Email service - SMTP delivery for evaluation emails.

smtplib is blocking, so each send runs in a worker thread and is wrapped in
the shared retry policy. Email is disabled when no SMTP host is configured.
"""

import asyncio
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from ..config import settings
from ..enums import LogEmoji, LoggerName, LogSource
from ..exceptions import EmailDeliveryError
from ..utils.retry import RetryPolicy, with_retry
from .logger import get_service_logger

logger = get_service_logger(
    LoggerName.EMAIL_SERVICE, LogSource.SYSTEM, default_emoji=LogEmoji.EMAIL
)

SMTP_TIMEOUT_SECONDS = 30


class EmailService:
    """Outgoing email over SMTP."""

    def __init__(self, retry_policy: Optional[RetryPolicy] = None):
        base = retry_policy or RetryPolicy.from_settings()
        self.retry_policy = RetryPolicy(
            max_attempts=base.max_attempts,
            delay_seconds=base.delay_seconds,
            retry_on=(smtplib.SMTPException, OSError),
        )

    @property
    def enabled(self) -> bool:
        return settings.email_enabled

    def _build_message(
        self, to: str, subject: str, html_body: str, text_body: str
    ) -> MIMEMultipart:
        message = MIMEMultipart("alternative")
        message.attach(MIMEText(text_body, "plain"))
        message.attach(MIMEText(html_body, "html"))
        message["From"] = settings.smtp_from_email
        message["To"] = to
        message["Subject"] = subject
        return message

    def _send_sync(self, message: MIMEMultipart, to: str) -> None:
        with smtplib.SMTP(
            settings.smtp_host, settings.smtp_port, timeout=SMTP_TIMEOUT_SECONDS
        ) as server:
            if settings.smtp_use_tls:
                server.starttls()
            if settings.smtp_username:
                server.login(settings.smtp_username, settings.smtp_password)
            server.sendmail(settings.smtp_from_email, [to], message.as_string())

    async def send_email(
        self, to: str, subject: str, html_body: str, text_body: str
    ) -> bool:
        """
        Send an email.

        Returns:
            True if sent, False if email is disabled

        Raises:
            EmailDeliveryError: Every attempt failed
        """
        if not self.enabled:
            logger.debug(f"Email disabled, not sending '{subject}' to {to}")
            return False

        message = self._build_message(to, subject, html_body, text_body)
        try:
            await with_retry(
                lambda: asyncio.to_thread(self._send_sync, message, to),
                self.retry_policy,
                operation_name="send_email",
            )
        except (smtplib.SMTPException, OSError) as e:
            raise EmailDeliveryError(
                f"Failed to send email to {to}: {e}",
                context={"to": to, "subject": subject},
            ) from e

        logger.info(f"Sent '{subject}' to {to}")
        return True
