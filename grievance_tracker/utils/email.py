# grievance_tracker/utils/email.py
from __future__ import annotations

"""
Email utilities: configuration, message structure, and SMTP-based sending.

This module provides:
- EmailMessage: validated email message dataclass.
- EmailConfig: SMTP configuration taken from settings.
- send_email: blocking SMTP delivery.
- EmailTransport: best-effort, fire-and-forget delivery on a small
  thread pool so callers never wait on the SMTP server.
"""

import smtplib
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from email.mime.text import MIMEText
from typing import Optional

from grievance_tracker.config.settings import Settings, settings
from grievance_tracker.core.exceptions import EmailServiceError
from grievance_tracker.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class EmailMessage:
    """Plain-text message for a single recipient."""
    to: str
    subject: str
    body: str

    def __post_init__(self) -> None:
        if not self.to or "@" not in self.to:
            raise EmailServiceError(f"Invalid recipient email: {self.to}")
        if not self.subject.strip():
            raise EmailServiceError("Subject cannot be empty")


@dataclass
class EmailConfig:
    """Email configuration."""
    smtp_host: Optional[str]
    smtp_port: int = 587
    username: Optional[str] = None
    password: Optional[str] = None
    use_tls: bool = True
    from_email: str = "noreply@resolveit.com"
    timeout: int = 10

    @classmethod
    def from_settings(cls, app_settings: Optional[Settings] = None) -> EmailConfig:
        s = app_settings or settings
        return cls(
            smtp_host=s.SMTP_HOST,
            smtp_port=s.SMTP_PORT,
            username=s.SMTP_USERNAME,
            password=s.SMTP_PASSWORD,
            use_tls=s.SMTP_USE_TLS,
            from_email=s.EMAIL_FROM_ADDRESS,
            timeout=s.SMTP_TIMEOUT_SECONDS,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.smtp_host)


def send_email(message: EmailMessage, config: EmailConfig) -> None:
    """Send an email using SMTP."""
    msg = MIMEText(message.body, "plain")
    msg["Subject"] = message.subject
    msg["From"] = config.from_email
    msg["To"] = message.to

    try:
        with smtplib.SMTP(config.smtp_host, config.smtp_port, timeout=config.timeout) as server:
            if config.use_tls:
                server.starttls()
            if config.username and config.password:
                server.login(config.username, config.password)
            server.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        raise EmailServiceError(f"Failed to send email: {e}", details={"to": message.to}) from e

    logger.info(f"Email sent to {message.to}")


class EmailTransport:
    """
    Best-effort asynchronous e-mail delivery.

    ``send`` returns immediately; delivery happens on the transport's own
    executor. Failures are logged and never reach the caller. When SMTP is
    not configured messages are logged and dropped.
    """

    def __init__(self, config: Optional[EmailConfig] = None, max_workers: Optional[int] = None):
        self.config = config or EmailConfig.from_settings()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or settings.EMAIL_WORKERS,
            thread_name_prefix="email",
        )

    def send(self, to: str, subject: str, body: str) -> Optional[Future]:
        """
        Queue a message for delivery.

        Args:
            to: Recipient address
            subject: Subject line
            body: Plain-text body

        Returns:
            The delivery future, or None if the message was not queued
        """
        if not self.config.is_configured:
            logger.warning(f"Email service not configured. Skipping email to {to}")
            return None

        try:
            message = EmailMessage(to=to, subject=subject, body=body)
        except EmailServiceError as e:
            logger.warning(f"Email not queued: {e.message}")
            return None

        future = self._executor.submit(self._deliver, message)
        return future

    def _deliver(self, message: EmailMessage) -> bool:
        try:
            send_email(message, self.config)
            return True
        except EmailServiceError as e:
            logger.error(f"Failed to send email to {message.to}: {e.message}")
            return False

    def shutdown(self, wait: bool = False) -> None:
        self._executor.shutdown(wait=wait)


_default_transport: Optional[EmailTransport] = None


def get_email_transport() -> EmailTransport:
    """Process-wide transport shared by request handlers."""
    global _default_transport
    if _default_transport is None:
        _default_transport = EmailTransport()
    return _default_transport


def shutdown_email_transport(wait: bool = False) -> None:
    """Stop the shared transport; the next ``get_email_transport`` builds a new one."""
    global _default_transport
    if _default_transport is not None:
        _default_transport.shutdown(wait=wait)
        _default_transport = None
