"""
Outbound email over SMTP (aiosmtplib).

Sending never raises: failures are logged and reported as False so that a
mail outage cannot fail the business operation that triggered it.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Iterable, List, Optional

import aiosmtplib

from app.core.config import settings

logger = logging.getLogger("vodichron.email")


@dataclass
class BulkSendResult:
    success_count: int = 0
    failed_count: int = 0
    failed_emails: List[str] = field(default_factory=list)


class EmailService:
    """Async SMTP email sender configured from settings."""

    def __init__(self):
        self.smtp_host = settings.SMTP_HOST
        self.smtp_port = settings.SMTP_PORT
        self.smtp_user = settings.SMTP_USER
        self.smtp_password = settings.SMTP_PASSWORD
        self.from_email = settings.SMTP_FROM_EMAIL
        self.from_name = settings.SMTP_FROM_NAME
        self.use_tls = settings.SMTP_USE_TLS

    @property
    def is_configured(self) -> bool:
        return bool(self.smtp_host)

    def _build_message(self, to: Iterable[str], subject: str, html_content: str, text_content: Optional[str]) -> MIMEMultipart:
        message = MIMEMultipart("alternative")
        message["From"] = f"{self.from_name} <{self.from_email}>"
        message["To"] = ", ".join(to)
        message["Subject"] = subject
        if text_content:
            message.attach(MIMEText(text_content, "plain"))
        message.attach(MIMEText(html_content, "html"))
        return message

    async def send_email(
        self,
        to: str | List[str],
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
    ) -> bool:
        """
        Send one message to one or more recipients.

        Returns True if the SMTP server accepted it, False otherwise.
        """
        recipients = [to] if isinstance(to, str) else [r for r in to if r]
        if not recipients:
            logger.warning(f"No recipients for email '{subject}', skipping")
            return False

        if not self.is_configured:
            logger.info(f"SMTP not configured, skipping email '{subject}' to {recipients}")
            return False

        message = self._build_message(recipients, subject, html_content, text_content)
        try:
            await aiosmtplib.send(
                message,
                hostname=self.smtp_host,
                port=self.smtp_port,
                username=self.smtp_user,
                password=self.smtp_password,
                start_tls=self.use_tls,
                timeout=30,
            )
            logger.info(f"Sent email '{subject}' to {recipients}")
            return True
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email '{subject}' to {recipients}: {e}")
            return False

    async def send_bulk(
        self,
        recipients: List[str],
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
    ) -> BulkSendResult:
        """Send the same message to each recipient individually, continuing past failures."""
        result = BulkSendResult()
        for email in recipients:
            if not email:
                continue
            if await self.send_email(email, subject, html_content, text_content):
                result.success_count += 1
            else:
                result.failed_count += 1
                result.failed_emails.append(email)
            await asyncio.sleep(0.1)

        logger.info(
            f"Bulk email '{subject}': {result.success_count} sent, {result.failed_count} failed"
        )
        return result


_email_service: Optional[EmailService] = None


def get_email_service() -> EmailService:
    global _email_service
    if _email_service is None:
        _email_service = EmailService()
    return _email_service
