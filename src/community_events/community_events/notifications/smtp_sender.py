from __future__ import annotations

import asyncio
import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import aiosmtplib

from .sender import NotificationError, NotificationSender

logger = logging.getLogger(__name__)


class SmtpNotificationSender(NotificationSender):
    """Sends HTML email over SMTP with STARTTLS. SMS is not supported."""

    def __init__(
        self,
        *,
        host: str,
        port: int,
        username: str = "",
        password: str = "",
        sender: str,
        start_tls: bool = True,
        timeout: float = 10.0,
    ):
        self._host = host
        self._port = int(port)
        self._username = username or None
        self._password = password or None
        self._sender = sender
        self._start_tls = start_tls
        self._timeout = timeout

    def _build_message(self, to: str, subject: str, body: str) -> MIMEMultipart:
        message = MIMEMultipart("alternative")
        message["Subject"] = subject
        message["From"] = self._sender
        message["To"] = to
        message.attach(MIMEText(body, "html"))
        return message

    async def _send(self, message: MIMEMultipart) -> None:
        await aiosmtplib.send(
            message,
            hostname=self._host,
            port=self._port,
            username=self._username,
            password=self._password,
            start_tls=self._start_tls,
            timeout=self._timeout,
        )

    def send_email(self, to: str, subject: str, body: str) -> None:
        try:
            asyncio.run(self._send(self._build_message(to, subject, body)))
        except (aiosmtplib.SMTPException, OSError) as exc:
            logger.error("Email to %s failed: %s", to, exc)
            raise NotificationError("Failed to send email") from exc
        logger.info("Email sent to %s", to)

    def send_sms(self, to: str, message: str) -> None:
        raise NotificationError("SMTP sender cannot deliver SMS")
