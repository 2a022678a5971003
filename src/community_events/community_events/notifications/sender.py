from __future__ import annotations

import logging
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class NotificationError(Exception):
    """Raised when a message could not be handed to the delivery channel."""


class NotificationSender(Protocol):
    def send_email(self, to: str, subject: str, body: str) -> None:
        raise NotImplementedError

    def send_sms(self, to: str, message: str) -> None:
        raise NotImplementedError


class LoggingNotificationSender(NotificationSender):
    """Development sender: writes messages to the log instead of delivering them."""

    def send_email(self, to: str, subject: str, body: str) -> None:
        logger.info("[email] to=%s subject=%s\n%s", to, subject, body)

    def send_sms(self, to: str, message: str) -> None:
        logger.info("[sms] to=%s %s", to, message)


class RoutingNotificationSender(NotificationSender):
    """Dispatches email and SMS to separate senders."""

    def __init__(self, *, email: NotificationSender, sms: Optional[NotificationSender] = None):
        self._email = email
        self._sms = sms or email

    def send_email(self, to: str, subject: str, body: str) -> None:
        self._email.send_email(to, subject, body)

    def send_sms(self, to: str, message: str) -> None:
        self._sms.send_sms(to, message)
