from __future__ import annotations

import logging
from typing import Optional

import requests

from .sender import NotificationError, NotificationSender

logger = logging.getLogger(__name__)


class HttpSmsNotificationSender(NotificationSender):
    """Sends SMS through a Twilio-compatible REST endpoint.

    POST {base_url}/Accounts/{account_sid}/Messages.json with form fields To, From, Body,
    authenticated with HTTP basic auth.
    """

    def __init__(
        self,
        *,
        base_url: str,
        account_sid: str,
        auth_token: str,
        from_number: str,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self._url = f"{base_url.rstrip('/')}/Accounts/{account_sid}/Messages.json"
        self._auth = (account_sid, auth_token)
        self._from = from_number
        self._timeout = timeout
        self._session = session or requests.Session()

    def send_sms(self, to: str, message: str) -> None:
        try:
            resp = self._session.post(
                self._url,
                data={"To": to, "From": self._from, "Body": message},
                auth=self._auth,
                timeout=self._timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as exc:
            logger.error("SMS to %s failed: %s", to, exc)
            raise NotificationError("Failed to send SMS") from exc
        logger.info("SMS sent to %s", to)

    def send_email(self, to: str, subject: str, body: str) -> None:
        raise NotificationError("SMS sender cannot deliver email")
