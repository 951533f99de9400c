"""
notifications/sender.py
Delivers composed emails through the Resend HTTP API.
"""
from typing import Optional

import httpx

from config.settings import Settings
from monitoring import get_logger
from notifications.composer import EmailMessage

log = get_logger(__name__)


class NotificationError(Exception):
    pass


class ResendEmailSender:

    def __init__(
        self,
        api_key: str,
        recipients: list[str],
        sender: str,
        api_url: str = "https://api.resend.com/emails",
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._api_key    = api_key
        self._recipients = recipients
        self._sender     = sender
        self._api_url    = api_url
        self._client     = client or httpx.Client(timeout=timeout)

    def send(self, message: EmailMessage) -> Optional[str]:
        """Send one email; returns the provider message id."""
        payload = {
            "from":    self._sender,
            "to":      self._recipients,
            "subject": message.subject,
            "html":    message.html,
        }
        try:
            resp = self._client.post(
                self._api_url,
                json=payload,
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
        except httpx.HTTPError as exc:
            raise NotificationError(f"Email request failed: {exc}") from exc

        if not resp.is_success:
            raise NotificationError(f"Email rejected ({resp.status_code}): {resp.text[:200]}")

        try:
            body = resp.json()
        except ValueError:
            # accepted, but the provider sent no JSON body to read an id from
            body = None
        message_id = body.get("id") if isinstance(body, dict) else None
        log.info("Lead email sent", message_id=message_id, recipients=len(self._recipients))
        return message_id


class NullSender:
    """Used when no email provider is configured."""

    def send(self, message: EmailMessage) -> Optional[str]:
        log.info("Email delivery disabled, dropping message", subject=message.subject)
        return None


def build_sender(settings: Settings):
    if not settings.resend_api_key or not settings.notify_to:
        return NullSender()
    return ResendEmailSender(
        api_key=settings.resend_api_key,
        recipients=settings.notify_to,
        sender=settings.notify_from,
        api_url=settings.resend_api_url,
        timeout=settings.notify_timeout_seconds,
    )
