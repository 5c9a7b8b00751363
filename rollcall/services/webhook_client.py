# rollcall/services/webhook_client.py
from typing import Optional

import requests

from rollcall.config import get_settings


class WebhookClient:
    """
    Thin wrapper around a chat webhook (Discord/Slack style JSON POST).

    This makes it easy to:
    - centralize config (URL, timeout)
    - mock in tests by replacing this class with a fake.
    """

    def __init__(self, url: str, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self._url = url
        self._timeout = timeout
        self._session = session or requests.Session()

    def send_message(self, content: str) -> int:
        """
        POST one message and return the HTTP status code.
        Raises requests.RequestException on transport errors or non-2xx replies.
        """
        resp = self._session.post(
            self._url,
            json={"content": content},
            timeout=self._timeout,
        )
        resp.raise_for_status()
        return resp.status_code


def get_webhook_client() -> WebhookClient:
    """
    FastAPI dependency to get a configured WebhookClient.
    Raises RuntimeError if WEBHOOK_URL is not set.
    """
    settings = get_settings()

    if not settings.WEBHOOK_URL:
        raise RuntimeError("Webhook not configured, missing: WEBHOOK_URL")

    return WebhookClient(url=settings.WEBHOOK_URL, timeout=settings.WEBHOOK_TIMEOUT_SECONDS)


def get_optional_webhook_client() -> Optional[WebhookClient]:
    """Like get_webhook_client, but None when no webhook is configured."""
    try:
        return get_webhook_client()
    except RuntimeError:
        return None
