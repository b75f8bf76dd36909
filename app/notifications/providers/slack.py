import logging

import httpx

from app.notifications.providers.base import DeliveryError
from app.notifications.types import SlackMessage

logger = logging.getLogger("notifications")


class SlackWebhookProvider:
    def __init__(self, timeout_s: float = 5.0, client: httpx.Client | None = None) -> None:
        self.client = client or httpx.Client(timeout=timeout_s)

    def send(self, destination: str | None, message: SlackMessage) -> None:
        url = message.webhook_url or destination
        if not url:
            raise DeliveryError("slack: no webhook url")
        try:
            resp = self.client.post(url, json={"text": message.text})
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise DeliveryError(f"slack: {exc}") from exc
        logger.info("slack webhook delivered")
