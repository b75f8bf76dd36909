import logging

import httpx

from app.notifications.providers.base import DeliveryError
from app.notifications.types import TelegramMessage

logger = logging.getLogger("notifications")


class TelegramBotProvider:
    def __init__(self, token: str, api_base: str = "https://api.telegram.org", timeout_s: float = 5.0, client: httpx.Client | None = None) -> None:
        self.token = token
        self.api_base = api_base.rstrip("/")
        self.timeout_s = timeout_s
        self.client = client or httpx.Client(timeout=timeout_s)

    def send(self, destination: str | None, message: TelegramMessage) -> None:
        chat_id = message.to or destination
        if not chat_id:
            raise DeliveryError("telegram: no chat id")
        try:
            resp = self.client.post(
                f"{self.api_base}/bot{self.token}/sendMessage",
                json={"chat_id": chat_id, "text": message.content, "parse_mode": message.parse_mode},
            )
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise DeliveryError(f"telegram: {exc}") from exc
        logger.info("telegram sent chat=%s", chat_id)
