import logging
from typing import Any


class LogNotificationProvider:
    def __init__(self, channel: str = "log") -> None:
        self.channel = channel

    def send(self, destination: str | None, message: Any) -> None:
        logging.getLogger("notifications").info("notify %s -> %s %r", self.channel, destination, message)
