from typing import Any, Protocol


class DeliveryError(Exception):
    """Raised by a provider when the transport rejected or failed a send."""


class NotificationProvider(Protocol):
    def send(self, destination: str | None, message: Any) -> None:
        ...
