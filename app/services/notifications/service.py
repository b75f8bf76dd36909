import logging
from typing import Any, Dict

from app.notifications.config import NotificationsConfig
from app.notifications.providers.base import NotificationProvider
from app.notifications.providers.log_only import LogNotificationProvider
from app.notifications.providers.email_smtp import SmtpMailProvider
from app.notifications.providers.slack import SlackWebhookProvider
from app.notifications.providers.telegram import TelegramBotProvider
from app.notifications.types import ChannelKind

logger = logging.getLogger("notifications")


class NotificationService:
    def __init__(self, config: NotificationsConfig | None = None, providers: Dict[str, NotificationProvider] | None = None) -> None:
        self.config = config or NotificationsConfig.from_settings()
        self.providers: Dict[str, NotificationProvider] = providers if providers is not None else self._default_providers()

    def _default_providers(self) -> Dict[str, NotificationProvider]:
        cfg = self.config
        providers: Dict[str, NotificationProvider] = {}
        if cfg.mail_provider == "smtp" and cfg.smtp_host:
            providers[ChannelKind.MAIL.value] = SmtpMailProvider(
                cfg.smtp_host,
                port=cfg.smtp_port,
                username=cfg.smtp_username,
                password=cfg.smtp_password,
                use_tls=cfg.smtp_use_tls,
                sender=cfg.mail_from,
                timeout_s=cfg.http_timeout_s,
            )
        else:
            providers[ChannelKind.MAIL.value] = LogNotificationProvider(ChannelKind.MAIL.value)
        if cfg.telegram_provider == "bot" and cfg.telegram_bot_token:
            providers[ChannelKind.TELEGRAM.value] = TelegramBotProvider(
                cfg.telegram_bot_token, api_base=cfg.telegram_api_base, timeout_s=cfg.http_timeout_s
            )
        else:
            providers[ChannelKind.TELEGRAM.value] = LogNotificationProvider(ChannelKind.TELEGRAM.value)
        if cfg.slack_provider == "webhook":
            providers[ChannelKind.SLACK.value] = SlackWebhookProvider(timeout_s=cfg.http_timeout_s)
        else:
            providers[ChannelKind.SLACK.value] = LogNotificationProvider(ChannelKind.SLACK.value)
        return providers

    def send(self, channel: str, destination: str | None, message: Any) -> bool:
        provider = self.providers.get(channel)
        if provider is None:
            logger.debug("no provider for channel %s, dropping message", channel)
            return False
        provider.send(destination, message)
        return True
