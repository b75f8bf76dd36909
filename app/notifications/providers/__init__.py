from app.notifications.providers.base import DeliveryError, NotificationProvider
from app.notifications.providers.log_only import LogNotificationProvider
from app.notifications.providers.email_smtp import SmtpMailProvider
from app.notifications.providers.telegram import TelegramBotProvider
from app.notifications.providers.slack import SlackWebhookProvider

__all__ = [
    "DeliveryError",
    "NotificationProvider",
    "LogNotificationProvider",
    "SmtpMailProvider",
    "TelegramBotProvider",
    "SlackWebhookProvider",
]
