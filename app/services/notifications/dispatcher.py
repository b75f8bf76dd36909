import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping

from app.notifications import registry
from app.notifications.config import NotificationsConfig
from app.notifications.providers.base import DeliveryError
from app.notifications.rate_limit import RateLimiter
from app.notifications.status_changed import MonitorStatusChanged
from app.services.notifications.service import NotificationService

logger = logging.getLogger("notifications")


@dataclass
class DeliveryReport:
    user_id: str
    record: dict
    delivered: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


def dispatch_to_user(notification: MonitorStatusChanged, user: Any, service: NotificationService) -> DeliveryReport:
    report = DeliveryReport(user_id=str(getattr(user, "id", "")), record=notification.to_array(user))
    for channel, message in notification.render(user).items():
        destination = registry.destination_for(user, channel)
        try:
            if service.send(channel, destination, message):
                report.delivered.append(channel)
        except DeliveryError as exc:
            logger.warning("delivery failed user=%s channel=%s: %s", report.user_id, channel, exc)
            report.failed.append(channel)
    return report


def dispatch_status_change(
    data: Mapping[str, Any],
    users: Iterable[Any],
    *,
    rate_limiter: RateLimiter,
    service: NotificationService | None = None,
    config: NotificationsConfig | None = None,
) -> List[DeliveryReport]:
    config = config or (service.config if service else NotificationsConfig.from_settings())
    service = service or NotificationService(config)
    reports = []
    for user in users:
        notification = MonitorStatusChanged(data, rate_limiter, app_url=config.app_url, locale=config.locale)
        reports.append(dispatch_to_user(notification, user, service))
    return reports
