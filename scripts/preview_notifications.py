import logging
import sys
import uuid
from types import SimpleNamespace

from app.core.config import settings
from app.notifications.rate_limit import InMemoryRateLimiter
from app.notifications.status_changed import MonitorStatusChanged


def _demo_user() -> SimpleNamespace:
    channels = [
        SimpleNamespace(id=uuid.uuid4(), type="email", is_enabled=True, destination=None),
        SimpleNamespace(id=uuid.uuid4(), type="telegram", is_enabled=True, destination="123456789"),
        SimpleNamespace(id=uuid.uuid4(), type="slack", is_enabled=True, destination="https://hooks.slack.com/services/demo"),
    ]
    return SimpleNamespace(id=uuid.uuid4(), name="Demo User", email="demo@example.com", notification_channels=channels)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    status = sys.argv[1] if len(sys.argv) > 1 else "DOWN"
    event = {"id": 1, "url": "https://example.com", "status": status, "message": f"Website https://example.com is {status}"}
    limiter = InMemoryRateLimiter(settings.NOTIFY_TELEGRAM_COOLDOWN_S)
    notification = MonitorStatusChanged(event, limiter, app_url=settings.APP_URL, locale=settings.NOTIFY_LOCALE)
    user = _demo_user()
    print("channels:", notification.via(user))
    for channel, message in notification.render(user).items():
        print(f"--- {channel}")
        print(message)
    print("second telegram render (rate limited):", notification.to_telegram(user))
