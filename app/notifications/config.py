from dataclasses import dataclass
from typing import Optional

from app.core.config import Settings, settings as app_settings


@dataclass(frozen=True)
class NotificationsConfig:
    app_url: str = "http://localhost:8000"
    locale: str = "id"
    rate_limit_backend: str = "memory"
    telegram_cooldown_s: int = 300
    rate_limit_prefix: str = "notify:ratelimit"
    mail_provider: str = "log"
    telegram_provider: str = "log"
    slack_provider: str = "log"
    http_timeout_s: float = 5.0
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_username: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_use_tls: bool = True
    mail_from: str = "alerts@localhost"
    telegram_bot_token: Optional[str] = None
    telegram_api_base: str = "https://api.telegram.org"

    @classmethod
    def from_settings(cls, s: Settings | None = None) -> "NotificationsConfig":
        s = s or app_settings
        return cls(
            app_url=s.APP_URL,
            locale=s.NOTIFY_LOCALE,
            rate_limit_backend=s.NOTIFY_RATE_LIMIT_BACKEND,
            telegram_cooldown_s=s.NOTIFY_TELEGRAM_COOLDOWN_S,
            rate_limit_prefix=s.NOTIFY_RATE_LIMIT_PREFIX,
            mail_provider=s.NOTIFY_MAIL_PROVIDER,
            telegram_provider=s.NOTIFY_TELEGRAM_PROVIDER,
            slack_provider=s.NOTIFY_SLACK_PROVIDER,
            http_timeout_s=s.NOTIFY_HTTP_TIMEOUT_S,
            smtp_host=s.SMTP_HOST,
            smtp_port=s.SMTP_PORT,
            smtp_username=s.SMTP_USERNAME,
            smtp_password=s.SMTP_PASSWORD,
            smtp_use_tls=s.SMTP_USE_TLS,
            mail_from=s.MAIL_FROM,
            telegram_bot_token=s.TELEGRAM_BOT_TOKEN,
            telegram_api_base=s.TELEGRAM_API_BASE,
        )
