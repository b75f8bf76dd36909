"""Monitor status-change notification.

One instance per (event, recipient fan-out). Rendering is per channel:
mail is unconditional, Telegram is gated by the injected rate limiter,
Slack needs only an enabled webhook row. Renderers are looked up by
``ChannelKind``; a resolved channel without a renderer is skipped.
"""
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from app.notifications import registry
from app.notifications.i18n import translate
from app.notifications.rate_limit import RateLimiter
from app.notifications.types import (
    ChannelKind,
    MailMessage,
    MonitorChange,
    MonitorStatus,
    SlackMessage,
    TelegramMessage,
)

logger = logging.getLogger("notifications")

NOTIFICATION_TYPE = "monitor_status_changed"

_GLYPHS = {
    MonitorStatus.DOWN: "🔴",
    MonitorStatus.UP: "🟢",
}
_NEUTRAL_GLYPH = "⚪"

# Telegram legacy Markdown: these open an entity unless backslash-escaped.
_MARKDOWN_SPECIAL = ("\\", "_", "*", "`", "[")
_SLACK_SPECIAL = (("&", "&amp;"), ("<", "&lt;"), (">", "&gt;"))


def escape_markdown(value: Any) -> str:
    text = "" if value is None else str(value)
    for ch in _MARKDOWN_SPECIAL:
        text = text.replace(ch, f"\\{ch}")
    return text


def escape_slack(value: Any) -> str:
    text = "" if value is None else str(value)
    for raw, entity in _SLACK_SPECIAL:
        text = text.replace(raw, entity)
    return text


class MonitorStatusChanged:
    def __init__(
        self,
        data: Mapping[str, Any],
        rate_limiter: RateLimiter,
        *,
        app_url: str = "http://localhost:8000",
        locale: str = "id",
    ) -> None:
        self.data = data
        self.event = MonitorChange.from_mapping(data)
        self.rate_limiter = rate_limiter
        self.app_url = app_url.rstrip("/")
        self.locale = locale
        self._renderers: Dict[ChannelKind, Callable[[Any], Optional[Any]]] = {
            ChannelKind.MAIL: self.to_mail,
            ChannelKind.TELEGRAM: self.to_telegram,
            ChannelKind.SLACK: self.to_slack,
        }

    def via(self, user: Any) -> List[str]:
        return registry.resolve_channels(user)

    def monitor_url(self) -> str:
        return f"{self.app_url}/monitors/{self.event.id}"

    def _headline(self) -> tuple[str, str]:
        status = self.event.parsed_status
        if status is None:
            return _NEUTRAL_GLYPH, f"Website status changed ({self.event.status_label})"
        return _GLYPHS[status], f"Website {status.value}"

    def to_mail(self, user: Any) -> MailMessage:
        name = getattr(user, "name", None) or translate("fallback_name", self.locale)
        status = self.event.status_label
        return MailMessage(
            subject=f"Website Status: {status}",
            greeting=translate("greeting", self.locale, name=name),
            intro_lines=[
                translate("preamble", self.locale),
                f"🔗 URL: {self.event.url}",
                f"⚠️ Status: {status}",
            ],
            action_text=translate("action", self.locale),
            action_url=self.monitor_url(),
        )

    def to_telegram(self, user: Any) -> Optional[TelegramMessage]:
        channel = registry.find_channel(user, ChannelKind.TELEGRAM.value)
        if channel is None or not channel.destination:
            return None
        with self.rate_limiter.hold(user, channel):
            if not self.rate_limiter.should_send_notification(user, channel):
                logger.info("telegram notification rate limited user=%s channel=%s", getattr(user, "id", None), channel.id)
                return None
            glyph, headline = self._headline()
            content = (
                f"{glyph} {escape_markdown(headline)}\n\n"
                f"URL: {escape_markdown(self.event.url)}\n"
                f"Status: *{escape_markdown(self.event.status_label)}*"
            )
            if self.event.message:
                content += f"\n\n{escape_markdown(self.event.message)}"
            message = TelegramMessage(to=channel.destination, content=content)
            self.rate_limiter.track_successful_notification(user, channel)
        return message

    def to_slack(self, user: Any) -> Optional[SlackMessage]:
        channel = registry.find_channel(user, ChannelKind.SLACK.value)
        if channel is None or not channel.destination:
            return None
        glyph, headline = self._headline()
        text = (
            f"{glyph} *{escape_slack(headline)}*\n"
            f"<{escape_slack(self.event.url)}>\n"
            f"Status: *{escape_slack(self.event.status_label)}*"
        )
        if self.event.message:
            text += f"\n{escape_slack(self.event.message)}"
        return SlackMessage(webhook_url=channel.destination, text=text)

    def to_array(self, user: Any) -> dict:
        return {"type": NOTIFICATION_TYPE, **self.event.to_dict()}

    def render(self, user: Any) -> Dict[str, Any]:
        rendered: Dict[str, Any] = {}
        for name in self.via(user):
            try:
                renderer = self._renderers[ChannelKind(name)]
            except (ValueError, KeyError):
                logger.debug("no renderer for channel %s, skipping", name)
                continue
            message = renderer(user)
            if message is not None:
                rendered[name] = message
        return rendered
