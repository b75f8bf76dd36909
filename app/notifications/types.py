from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Mapping, Optional


class ChannelKind(str, Enum):
    MAIL = "mail"
    TELEGRAM = "telegram"
    SLACK = "slack"


class MonitorStatus(str, Enum):
    UP = "UP"
    DOWN = "DOWN"

    @classmethod
    def parse(cls, value: Any) -> Optional["MonitorStatus"]:
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return None


@dataclass(frozen=True)
class MonitorChange:
    """Payload of a single monitor flip, as sent by the poller."""
    id: Any
    url: Optional[str]
    status: Optional[str]
    message: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "MonitorChange":
        return cls(
            id=data.get("id"),
            url=data.get("url"),
            status=data.get("status"),
            message=data.get("message"),
        )

    @property
    def parsed_status(self) -> Optional[MonitorStatus]:
        if self.status is None:
            return None
        return MonitorStatus.parse(self.status)

    @property
    def status_label(self) -> str:
        if self.status is None or not str(self.status).strip():
            return "UNKNOWN"
        return str(self.status)

    def to_dict(self) -> dict:
        return {"id": self.id, "url": self.url, "status": self.status, "message": self.message}


@dataclass(frozen=True)
class MailMessage:
    subject: str
    greeting: str
    intro_lines: List[str] = field(default_factory=list)
    action_text: Optional[str] = None
    action_url: Optional[str] = None
    outro_lines: List[str] = field(default_factory=list)

    def data(self) -> dict:
        return {
            "subject": self.subject,
            "greeting": self.greeting,
            "introLines": list(self.intro_lines),
            "actionText": self.action_text,
            "actionUrl": self.action_url,
            "outroLines": list(self.outro_lines),
        }

    def text_body(self) -> str:
        parts = [self.greeting, "", *self.intro_lines]
        if self.action_url:
            parts += ["", f"{self.action_text or self.action_url}: {self.action_url}"]
        if self.outro_lines:
            parts += ["", *self.outro_lines]
        return "\n".join(parts)


@dataclass(frozen=True)
class TelegramMessage:
    to: str
    content: str
    parse_mode: str = "Markdown"


@dataclass(frozen=True)
class SlackMessage:
    webhook_url: str
    text: str
