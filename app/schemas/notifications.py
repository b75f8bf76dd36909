from datetime import datetime
from typing import Any, List, Optional
from pydantic import BaseModel, Field


class NotificationOut(BaseModel):
    id: str
    type: str
    data: dict
    channels: List[str] | None = None
    read_at: datetime | None = None
    created_at: datetime | None = None


class NotificationsOut(BaseModel):
    items: List[NotificationOut]


class MonitorStatusIn(BaseModel):
    id: Any
    url: str
    status: str = Field(..., description="UP or DOWN")
    message: Optional[str] = None
    user_ids: Optional[List[str]] = None


class MonitorStatusAccepted(BaseModel):
    queued: bool
    task_id: Optional[str] = None


class SubscriptionOut(BaseModel):
    monitor_id: int
    subscribed: bool
    changed: bool
