from .notification_fixtures import (
    make_user,
    add_channel,
    down_event,
    up_event,
)

__all__ = [
    "make_user",
    "add_channel",
    "down_event",
    "up_event",
]
