"""Resolution of a user's stored channel records into dispatchable channels.

Channel rows carry the type string chosen in the settings UI. Most types
are already the channel name used by the renderers; ``email`` is the one
alias (stored as ``email``, rendered and delivered as ``mail``). Unknown
types pass through untouched so new channels can be stored before a
renderer exists for them.
"""
from typing import Any, Iterable, List, Optional

from app.notifications.types import ChannelKind

CHANNEL_ALIASES = {
    "email": ChannelKind.MAIL.value,
}


def canonical_channel(channel_type: str) -> str:
    key = (channel_type or "").strip().lower()
    return CHANNEL_ALIASES.get(key, key)


def _enabled(user: Any) -> Iterable[Any]:
    for channel in getattr(user, "notification_channels", None) or []:
        if channel.is_enabled:
            yield channel


def resolve_channels(user: Any) -> List[str]:
    seen: List[str] = []
    for channel in _enabled(user):
        name = canonical_channel(channel.type)
        if name and name not in seen:
            seen.append(name)
    return seen


def find_channel(user: Any, name: str) -> Optional[Any]:
    """First enabled record that resolves to ``name``; duplicates after it are ignored."""
    wanted = canonical_channel(name)
    for channel in _enabled(user):
        if canonical_channel(channel.type) == wanted:
            return channel
    return None


def destination_for(user: Any, name: str) -> Optional[str]:
    channel = find_channel(user, name)
    destination = channel.destination if channel is not None else None
    if not destination and canonical_channel(name) == ChannelKind.MAIL.value:
        return getattr(user, "email", None)
    return destination
