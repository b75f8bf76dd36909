"""Cool-down bookkeeping for noisy channels.

A key is the (user, channel record) pair. Tracking overwrites the last
send time; a send is allowed once ``cooldown_s`` has elapsed since it.
Any failure to read the store counts as "no record", so alerts are never
lost because the limiter is down.
"""
import logging
import threading
import time
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Protocol

from redis import Redis
from redis.exceptions import LockError, RedisError

from app.notifications.config import NotificationsConfig

logger = logging.getLogger("notifications")


class RateLimiter(Protocol):
    def should_send_notification(self, user: Any, channel: Any) -> bool:
        ...

    def track_successful_notification(self, user: Any, channel: Any) -> None:
        ...

    def hold(self, user: Any, channel: Any):
        ...


def rate_limit_key(user: Any, channel: Any) -> str:
    return f"{getattr(user, 'id', user)}:{getattr(channel, 'id', channel)}"


class InMemoryRateLimiter:
    def __init__(self, cooldown_s: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.cooldown_s = cooldown_s
        self._clock = clock
        self._last_sent: dict[str, float] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def should_send_notification(self, user: Any, channel: Any) -> bool:
        last = self._last_sent.get(rate_limit_key(user, channel))
        if last is None:
            return True
        return self._clock() - last >= self.cooldown_s

    def track_successful_notification(self, user: Any, channel: Any) -> None:
        now = self._clock()
        with self._guard:
            # only records still inside the cool-down are kept
            self._last_sent = {k: ts for k, ts in self._last_sent.items() if now - ts < self.cooldown_s}
            self._last_sent[rate_limit_key(user, channel)] = now

    @contextmanager
    def hold(self, user: Any, channel: Any) -> Iterator[None]:
        key = rate_limit_key(user, channel)
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
        with lock:
            yield


class RedisRateLimiter:
    def __init__(self, client: Redis, cooldown_s: int, prefix: str = "notify:ratelimit", lock_timeout_s: float = 10.0) -> None:
        self.client = client
        self.cooldown_s = cooldown_s
        self.prefix = prefix
        self.lock_timeout_s = lock_timeout_s

    def _key(self, user: Any, channel: Any) -> str:
        return f"{self.prefix}:{rate_limit_key(user, channel)}"

    def should_send_notification(self, user: Any, channel: Any) -> bool:
        try:
            return not self.client.exists(self._key(user, channel))
        except RedisError as exc:
            logger.warning("rate limit lookup failed, allowing send: %s", exc)
            return True

    def track_successful_notification(self, user: Any, channel: Any) -> None:
        try:
            self.client.set(self._key(user, channel), f"{time.time():.3f}", ex=max(int(self.cooldown_s), 1))
        except RedisError as exc:
            logger.warning("rate limit tracking failed for %s: %s", self._key(user, channel), exc)

    @contextmanager
    def hold(self, user: Any, channel: Any) -> Iterator[None]:
        lock = self.client.lock(
            f"{self._key(user, channel)}:lock",
            timeout=self.lock_timeout_s,
            blocking_timeout=self.lock_timeout_s,
        )
        try:
            acquired = lock.acquire()
        except RedisError as exc:
            logger.warning("rate limit lock unavailable for %s: %s", self._key(user, channel), exc)
            acquired = False
        else:
            if not acquired:
                logger.warning(
                    "rate limit lock for %s not acquired within %.1fs, proceeding without it",
                    self._key(user, channel),
                    self.lock_timeout_s,
                )
        try:
            yield
        finally:
            if acquired:
                try:
                    lock.release()
                except (LockError, RedisError) as exc:
                    logger.warning("rate limit lock release failed: %s", exc)


def build_rate_limiter(config: NotificationsConfig, client: Redis | None = None) -> RateLimiter:
    if config.rate_limit_backend == "redis":
        if client is None:
            from app.core.cache import get_redis

            client = get_redis()
        return RedisRateLimiter(client, config.telegram_cooldown_s, prefix=config.rate_limit_prefix)
    return InMemoryRateLimiter(config.telegram_cooldown_s)
