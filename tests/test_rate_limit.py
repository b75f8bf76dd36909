import threading

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from app.notifications.config import NotificationsConfig
from app.notifications.rate_limit import (
    InMemoryRateLimiter,
    RedisRateLimiter,
    build_rate_limiter,
    rate_limit_key,
)
from tests.fixtures.notification_fixtures import add_channel, make_user


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeRedis:
    def __init__(self):
        self.store: dict[str, str] = {}
        self.expiry: dict[str, int] = {}
        self.locks: list[str] = []

    def exists(self, key):
        return int(key in self.store)

    def set(self, key, value, ex=None):
        self.store[key] = value
        self.expiry[key] = ex
        return True

    def lock(self, name, timeout=None, blocking_timeout=None):
        parent = self

        class _Lock:
            def acquire(self):
                parent.locks.append(name)
                return True

            def release(self):
                parent.locks.remove(name)

        return _Lock()


class BrokenRedis:
    def exists(self, key):
        raise RedisConnectionError("down")

    def set(self, key, value, ex=None):
        raise RedisConnectionError("down")

    def lock(self, name, timeout=None, blocking_timeout=None):
        class _Lock:
            def acquire(self):
                raise RedisConnectionError("down")

            def release(self):
                raise AssertionError("never acquired")

        return _Lock()


class BusyRedis(FakeRedis):
    """Lock is held elsewhere for the whole blocking timeout."""

    def lock(self, name, timeout=None, blocking_timeout=None):
        class _Lock:
            def acquire(self):
                return False

            def release(self):
                raise AssertionError("never acquired")

        return _Lock()


@pytest.fixture
def user_and_channel():
    user = make_user()
    channel = add_channel(user, "telegram", destination="123456789")
    return user, channel


def test_first_send_is_allowed(user_and_channel):
    limiter = InMemoryRateLimiter(cooldown_s=60, clock=FakeClock())
    assert limiter.should_send_notification(*user_and_channel) is True


def test_tracked_send_blocks_until_cooldown_passes(user_and_channel):
    clock = FakeClock()
    limiter = InMemoryRateLimiter(cooldown_s=60, clock=clock)
    limiter.track_successful_notification(*user_and_channel)
    assert limiter.should_send_notification(*user_and_channel) is False
    clock.now += 59
    assert limiter.should_send_notification(*user_and_channel) is False
    clock.now += 1
    assert limiter.should_send_notification(*user_and_channel) is True


def test_tracking_overwrites_previous_record(user_and_channel):
    clock = FakeClock()
    limiter = InMemoryRateLimiter(cooldown_s=60, clock=clock)
    limiter.track_successful_notification(*user_and_channel)
    clock.now += 50
    limiter.track_successful_notification(*user_and_channel)
    clock.now += 30
    assert limiter.should_send_notification(*user_and_channel) is False


def test_keys_are_per_user_and_channel():
    clock = FakeClock()
    limiter = InMemoryRateLimiter(cooldown_s=60, clock=clock)
    alice, bob = make_user("Alice", "a@example.com"), make_user("Bob", "b@example.com")
    alice_tg = add_channel(alice, "telegram", destination="1")
    bob_tg = add_channel(bob, "telegram", destination="2")
    limiter.track_successful_notification(alice, alice_tg)
    assert limiter.should_send_notification(alice, alice_tg) is False
    assert limiter.should_send_notification(bob, bob_tg) is True
    assert rate_limit_key(alice, alice_tg) != rate_limit_key(bob, bob_tg)


def test_hold_serializes_check_and_track(user_and_channel):
    limiter = InMemoryRateLimiter(cooldown_s=60)
    user, channel = user_and_channel
    allowed = []
    barrier = threading.Barrier(8)

    def attempt():
        barrier.wait()
        with limiter.hold(user, channel):
            if limiter.should_send_notification(user, channel):
                allowed.append(1)
                limiter.track_successful_notification(user, channel)

    threads = [threading.Thread(target=attempt) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(allowed) == 1


def test_redis_limiter_tracks_with_expiry(user_and_channel):
    client = FakeRedis()
    limiter = RedisRateLimiter(client, cooldown_s=120, prefix="rl")
    user, channel = user_and_channel
    assert limiter.should_send_notification(user, channel) is True
    limiter.track_successful_notification(user, channel)
    key = f"rl:{user.id}:{channel.id}"
    assert key in client.store
    assert client.expiry[key] == 120
    assert limiter.should_send_notification(user, channel) is False


def test_redis_limiter_hold_releases_lock(user_and_channel):
    client = FakeRedis()
    limiter = RedisRateLimiter(client, cooldown_s=120, prefix="rl")
    with limiter.hold(*user_and_channel):
        assert len(client.locks) == 1
    assert client.locks == []


def test_redis_limiter_fails_open(user_and_channel):
    limiter = RedisRateLimiter(BrokenRedis(), cooldown_s=120)
    user, channel = user_and_channel
    with limiter.hold(user, channel):
        assert limiter.should_send_notification(user, channel) is True
        limiter.track_successful_notification(user, channel)


def test_build_rate_limiter_picks_backend():
    assert isinstance(build_rate_limiter(NotificationsConfig(rate_limit_backend="memory", telegram_cooldown_s=30)), InMemoryRateLimiter)
    limiter = build_rate_limiter(NotificationsConfig(rate_limit_backend="redis", telegram_cooldown_s=30), client=FakeRedis())
    assert isinstance(limiter, RedisRateLimiter)
    assert limiter.cooldown_s == 30


def test_expired_records_are_dropped_on_track():
    clock = FakeClock()
    limiter = InMemoryRateLimiter(cooldown_s=60, clock=clock)
    alice, bob = make_user("Alice", "a@example.com"), make_user("Bob", "b@example.com")
    alice_tg = add_channel(alice, "telegram", destination="1")
    bob_tg = add_channel(bob, "telegram", destination="2")
    limiter.track_successful_notification(alice, alice_tg)
    clock.now += 61
    limiter.track_successful_notification(bob, bob_tg)
    assert rate_limit_key(alice, alice_tg) not in limiter._last_sent
    assert list(limiter._last_sent) == [rate_limit_key(bob, bob_tg)]
    assert limiter.should_send_notification(alice, alice_tg) is True


def test_redis_lock_timeout_is_logged(user_and_channel, caplog):
    client = BusyRedis()
    limiter = RedisRateLimiter(client, cooldown_s=120, prefix="rl", lock_timeout_s=2.0)
    user, channel = user_and_channel
    with caplog.at_level("WARNING", logger="notifications"):
        with limiter.hold(user, channel):
            assert limiter.should_send_notification(user, channel) is True
    assert any("not acquired within 2.0s" in r.getMessage() for r in caplog.records)
    assert f"rl:{user.id}:{channel.id}" in caplog.text
