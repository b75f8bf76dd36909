from unittest.mock import MagicMock

import pytest

from app.notifications.rate_limit import InMemoryRateLimiter
from app.notifications.status_changed import MonitorStatusChanged
from app.notifications.types import MailMessage, SlackMessage, TelegramMessage
from tests.fixtures.notification_fixtures import add_channel, down_event, make_user, up_event

APP_URL = "https://status.example.com"


def limiter_mock(allow: bool = True) -> MagicMock:
    limiter = MagicMock()
    limiter.should_send_notification.return_value = allow
    return limiter


@pytest.fixture
def user():
    return make_user("John Doe")


@pytest.fixture
def data():
    return down_event()


@pytest.fixture
def notification(data):
    return MonitorStatusChanged(data, limiter_mock(), app_url=APP_URL)


class TestConstructor:
    def test_stores_data(self, notification, data):
        assert notification.data == data
        assert notification.event.id == 1
        assert notification.event.status == "DOWN"


class TestVia:
    def test_returns_user_channels(self, notification, user):
        add_channel(user, "email")
        add_channel(user, "telegram", destination="123456789")
        channels = notification.via(user)
        assert "mail" in channels
        assert "telegram" in channels

    def test_only_enabled(self, notification, user):
        add_channel(user, "email")
        add_channel(user, "telegram", is_enabled=False, destination="123456789")
        channels = notification.via(user)
        assert "mail" in channels
        assert "telegram" not in channels

    def test_empty_when_nothing_enabled(self, notification, user):
        assert notification.via(user) == []
        assert notification.render(user) == {}

    def test_maps_other_types_to_themselves(self, notification, user):
        add_channel(user, "slack")
        assert "slack" in notification.via(user)


class TestToMail:
    def test_content(self, notification, user):
        mail = notification.to_mail(user)
        assert isinstance(mail, MailMessage)
        assert mail.subject == "Website Status: DOWN"
        assert mail.greeting == "Halo, John Doe"
        intro = mail.data()["introLines"]
        assert "Website berikut mengalami perubahan status:" in intro
        assert "🔗 URL: https://example.com" in intro
        assert "⚠️ Status: DOWN" in intro

    def test_action(self, notification, user):
        mail = notification.to_mail(user)
        assert mail.action_text == "Lihat Detail"
        assert mail.action_url == f"{APP_URL}/monitors/1"

    def test_not_affected_by_rate_limit(self, data, user):
        add_channel(user, "email")
        limiter = limiter_mock(allow=False)
        mail = MonitorStatusChanged(data, limiter).to_mail(user)
        assert mail.subject
        limiter.should_send_notification.assert_not_called()

    def test_english_locale(self, data, user):
        mail = MonitorStatusChanged(data, limiter_mock(), app_url=APP_URL, locale="en").to_mail(user)
        assert mail.greeting == "Hello, John Doe"
        assert mail.action_text == "View Details"

    def test_user_without_name(self, notification):
        mail = notification.to_mail(make_user(name=None))
        assert mail.greeting == "Halo, Pengguna"


class TestToTelegram:
    def test_none_without_channel(self, user):
        limiter = limiter_mock()
        assert MonitorStatusChanged(down_event(), limiter).to_telegram(user) is None
        limiter.track_successful_notification.assert_not_called()

    def test_none_when_disabled(self, user):
        add_channel(user, "telegram", is_enabled=False, destination="123456789")
        limiter = limiter_mock()
        assert MonitorStatusChanged(down_event(), limiter).to_telegram(user) is None
        limiter.should_send_notification.assert_not_called()

    def test_none_when_rate_limited(self, user):
        channel = add_channel(user, "telegram", destination="123456789")
        limiter = limiter_mock(allow=False)
        assert MonitorStatusChanged(down_event(), limiter).to_telegram(user) is None
        limiter.should_send_notification.assert_called_once_with(user, channel)
        limiter.track_successful_notification.assert_not_called()

    def test_message_when_allowed_tracks_once(self, user):
        channel = add_channel(user, "telegram", destination="123456789")
        limiter = limiter_mock(allow=True)
        result = MonitorStatusChanged(down_event(), limiter).to_telegram(user)
        assert isinstance(result, TelegramMessage)
        assert result.to == "123456789"
        limiter.should_send_notification.assert_called_once_with(user, channel)
        limiter.track_successful_notification.assert_called_once_with(user, channel)
        limiter.hold.assert_called_once_with(user, channel)

    def test_down_format(self, user):
        add_channel(user, "telegram", destination="123456789")
        content = MonitorStatusChanged(down_event(), limiter_mock()).to_telegram(user).content
        assert "🔴" in content
        assert "Website DOWN" in content
        assert "https://example.com" in content
        assert "Status: *DOWN*" in content
        assert "🟢" not in content
        assert "Website UP" not in content

    def test_up_format(self, user):
        add_channel(user, "telegram", destination="123456789")
        content = MonitorStatusChanged(up_event(), limiter_mock()).to_telegram(user).content
        assert "🟢" in content
        assert "Website UP" in content
        assert "Status: *UP*" in content
        assert "🔴" not in content
        assert "Website DOWN" not in content

    def test_second_render_is_throttled_with_real_limiter(self, user):
        add_channel(user, "telegram", destination="123456789")
        notification = MonitorStatusChanged(down_event(), InMemoryRateLimiter(cooldown_s=300))
        assert notification.to_telegram(user) is not None
        assert notification.to_telegram(user) is None

    def test_none_without_destination_skips_limiter(self, user):
        add_channel(user, "telegram")
        limiter = limiter_mock()
        assert MonitorStatusChanged(down_event(), limiter).to_telegram(user) is None
        limiter.hold.assert_not_called()
        limiter.should_send_notification.assert_not_called()
        limiter.track_successful_notification.assert_not_called()

    def test_markdown_in_event_fields_is_escaped(self, user):
        add_channel(user, "telegram", destination="123456789")
        data = {
            "id": 9,
            "url": "https://my_site.example.com/health",
            "status": "DOWN",
            "message": "check *now* [ops]",
        }
        content = MonitorStatusChanged(data, limiter_mock()).to_telegram(user).content
        assert "URL: https://my\\_site.example.com/health" in content
        assert "my_site" not in content
        assert "check \\*now\\* \\[ops]" in content
        assert "Status: *DOWN*" in content


class TestUnknownStatus:
    @pytest.mark.parametrize("status", ["MAINTENANCE", "", None])
    def test_renders_neutral(self, user, status):
        add_channel(user, "email")
        add_channel(user, "telegram", destination="123456789")
        add_channel(user, "slack", destination="https://hooks.slack.com/services/x")
        data = {**down_event(), "status": status}
        rendered = MonitorStatusChanged(data, limiter_mock()).render(user)
        telegram = rendered["telegram"].content
        assert "Website DOWN" not in telegram
        assert "Website UP" not in telegram
        assert "⚪" in telegram
        assert rendered["mail"].subject.startswith("Website Status: ")
        assert "⚪" in rendered["slack"].text

    def test_missing_status_key(self, user):
        mail = MonitorStatusChanged({"id": 3, "url": "https://x.test"}, limiter_mock()).to_mail(user)
        assert mail.subject == "Website Status: UNKNOWN"

    def test_lowercase_status_is_recognised(self, user):
        add_channel(user, "telegram", destination="1")
        data = {**down_event(), "status": "down"}
        content = MonitorStatusChanged(data, limiter_mock()).to_telegram(user).content
        assert "Website DOWN" in content


class TestToSlack:
    def test_renders_with_webhook(self, notification, user):
        add_channel(user, "slack", destination="https://hooks.slack.com/services/x")
        message = notification.to_slack(user)
        assert isinstance(message, SlackMessage)
        assert message.webhook_url == "https://hooks.slack.com/services/x"
        assert "Website DOWN" in message.text
        assert "https://example.com" in message.text

    def test_none_without_webhook_url(self, notification, user):
        add_channel(user, "slack")
        assert notification.to_slack(user) is None

    def test_not_rate_limited(self, data, user):
        add_channel(user, "slack", destination="https://hooks.slack.com/services/x")
        limiter = limiter_mock(allow=False)
        assert MonitorStatusChanged(data, limiter).to_slack(user) is not None
        limiter.should_send_notification.assert_not_called()

    def test_control_characters_are_escaped(self, user):
        add_channel(user, "slack", destination="https://hooks.slack.com/services/x")
        data = {**down_event(), "url": "https://example.com/?a=1&b=<2>", "message": "<!channel> R&D"}
        text = MonitorStatusChanged(data, limiter_mock()).to_slack(user).text
        assert "<https://example.com/?a=1&amp;b=&lt;2&gt;>" in text
        assert "&lt;!channel&gt; R&amp;D" in text
        assert "<!channel>" not in text


class TestToArray:
    def test_snapshot(self, notification, user):
        result = notification.to_array(user)
        assert isinstance(result, dict)
        assert result["type"] == "monitor_status_changed"
        assert result["id"] == 1
        assert result["url"] == "https://example.com"
        assert result["status"] == "DOWN"


class TestRender:
    def test_unknown_channel_has_no_renderer(self, notification, user):
        add_channel(user, "pagerduty", destination="abc")
        assert notification.via(user) == ["pagerduty"]
        assert notification.render(user) == {}
