"""Tests for render notification throttling."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from calendar_compat.core.hooks import HookBus
from calendar_compat.core.throttle import (
    RENDER_MAIN_APP_HOOK,
    NotificationThrottle,
    WidgetRenderRelay,
)
from calendar_compat.host import HOST_WIDGET_RENDERED

pytestmark = pytest.mark.unit


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


class TestNotificationThrottle:
    def test_first_notification_allowed(self, clock):
        assert NotificationThrottle(1.0, clock).allow("widget") is True

    def test_repeat_within_window_suppressed(self, clock):
        throttle = NotificationThrottle(1.0, clock)
        throttle.allow("widget")
        clock.now += 0.5
        assert throttle.allow("widget") is False

    def test_allowed_again_after_window(self, clock):
        throttle = NotificationThrottle(1.0, clock)
        throttle.allow("widget")
        clock.now += 1.0
        assert throttle.allow("widget") is True

    def test_keys_are_independent(self, clock):
        throttle = NotificationThrottle(1.0, clock)
        assert throttle.allow("a") is True
        assert throttle.allow("b") is True

    def test_reset(self, clock):
        throttle = NotificationThrottle(1.0, clock)
        throttle.allow("a")
        throttle.reset()
        assert throttle.allow("a") is True


class TestWidgetRenderRelay:
    def test_relays_at_most_once_per_window(self, clock):
        hooks = HookBus()
        relayed = MagicMock()
        hooks.on(RENDER_MAIN_APP_HOOK, relayed)
        WidgetRenderRelay(hooks, NotificationThrottle(1.0, clock))

        hooks.call_all(HOST_WIDGET_RENDERED, "calendar-widget")
        hooks.call_all(HOST_WIDGET_RENDERED, "calendar-widget")
        assert relayed.call_count == 1

        clock.now += 2
        hooks.call_all(HOST_WIDGET_RENDERED, "calendar-widget")
        assert relayed.call_count == 2
        relayed.assert_called_with("calendar-widget")

    def test_different_elements_relay_separately(self, clock):
        hooks = HookBus()
        relayed = MagicMock()
        hooks.on(RENDER_MAIN_APP_HOOK, relayed)
        WidgetRenderRelay(hooks, NotificationThrottle(1.0, clock))

        hooks.call_all(HOST_WIDGET_RENDERED, "mini")
        hooks.call_all(HOST_WIDGET_RENDERED, "full")
        assert relayed.call_count == 2

    def test_close_stops_relaying(self, clock):
        hooks = HookBus()
        relay = WidgetRenderRelay(hooks, NotificationThrottle(1.0, clock))
        relay.close()
        relay.close()
        assert hooks.listener_count(HOST_WIDGET_RENDERED) == 0
