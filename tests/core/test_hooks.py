"""Tests for the in-process hook bus."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from calendar_compat.core.hooks import HookBus

pytestmark = pytest.mark.unit


class TestHookBus:
    def test_delivers_in_registration_order(self):
        bus = HookBus()
        seen: list[str] = []
        bus.on("tick", lambda value: seen.append(f"a{value}"))
        bus.on("tick", lambda value: seen.append(f"b{value}"))
        assert bus.call_all("tick", 1) is True
        assert seen == ["a1", "b1"]

    def test_call_without_listeners(self):
        assert HookBus().call_all("nothing") is False

    def test_once_listener_runs_once(self):
        bus = HookBus()
        callback = MagicMock()
        bus.once("tick", callback)
        bus.call_all("tick")
        bus.call_all("tick")
        callback.assert_called_once_with()
        assert bus.listener_count("tick") == 0

    def test_off_by_id(self):
        bus = HookBus()
        callback = MagicMock()
        listener_id = bus.on("tick", callback)
        assert bus.off("tick", listener_id) is True
        bus.call_all("tick")
        callback.assert_not_called()

    def test_off_by_callback(self):
        bus = HookBus()
        callback = MagicMock()
        bus.on("tick", callback)
        assert bus.off("tick", callback) is True
        assert bus.off("tick", callback) is False

    def test_off_unknown_hook(self):
        assert HookBus().off("missing", 1) is False

    def test_failing_listener_does_not_stop_delivery(self, caplog):
        bus = HookBus()
        after = MagicMock()

        def _fails():
            raise RuntimeError("listener bug")

        bus.on("tick", _fails)
        bus.on("tick", after)
        bus.call_all("tick")
        after.assert_called_once_with()
        assert "Hook listener for 'tick' failed" in caplog.text

    def test_listener_added_during_delivery_waits_for_next_call(self):
        bus = HookBus()
        late = MagicMock()
        bus.on("tick", lambda: bus.on("tick", late))
        bus.call_all("tick")
        late.assert_not_called()
        bus.call_all("tick")
        late.assert_called_once_with()

    def test_listener_count(self):
        bus = HookBus()
        bus.on("a", MagicMock())
        bus.on("a", MagicMock())
        assert bus.listener_count("a") == 2
        assert bus.listener_count("b") == 0
