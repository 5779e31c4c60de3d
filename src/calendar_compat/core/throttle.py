"""Rate limiting for widget render notifications."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from calendar_compat.core.hooks import HookBus
from calendar_compat.host import HOST_WIDGET_RENDERED

logger = logging.getLogger(__name__)

# Legacy hook consumers listen on to re-decorate a freshly rendered widget.
RENDER_MAIN_APP_HOOK = "render-main-app"


class NotificationThrottle:
    """Allow at most one notification per key within a sliding window."""

    def __init__(
        self,
        window_seconds: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._window = window_seconds
        self._clock = clock
        self._last_seen: dict[str, float] = {}

    def allow(self, key: str) -> bool:
        now = self._clock()
        last = self._last_seen.get(key)
        if last is not None and now - last < self._window:
            return False
        self._last_seen[key] = now
        return True

    def reset(self) -> None:
        self._last_seen.clear()


class WidgetRenderRelay:
    """Relay host widget renders to ``render-main-app`` at most once per element per window."""

    def __init__(self, hooks: HookBus, throttle: NotificationThrottle) -> None:
        self._hooks = hooks
        self._throttle = throttle
        self._listener_id: int | None = hooks.on(HOST_WIDGET_RENDERED, self._on_rendered)

    def _on_rendered(self, element: Any = None, *_args: Any) -> None:
        key = str(element) if element is not None else ""
        if not self._throttle.allow(key):
            logger.debug("Suppressing repeated render notification for %r", key)
            return
        self._hooks.call_all(RENDER_MAIN_APP_HOOK, element)

    def close(self) -> None:
        if self._listener_id is not None:
            self._hooks.off(HOST_WIDGET_RENDERED, self._listener_id)
            self._listener_id = None
