"""In-process named hook bus shared by the host and the bridge.

Listeners run synchronously in registration order when a hook is called.
A failing listener is logged and does not stop the remaining listeners,
which mirrors how the host delivers its own notifications.
"""

from __future__ import annotations

import itertools
import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

HookCallback = Callable[..., Any]


@dataclass
class _Listener:
    listener_id: int
    callback: HookCallback
    once: bool = False


class HookBus:
    """Named publish/subscribe registry with run-to-completion delivery."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[_Listener]] = defaultdict(list)
        self._ids = itertools.count(1)

    def on(self, name: str, callback: HookCallback) -> int:
        """Register ``callback`` for ``name`` and return its listener id."""
        listener = _Listener(listener_id=next(self._ids), callback=callback)
        self._listeners[name].append(listener)
        return listener.listener_id

    def once(self, name: str, callback: HookCallback) -> int:
        """Register ``callback`` to run on the next call of ``name`` only."""
        listener = _Listener(listener_id=next(self._ids), callback=callback, once=True)
        self._listeners[name].append(listener)
        return listener.listener_id

    def off(self, name: str, callback_or_id: HookCallback | int) -> bool:
        """Remove a listener by callback or listener id. Returns whether one was removed."""
        listeners = self._listeners.get(name)
        if not listeners:
            return False
        for index, listener in enumerate(listeners):
            if listener.listener_id == callback_or_id or listener.callback is callback_or_id:
                del listeners[index]
                return True
        return False

    def call_all(self, name: str, *args: Any) -> bool:
        """Deliver ``args`` to every listener of ``name``.

        Returns ``True`` when at least one listener was registered.
        """
        listeners = list(self._listeners.get(name, ()))
        if not listeners:
            return False
        for listener in listeners:
            if listener.once:
                self.off(name, listener.listener_id)
            try:
                listener.callback(*args)
            except Exception:
                logger.exception("Hook listener for %r failed", name)
        return True

    def listener_count(self, name: str) -> int:
        return len(self._listeners.get(name, ()))
