"""Host boundary: the process that owns the world clock, participants and hooks."""

from __future__ import annotations

import abc
from collections.abc import Iterable, Mapping, MutableMapping
from typing import Any

from calendar_compat.core.hooks import HookBus
from calendar_compat.models import Participant

# Host notification fired when a host setting changes; payload carries ``key``.
HOST_SETTING_CHANGED = "setting-changed"
# Host notification fired when a calendar widget renders; payload is an element id.
HOST_WIDGET_RENDERED = "calendar-widget-rendered"
# Host notification fired after the world clock moves; payload is (new_time, delta).
HOST_WORLD_TIME_UPDATED = "world-time-updated"


class HostEnvironment(abc.ABC):
    """Everything the bridge needs from its host process.

    Hosts expose a hook bus, a world clock in integer seconds, the session
    participants and two mappings: ``namespace`` is probed by authority
    detection strategies, ``capabilities`` receives capability descriptors.
    """

    @property
    @abc.abstractmethod
    def hooks(self) -> HookBus:
        """Hook bus used for both host and legacy notifications."""
        ...

    @property
    @abc.abstractmethod
    def namespace(self) -> Mapping[str, Any]:
        """Host objects that may carry a calendar authority API."""
        ...

    @property
    @abc.abstractmethod
    def capabilities(self) -> MutableMapping[str, Any]:
        """Capability registry consulted by other host components."""
        ...

    @abc.abstractmethod
    def world_time(self) -> int | None:
        """Current world time in seconds, or ``None`` when the clock is unavailable."""
        ...

    @abc.abstractmethod
    async def advance_time(self, delta: int) -> None:
        """Advance the world clock by ``delta`` seconds (may be negative)."""
        ...

    @abc.abstractmethod
    def current_participant(self) -> Participant | None:
        """The participant this process acts for."""
        ...

    @abc.abstractmethod
    def participants(self) -> Iterable[Participant]:
        """All known session participants, active or not."""
        ...
