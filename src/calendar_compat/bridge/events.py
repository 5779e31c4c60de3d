"""Event bridge: lifecycle, authority listeners and legacy notification replay.

Lifecycle::

    uninitialized -> initializing -> ready
          \\               \\           \\
           +---------------+-----------+--> destroyed (absorbing)

``initialize()`` emits ``init`` immediately, ``primary-elected`` when this
participant wins the election, and schedules ``ready`` after a fixed delay.
Every authority change is replayed as ``date-time-changed`` in the order the
host delivers it. Once destroyed, nothing is emitted again.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from enum import StrEnum
from typing import Any, Protocol

from calendar_compat.authority import AuthorityEvent, AuthorityHandle, Unsubscribe
from calendar_compat.bridge.celestial import CelestialSource
from calendar_compat.bridge.conversion import authority_to_legacy
from calendar_compat.bridge.election import PrimaryElector
from calendar_compat.core.hooks import HookBus
from calendar_compat.errors import BridgeLifecycleError
from calendar_compat.host import HOST_SETTING_CHANGED
from calendar_compat.models import LegacyDate

logger = logging.getLogger(__name__)

DEFAULT_READY_DELAY_SECONDS = 5.0

# Setting keys containing any of these fragments affect displayed dates.
_TIME_SETTING_FRAGMENTS = ("calendar", "time")


class LifecycleState(StrEnum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    DESTROYED = "destroyed"


class LegacyHook(StrEnum):
    """Legacy notification identifiers. Consumers match on these exact strings."""

    INIT = "init"
    DATE_TIME_CHANGE = "date-time-changed"
    CLOCK_START_STOP = "clock-start-stop"
    PRIMARY_ELECTED = "primary-elected"
    READY = "ready"


HOOK_NAMES: dict[str, str] = {
    "Init": LegacyHook.INIT.value,
    "DateTimeChange": LegacyHook.DATE_TIME_CHANGE.value,
    "ClockStartStop": LegacyHook.CLOCK_START_STOP.value,
    "PrimaryGM": LegacyHook.PRIMARY_ELECTED.value,
    "Ready": LegacyHook.READY.value,
}


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class TimerScheduler(Protocol):
    """Anything with an event-loop style ``call_later``."""

    def call_later(self, delay: float, callback: Callable[[], Any]) -> TimerHandle: ...


def _setting_key(setting: Any) -> str:
    if isinstance(setting, Mapping):
        key = setting.get("key")
    else:
        key = getattr(setting, "key", None)
    return key if isinstance(key, str) else ""


class EventBridge:
    """Replay authority notifications into the legacy hook vocabulary."""

    def __init__(
        self,
        *,
        hooks: HookBus,
        authority: AuthorityHandle | None,
        elector: PrimaryElector,
        local_id: str | None,
        celestial: CelestialSource | None = None,
        scheduler: TimerScheduler | None = None,
        ready_delay: float = DEFAULT_READY_DELAY_SECONDS,
    ) -> None:
        self._hooks = hooks
        self._authority = authority
        self._elector = elector
        self._local_id = local_id
        self._celestial = celestial or CelestialSource(authority)
        self._scheduler = scheduler
        self._ready_delay = ready_delay
        self._state = LifecycleState.UNINITIALIZED
        self._clock_running = False
        self._pending_ready: TimerHandle | None = None
        self._unsubscribers: list[Unsubscribe] = []

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is LifecycleState.READY

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> bool:
        """Start bridging. Returns ``False`` when called outside ``uninitialized``.

        Raises:
            BridgeLifecycleError: no scheduler was supplied and there is no
                running event loop to schedule the ready notification on.
        """
        if self._state is not LifecycleState.UNINITIALIZED:
            logger.debug("Ignoring initialize() in state %s", self._state)
            return False

        scheduler = self._resolve_scheduler()
        self._state = LifecycleState.INITIALIZING
        self._subscribe()

        self._emit(LegacyHook.INIT)
        if self._elector.is_primary(self._local_id):
            self._emit(LegacyHook.PRIMARY_ELECTED, {"isPrimary": True})

        self._pending_ready = scheduler.call_later(self._ready_delay, self._on_ready_timer)
        return True

    def _resolve_scheduler(self) -> TimerScheduler:
        if self._scheduler is not None:
            return self._scheduler
        try:
            return asyncio.get_running_loop()
        except RuntimeError as exc:
            raise BridgeLifecycleError(
                "initialize() needs a running event loop or an explicit scheduler"
            ) from exc

    def _subscribe(self) -> None:
        if self._authority is not None:
            for event in (AuthorityEvent.DATE_CHANGED, AuthorityEvent.CALENDAR_CHANGED):
                try:
                    self._unsubscribers.append(
                        self._authority.subscribe(event, self._on_authority_change)
                    )
                except Exception:
                    logger.warning("Could not subscribe to authority %s", event, exc_info=True)

        listener_id = self._hooks.on(HOST_SETTING_CHANGED, self._on_setting_changed)
        self._unsubscribers.append(lambda: self._hooks.off(HOST_SETTING_CHANGED, listener_id))

    def _on_ready_timer(self) -> None:
        self._pending_ready = None
        self.emit_ready()

    def emit_ready(self) -> bool:
        """Move ``initializing`` to ``ready`` and emit ``ready``; a no-op in any other state."""
        if self._state is not LifecycleState.INITIALIZING:
            logger.debug("Ignoring emit_ready() in state %s", self._state)
            return False
        if self._pending_ready is not None:
            self._pending_ready.cancel()
            self._pending_ready = None
        self._state = LifecycleState.READY
        self._emit(LegacyHook.READY)
        return True

    def destroy(self) -> None:
        """Stop bridging for good: cancel the ready timer and drop all listeners."""
        if self._state is LifecycleState.DESTROYED:
            return
        self._state = LifecycleState.DESTROYED
        if self._pending_ready is not None:
            self._pending_ready.cancel()
            self._pending_ready = None
        unsubscribers, self._unsubscribers = self._unsubscribers, []
        for unsubscribe in unsubscribers:
            try:
                unsubscribe()
            except Exception:
                logger.warning("Failed to remove a bridge listener", exc_info=True)

    # ------------------------------------------------------------------
    # Authority notifications
    # ------------------------------------------------------------------

    def _on_authority_change(self, *_args: Any, **_kwargs: Any) -> None:
        self.emit_date_time_change()

    def _on_setting_changed(self, setting: Any = None, *_args: Any) -> None:
        key = _setting_key(setting).lower()
        if any(fragment in key for fragment in _TIME_SETTING_FRAGMENTS):
            self.emit_date_time_change()

    def current_legacy_date(self) -> LegacyDate | None:
        """The authority's current date in legacy shape, or ``None`` on failure."""
        authority = self._authority
        if authority is None:
            return None
        try:
            prefix, suffix = authority.year_formatting()
            return authority_to_legacy(
                authority.get_current_date(),
                month_names=authority.month_names(),
                weekday_names=authority.weekday_names(),
                year_prefix=prefix,
                year_suffix=suffix,
            )
        except Exception:
            logger.warning("Failed to derive the current date for notification", exc_info=True)
            return None

    def emit_date_time_change(self) -> bool:
        """Emit ``date-time-changed`` for the authority's current date.

        Skipped (returns ``False``) when the current date cannot be derived.
        """
        if self._state is LifecycleState.DESTROYED:
            return False
        date = self.current_legacy_date()
        if date is None:
            return False
        return self._emit(
            LegacyHook.DATE_TIME_CHANGE,
            {
                "date": date.to_payload(),
                "moons": self._celestial.moons(),
                "seasons": self._celestial.seasons(),
            },
        )

    # ------------------------------------------------------------------
    # Session-local clock
    # ------------------------------------------------------------------

    def clock_status(self) -> dict[str, bool]:
        return {"started": self._clock_running}

    def start_clock(self) -> None:
        self._clock_running = True
        self._emit(LegacyHook.CLOCK_START_STOP, {"started": True})

    def stop_clock(self) -> None:
        self._clock_running = False
        self._emit(LegacyHook.CLOCK_START_STOP, {"started": False})

    # ------------------------------------------------------------------

    def _emit(self, hook: LegacyHook, payload: dict[str, Any] | None = None) -> bool:
        if self._state is LifecycleState.DESTROYED:
            return False
        if payload is None:
            self._hooks.call_all(hook.value)
        else:
            self._hooks.call_all(hook.value, payload)
        return True
