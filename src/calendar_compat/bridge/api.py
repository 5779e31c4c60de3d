"""Legacy-shaped calendar API composed over the authority and the event bridge.

Read methods never raise: when the authority is missing or fails they fall
back to degraded values (``fallback_date``, timestamp ``0``, empty strings).
Privileged mutations are coroutines that check privilege first and let every
failure reach the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from calendar_compat.authority import AuthorityHandle, TimeUnit
from calendar_compat.bridge.celestial import ICONS, CelestialSource
from calendar_compat.bridge.conversion import (
    FALLBACK_ANCHOR_YEAR,
    authority_to_legacy,
    fallback_date,
    legacy_to_authority,
)
from calendar_compat.bridge.events import HOOK_NAMES, EventBridge
from calendar_compat.bridge.intervals import IntervalEngine
from calendar_compat.core.telemetry import mutation_span
from calendar_compat.errors import (
    AuthorityUnavailableError,
    CapabilityMissingError,
    PrivilegeDeniedError,
)
from calendar_compat.host import HostEnvironment
from calendar_compat.models import Interval, LegacyDate

logger = logging.getLogger(__name__)

LegacyDateLike = LegacyDate | Mapping[str, Any]

_CALENDAR_DEFAULTS: dict[str, Any] = {
    "months": [],
    "weekdays": [],
    "year": {"prefix": "", "suffix": "", "epoch": 0},
    "time": {"hoursInDay": 24, "minutesInHour": 60, "secondsInMinute": 60},
    "seasons": [],
    "moons": [],
    "leapYear": {"rule": "none"},
}

_CHANGE_DATE_UNITS = (
    ("day", TimeUnit.DAYS),
    ("hour", TimeUnit.HOURS),
    ("minute", TimeUnit.MINUTES),
)


class LegacyCalendarAPI:
    """The method surface legacy callers expect."""

    ICONS = ICONS

    def __init__(
        self,
        *,
        host: HostEnvironment,
        authority: AuthorityHandle | None,
        bridge: EventBridge,
        celestial: CelestialSource | None = None,
        fallback_anchor_year: int = FALLBACK_ANCHOR_YEAR,
    ) -> None:
        self._host = host
        self._authority = authority
        self._bridge = bridge
        self._celestial = celestial or CelestialSource(authority)
        self._intervals = IntervalEngine(authority)
        self._anchor_year = fallback_anchor_year

    @property
    def authority(self) -> AuthorityHandle | None:
        return self._authority

    # ------------------------------------------------------------------
    # Timestamps and dates
    # ------------------------------------------------------------------

    def timestamp(self) -> int:
        """Current world time in seconds; ``0`` when the host clock is unavailable."""
        try:
            value = self._host.world_time()
        except Exception:
            logger.warning("Host world clock is unavailable", exc_info=True)
            return 0
        return int(value) if value is not None else 0

    def timestamp_to_date(self, timestamp: int) -> LegacyDate:
        if self._authority is None:
            return fallback_date(timestamp, anchor_year=self._anchor_year)
        try:
            authority = self._authority
            prefix, suffix = authority.year_formatting()
            return authority_to_legacy(
                authority.to_structured(timestamp),
                month_names=authority.month_names(),
                weekday_names=authority.weekday_names(),
                year_prefix=prefix,
                year_suffix=suffix,
            )
        except Exception:
            logger.warning(
                "Failed to convert timestamp %s via %s; using fallback date",
                timestamp,
                self._authority.name,
                exc_info=True,
            )
            return fallback_date(timestamp, anchor_year=self._anchor_year)

    def date_to_timestamp(self, date: LegacyDateLike) -> int:
        if self._authority is None:
            return 0
        try:
            return self._authority.to_timestamp(legacy_to_authority(date))
        except Exception:
            logger.warning("Failed to convert date to a timestamp", exc_info=True)
            return 0

    def timestamp_plus_interval(
        self, timestamp: int, interval: Interval | Mapping[str, Any] | None
    ) -> int:
        return self._intervals.apply(timestamp, interval)

    def get_current_date(self) -> LegacyDate:
        return self.timestamp_to_date(self.timestamp())

    def current_date_time(self) -> LegacyDate:
        return self.get_current_date()

    def format_date_time(self, date: LegacyDateLike) -> str:
        """Render ``date`` through the authority's formatter; ``""`` when that fails."""
        if self._authority is None:
            return ""
        try:
            return self._authority.format_date(legacy_to_authority(date))
        except Exception:
            logger.warning("Failed to format date", exc_info=True)
            return ""

    def add_months(self, date: LegacyDateLike, months: int) -> LegacyDate:
        return self._shift(date, Interval(month=months))

    def add_years(self, date: LegacyDateLike, years: int) -> LegacyDate:
        return self._shift(date, Interval(year=years))

    def _shift(self, date: LegacyDateLike, interval: Interval) -> LegacyDate:
        timestamp = self.date_to_timestamp(date)
        return self.timestamp_to_date(self.timestamp_plus_interval(timestamp, interval))

    # ------------------------------------------------------------------
    # Privileged mutations
    # ------------------------------------------------------------------

    def _require_privilege(self, operation: str) -> None:
        participant = self._host.current_participant()
        if participant is None or not participant.privileged:
            raise PrivilegeDeniedError(operation)

    def _require_authority(self, operation: str) -> AuthorityHandle:
        if self._authority is None:
            raise AuthorityUnavailableError(f"Cannot {operation}: no calendar authority detected")
        return self._authority

    async def advance_by(self, unit: TimeUnit | str, amount: int) -> None:
        """Advance world time through the authority's matching capability.

        Raises:
            PrivilegeDeniedError: the local participant is not privileged.
            AuthorityUnavailableError: no authority was detected.
            CapabilityMissingError: the authority cannot advance by ``unit``.
        """
        self._require_privilege("set world time")
        unit = TimeUnit(unit)
        authority = self._require_authority(f"advance {unit}")
        if not authority.supports_advance(unit):
            raise CapabilityMissingError(authority.name, f"advancing {unit}")
        with mutation_span(f"advance_{unit}", authority=authority.name):
            await authority.advance_by(unit, amount)

    async def advance_days(self, amount: int) -> None:
        await self.advance_by(TimeUnit.DAYS, amount)

    async def advance_hours(self, amount: int) -> None:
        await self.advance_by(TimeUnit.HOURS, amount)

    async def advance_minutes(self, amount: int) -> None:
        await self.advance_by(TimeUnit.MINUTES, amount)

    async def set_time(self, timestamp: int) -> None:
        """Move the host clock to ``timestamp``; nothing happens when it is already there."""
        self._require_privilege("set world time")
        delta = int(timestamp) - self.timestamp()
        if delta == 0:
            return
        await self._move_host_clock(delta)

    @mutation_span("set_time")
    async def _move_host_clock(self, delta: int) -> None:
        await self._host.advance_time(delta)

    async def set_date(self, date: LegacyDateLike) -> None:
        self._require_privilege("set world time")
        authority = self._require_authority("set the date")
        target = authority.to_timestamp(legacy_to_authority(date))
        await self.set_time(target)

    async def change_date(self, interval: Interval | Mapping[str, Any]) -> None:
        """Advance by the day, hour and minute parts of ``interval``.

        Year, month and second components are not supported by the
        authority's advance capabilities and are ignored.
        """
        self._require_privilege("set world time")
        delta = Interval.coerce(interval)
        ignored = [key for key in ("year", "month", "second") if getattr(delta, key)]
        if ignored:
            logger.debug("change_date ignores interval components %s", ignored)
        for key, unit in _CHANGE_DATE_UNITS:
            amount = getattr(delta, key)
            if amount:
                await self.advance_by(unit, amount)

    # ------------------------------------------------------------------
    # Clock and lifecycle
    # ------------------------------------------------------------------

    def clock_status(self) -> dict[str, bool]:
        return self._bridge.clock_status()

    def start_clock(self) -> None:
        self._bridge.start_clock()

    def stop_clock(self) -> None:
        self._bridge.stop_clock()

    def is_ready(self) -> bool:
        return self._bridge.is_ready

    def hook_names(self) -> dict[str, str]:
        return dict(HOOK_NAMES)

    # ------------------------------------------------------------------
    # Calendar metadata
    # ------------------------------------------------------------------

    def get_all_moons(self) -> list[dict[str, Any]]:
        return self._celestial.moons()

    def get_all_seasons(self) -> list[dict[str, Any]]:
        return self._celestial.seasons()

    def _active_calendar(self) -> Mapping[str, Any] | None:
        if self._authority is None:
            return None
        try:
            return self._authority.active_calendar()
        except Exception:
            logger.warning("Failed to read the active calendar", exc_info=True)
            return None

    def get_current_calendar(self) -> dict[str, Any] | None:
        """The active calendar with defaults for missing keys, or ``None``."""
        calendar = self._active_calendar()
        if calendar is None:
            return None
        merged = {key: _copy_default(value) for key, value in _CALENDAR_DEFAULTS.items()}
        merged.update({key: value for key, value in calendar.items() if value is not None})
        return merged

    def get_all_months(self) -> list[Any]:
        calendar = self.get_current_calendar()
        return list(calendar["months"]) if calendar else []

    def get_all_weekdays(self) -> list[Any]:
        calendar = self.get_current_calendar()
        return list(calendar["weekdays"]) if calendar else []


def _copy_default(value: Any) -> Any:
    if isinstance(value, dict):
        return dict(value)
    if isinstance(value, list):
        return list(value)
    return value
