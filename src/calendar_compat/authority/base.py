"""Authority handle: the typed view of whichever calendar API owns date/time state."""

from __future__ import annotations

import abc
from collections.abc import Callable, Mapping
from enum import StrEnum
from typing import Any

from calendar_compat.errors import CapabilityMissingError
from calendar_compat.models import AuthorityDate

AuthorityHandler = Callable[..., Any]
Unsubscribe = Callable[[], None]


class AuthorityEvent(StrEnum):
    """State-change notifications the authority publishes."""

    DATE_CHANGED = "dateChanged"
    CALENDAR_CHANGED = "calendarChanged"


class TimeUnit(StrEnum):
    """Units the authority may know how to advance."""

    DAYS = "days"
    HOURS = "hours"
    MINUTES = "minutes"


class AuthorityHandle(abc.ABC):
    """Typed handle over the calendar authority.

    Leap years, month lengths, seasons and moons are the authority's business;
    the bridge only asks it to convert between timestamps and structured
    dates. Optional capabilities (advancing time, formatting, calendar
    metadata) have conservative defaults here and are overridden by adapters
    that can do better.
    """

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Human-readable authority name used in logs and errors."""
        ...

    @property
    def version(self) -> str:
        return "unknown"

    @abc.abstractmethod
    def get_current_date(self) -> AuthorityDate:
        """Return the authority's current date."""
        ...

    @abc.abstractmethod
    def to_structured(self, timestamp: int) -> AuthorityDate:
        """Convert a world timestamp into a structured date."""
        ...

    @abc.abstractmethod
    def to_timestamp(self, date: AuthorityDate) -> int:
        """Convert a structured date back into a world timestamp."""
        ...

    @abc.abstractmethod
    def subscribe(self, event: AuthorityEvent, handler: AuthorityHandler) -> Unsubscribe:
        """Listen for ``event``; the returned callable removes the listener."""
        ...

    def supports_advance(self, unit: TimeUnit) -> bool:
        """Whether ``advance_by`` works for ``unit``."""
        return False

    async def advance_by(self, unit: TimeUnit, amount: int) -> None:
        """Advance world time by ``amount`` units."""
        raise CapabilityMissingError(self.name, f"advancing {unit}")

    def format_date(self, date: AuthorityDate, *, time_only: bool = False) -> str:
        if time_only:
            return f"{date.time.hour:02d}:{date.time.minute:02d}"
        return f"{date.day}/{date.month}/{date.year}"

    def active_calendar(self) -> Mapping[str, Any] | None:
        """The active calendar definition, when the authority exposes one."""
        return None

    def month_names(self) -> list[str]:
        return _names(self.active_calendar(), "months")

    def weekday_names(self) -> list[str]:
        return _names(self.active_calendar(), "weekdays")

    def year_formatting(self) -> tuple[str, str]:
        """Return ``(prefix, suffix)`` decorating displayed years."""
        calendar = self.active_calendar() or {}
        year = calendar.get("year")
        if not isinstance(year, Mapping):
            return "", ""
        return str(year.get("prefix") or ""), str(year.get("suffix") or "")


def _names(calendar: Mapping[str, Any] | None, key: str) -> list[str]:
    if not calendar:
        return []
    entries = calendar.get(key)
    if not isinstance(entries, list):
        return []
    names = []
    for entry in entries:
        if isinstance(entry, Mapping) and isinstance(entry.get("name"), str):
            names.append(entry["name"])
    return names
