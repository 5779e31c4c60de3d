"""Date, interval and participant models shared by the bridge components.

Two date shapes meet here:

- ``AuthorityDate``: 1-based month/day with a nested ``time`` block whose
  seconds field is named ``second``. This is what the authority speaks.
- ``LegacyDate``: 0-based month/day with flat time fields and a seconds
  field named ``seconds``. This is what legacy callers expect.

Weekdays are 0-based on both sides.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400

INTERVAL_FIELDS = ("year", "month", "day", "hour", "minute", "second")


class AuthorityTime(BaseModel):
    """Time-of-day block of an authority date."""

    model_config = ConfigDict(extra="ignore")

    hour: int = 0
    minute: int = 0
    second: int = 0


class AuthorityDate(BaseModel):
    """A structured date in the authority's 1-based convention."""

    model_config = ConfigDict(extra="ignore")

    year: int = 0
    month: int = 1
    day: int = 1
    weekday: int = 0
    time: AuthorityTime = Field(default_factory=AuthorityTime)

    def to_payload(self) -> dict[str, Any]:
        """Return the plain mapping handed to the authority API."""
        return self.model_dump()


class DateDisplay(BaseModel):
    """Human-readable strings attached to a legacy date."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    date: str = ""
    time: str = ""
    weekday: str = ""
    day: str = ""
    month: str = ""
    month_name: str = Field(default="", alias="monthName")
    year: str = ""
    day_suffix: str = Field(default="", alias="daySuffix")
    year_prefix: str = Field(default="", alias="yearPrefix")
    year_postfix: str = Field(default="", alias="yearPostfix")


class LegacyDate(BaseModel):
    """A date in the legacy caller-facing 0-based convention."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    year: int = 0
    month: int = 0
    day: int = 0
    hour: int = 0
    minute: int = 0
    seconds: int = 0
    weekday: int = Field(default=0, alias="dayOfTheWeek")
    weekdays: list[str] = Field(default_factory=list)
    display: DateDisplay | None = None

    def to_payload(self) -> dict[str, Any]:
        """Serialize into the legacy vocabulary.

        Consumers read either ``seconds`` or ``second``, so both are written.
        """
        payload: dict[str, Any] = {
            "year": self.year,
            "month": self.month,
            "day": self.day,
            "hour": self.hour,
            "minute": self.minute,
            "seconds": self.seconds,
            "second": self.seconds,
            "dayOfTheWeek": self.weekday,
            "weekdays": list(self.weekdays),
        }
        if self.display is not None:
            payload["display"] = self.display.model_dump(by_alias=True)
        return payload


class Interval(BaseModel):
    """Sparse symbolic time delta. Absent fields mean no change."""

    model_config = ConfigDict(extra="ignore")

    year: int | None = None
    month: int | None = None
    day: int | None = None
    hour: int | None = None
    minute: int | None = None
    second: int | None = None

    @classmethod
    def coerce(cls, value: Interval | Mapping[str, Any] | None) -> Interval:
        """Build an interval from ``None``, a mapping or an existing interval.

        Non-numeric components are dropped rather than rejected.
        """
        if value is None:
            return cls()
        if isinstance(value, Interval):
            return value
        cleaned: dict[str, int] = {}
        for key in INTERVAL_FIELDS:
            raw = value.get(key)
            if isinstance(raw, bool) or raw is None:
                continue
            try:
                cleaned[key] = int(raw)
            except (TypeError, ValueError):
                continue
        return cls(**cleaned)

    @property
    def is_empty(self) -> bool:
        return not any(getattr(self, key) for key in INTERVAL_FIELDS)

    @property
    def has_calendar_component(self) -> bool:
        """True when year or month are set; those need the authority's calendar."""
        return bool(self.year) or bool(self.month)

    def flat_seconds(self) -> int:
        """Seconds contributed by day/hour/minute/second, which never need a calendar."""
        return (
            (self.day or 0) * SECONDS_PER_DAY
            + (self.hour or 0) * SECONDS_PER_HOUR
            + (self.minute or 0) * SECONDS_PER_MINUTE
            + (self.second or 0)
        )


@dataclass(frozen=True)
class Participant:
    """A session participant as seen by the host.

    Attributes:
        id: Unique participant identifier; election order sorts on it.
        privileged: Whether the participant may mutate world time.
        active: Whether the participant is currently connected.
    """

    id: str
    privileged: bool = False
    active: bool = True
