"""Stateless conversion between legacy and authority date shapes.

The legacy side counts months and days from 0 and names its seconds field
``seconds``; the authority counts from 1 and nests the time of day under
``time`` with a ``second`` field. None of the helpers here raise: missing or
non-numeric fields read as 0.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from calendar_compat.models import (
    SECONDS_PER_DAY,
    SECONDS_PER_HOUR,
    SECONDS_PER_MINUTE,
    AuthorityDate,
    AuthorityTime,
    DateDisplay,
    LegacyDate,
)

# Anchor for degraded mode: timestamp 0 is the first day of month 0 of this year.
FALLBACK_ANCHOR_YEAR = 2023


def _coerce_int(value: Any, default: int = 0) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_mapping(value: Any) -> Mapping[str, Any]:
    if isinstance(value, Mapping):
        return value
    if hasattr(value, "model_dump"):
        return value.model_dump(by_alias=True)
    return {}


def ordinal_suffix(day: int) -> str:
    """Return the English ordinal suffix for a 1-based day number."""
    if 11 <= day % 100 <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def _pick_name(names: Sequence[str] | None, index: int) -> str:
    if not names or index < 0 or index >= len(names):
        return ""
    return names[index]


def authority_to_legacy(
    date: AuthorityDate | Mapping[str, Any],
    *,
    month_names: Sequence[str] | None = None,
    weekday_names: Sequence[str] | None = None,
    year_prefix: str = "",
    year_suffix: str = "",
) -> LegacyDate:
    """Convert a 1-based authority date into a 0-based legacy date.

    When ``month_names`` or ``weekday_names`` are given, the result also
    carries the ``weekdays`` list and a ``display`` block.
    """
    raw = _as_mapping(date)
    time_block = raw.get("time")
    if not isinstance(time_block, Mapping):
        time_block = {}

    year = _coerce_int(raw.get("year"))
    month = _coerce_int(raw.get("month"))
    day = _coerce_int(raw.get("day"))
    weekday = _coerce_int(raw.get("weekday"))
    hour = _coerce_int(time_block.get("hour"))
    minute = _coerce_int(time_block.get("minute"))
    second = _coerce_int(time_block.get("second"))

    display = None
    if month_names or weekday_names:
        month_name = _pick_name(month_names, month - 1)
        display = DateDisplay(
            date=" ".join(part for part in (str(day), month_name, str(year)) if part),
            time=f"{hour:02d}:{minute:02d}",
            weekday=_pick_name(weekday_names, weekday),
            day=str(day),
            month=str(month),
            month_name=month_name,
            year=str(year),
            day_suffix=ordinal_suffix(day),
            year_prefix=year_prefix,
            year_postfix=year_suffix,
        )

    return LegacyDate(
        year=year,
        month=month - 1,
        day=day - 1,
        hour=hour,
        minute=minute,
        seconds=second,
        weekday=weekday,
        weekdays=list(weekday_names or []),
        display=display,
    )


def legacy_to_authority(date: LegacyDate | Mapping[str, Any]) -> AuthorityDate:
    """Convert a 0-based legacy date into a 1-based authority date.

    Accepts either seconds spelling and prefers ``dayOfTheWeek`` over
    ``weekday`` when a caller sends both.
    """
    raw = _as_mapping(date)

    if raw.get("dayOfTheWeek") is not None:
        weekday = _coerce_int(raw.get("dayOfTheWeek"))
    else:
        weekday = _coerce_int(raw.get("weekday"))

    if raw.get("second") is not None:
        second = _coerce_int(raw.get("second"))
    else:
        second = _coerce_int(raw.get("seconds"))

    return AuthorityDate(
        year=_coerce_int(raw.get("year")),
        month=_coerce_int(raw.get("month")) + 1,
        day=_coerce_int(raw.get("day")) + 1,
        weekday=weekday,
        time=AuthorityTime(
            hour=_coerce_int(raw.get("hour")),
            minute=_coerce_int(raw.get("minute")),
            second=second,
        ),
    )


def fallback_date(timestamp: int, *, anchor_year: int = FALLBACK_ANCHOR_YEAR) -> LegacyDate:
    """Approximate a legacy date without any calendar knowledge.

    Every timestamp lands in month 0 of ``anchor_year``; elapsed whole days
    become the day counter. Not calendar-accurate by construction. The
    ``display`` block carries numeric strings only; there are no month or
    weekday names to show.
    """
    days, remainder = divmod(_coerce_int(timestamp), SECONDS_PER_DAY)
    hour, remainder = divmod(remainder, SECONDS_PER_HOUR)
    minute, seconds = divmod(remainder, SECONDS_PER_MINUTE)
    day_number = days + 1
    display = DateDisplay(
        date=f"{anchor_year}-01-{day_number:02d}",
        time=f"{hour:02d}:{minute:02d}",
        day=str(day_number),
        month="1",
        year=str(anchor_year),
        day_suffix=ordinal_suffix(day_number),
    )
    return LegacyDate(
        year=anchor_year,
        month=0,
        day=days,
        hour=hour,
        minute=minute,
        seconds=seconds,
        weekday=0,
        weekdays=[],
        display=display,
    )
