"""Import calendar definitions stored by the legacy calendar into the authority.

Legacy worlds keep their calendars in settings: a JSON string (or an
already-decoded mapping) under ``calendars`` keyed by calendar id, and the
id of the calendar in use under ``current-calendar``. Each definition is
converted into the authority's calendar-definition shape and handed to a
``register_calendar(definition, source)`` callback.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from typing import Any

logger = logging.getLogger(__name__)

CALENDARS_KEY = "calendars"
CURRENT_CALENDAR_KEY = "current-calendar"
CALENDAR_ID_PREFIX = "legacy-"

DEFAULT_MONTH_DAYS = 30
DEFAULT_LABEL = "Legacy Calendar"

RegisterCalendar = Callable[[dict[str, Any], dict[str, Any]], Any]


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and len(value) > 0


def _convert_months(months: Any) -> list[dict[str, Any]]:
    if not isinstance(months, list):
        return []
    converted = []
    for index, month in enumerate(months):
        month = month if isinstance(month, Mapping) else {}
        name = month.get("name")
        entry: dict[str, Any] = {
            "name": name if isinstance(name, str) else f"Month {index + 1}",
            "days": month["days"] if _is_number(month.get("days")) else DEFAULT_MONTH_DAYS,
        }
        if _non_empty_str(month.get("abbreviation")):
            entry["abbreviation"] = month["abbreviation"]
        converted.append(entry)
    return converted


def _convert_weekdays(weekdays: Any) -> list[dict[str, Any]]:
    if not isinstance(weekdays, list):
        return []
    converted = []
    for index, weekday in enumerate(weekdays):
        weekday = weekday if isinstance(weekday, Mapping) else {}
        name = weekday.get("name")
        entry: dict[str, Any] = {"name": name if isinstance(name, str) else f"Day {index + 1}"}
        if _non_empty_str(weekday.get("abbreviation")):
            entry["abbreviation"] = weekday["abbreviation"]
        converted.append(entry)
    return converted


def convert_legacy_calendar(calendar_id: str, config: Any) -> dict[str, Any] | None:
    """Convert one legacy calendar definition; ``None`` when it is not a mapping."""
    if not isinstance(config, Mapping):
        return None

    english: dict[str, str] = {
        "label": config["name"] if _non_empty_str(config.get("name")) else DEFAULT_LABEL,
    }
    if _non_empty_str(config.get("description")):
        english["description"] = config["description"]

    time_config = config.get("time")
    time_config = time_config if isinstance(time_config, Mapping) else {}

    def _time(key: str, default: int) -> Any:
        value = time_config.get(key)
        return value if _is_number(value) else default

    year = config.get("year")
    definition: dict[str, Any] = {
        "id": f"{CALENDAR_ID_PREFIX}{calendar_id}",
        "translations": {"en": english},
        "year": dict(year) if isinstance(year, Mapping) else {},
        "months": _convert_months(config.get("months")),
        "weekdays": _convert_weekdays(config.get("weekdays")),
        "intercalary": list(config["intercalary"])
        if isinstance(config.get("intercalary"), list)
        else [],
        "time": {
            "hoursInDay": _time("hoursInDay", 24),
            "minutesInHour": _time("minutesInHour", 60),
            "secondsInMinute": _time("secondsInMinute", 60),
        },
    }
    if config.get("leapYear"):
        definition["leapYear"] = config["leapYear"]
    return definition


def read_legacy_settings(
    settings: Mapping[str, Any],
) -> tuple[dict[str, Any] | None, str | None]:
    """Return ``(calendars, current_calendar_id)`` from world settings.

    Raises:
        ValueError: the stored calendars are a string that is not valid JSON
            or does not decode to an object.
    """
    raw = settings.get(CALENDARS_KEY)
    calendars: dict[str, Any] | None = None
    if isinstance(raw, str) and raw:
        decoded = json.loads(raw)
        if not isinstance(decoded, dict):
            raise ValueError("stored calendars must decode to a JSON object")
        calendars = decoded
    elif isinstance(raw, Mapping):
        calendars = dict(raw)

    current = settings.get(CURRENT_CALENDAR_KEY)
    return calendars, current if isinstance(current, str) else None


def register_legacy_calendars(
    settings: Mapping[str, Any],
    register_calendar: RegisterCalendar,
) -> int:
    """Convert every stored legacy calendar and register it. Returns the count."""
    try:
        calendars, current_id = read_legacy_settings(settings)
    except ValueError:
        logger.error("Could not parse stored legacy calendars", exc_info=True)
        return 0

    if not calendars:
        logger.info("No legacy calendar data found in settings; nothing to import")
        return 0

    registered = 0
    for calendar_id, config in calendars.items():
        definition = convert_legacy_calendar(str(calendar_id), config)
        if definition is None:
            logger.warning("Skipping legacy calendar %r: definition is not an object", calendar_id)
            continue
        register_calendar(
            definition,
            {
                "type": "module",
                "sourceName": "Legacy Calendar",
                "moduleId": "legacy-calendar",
                "isDefault": calendar_id == current_id,
            },
        )
        registered += 1

    if registered:
        logger.info("Registered %d calendars from legacy calendar data", registered)
    return registered
