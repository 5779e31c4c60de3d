"""Moon and season data attached to legacy date notifications."""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any

from calendar_compat.authority import AuthorityHandle

logger = logging.getLogger(__name__)

# Season icon identifiers legacy consumers key their artwork on.
ICONS: dict[str, str] = {
    "Fall": "fall",
    "Winter": "winter",
    "Spring": "spring",
    "Summer": "summer",
}

DEFAULT_MOONS: tuple[dict[str, Any], ...] = (
    {"color": "#ffffff", "currentPhase": {"icon": "new"}},
)

DEFAULT_SEASONS: tuple[dict[str, Any], ...] = (
    {"name": "Spring", "icon": ICONS["Spring"]},
    {"name": "Summer", "icon": ICONS["Summer"]},
    {"name": "Fall", "icon": ICONS["Fall"]},
    {"name": "Winter", "icon": ICONS["Winter"]},
)


class CelestialSource:
    """Serve moons and seasons from the authority's calendar, or stock defaults."""

    def __init__(self, authority: AuthorityHandle | None) -> None:
        self._authority = authority

    def _from_calendar(self, key: str) -> list[dict[str, Any]] | None:
        if self._authority is None:
            return None
        try:
            calendar = self._authority.active_calendar()
        except Exception:
            logger.warning("Could not read %s from the authority calendar", key, exc_info=True)
            return None
        entries = (calendar or {}).get(key)
        if isinstance(entries, list) and entries:
            return [dict(entry) for entry in entries if isinstance(entry, Mapping)]
        return None

    def moons(self) -> list[dict[str, Any]]:
        return self._from_calendar("moons") or copy.deepcopy(list(DEFAULT_MOONS))

    def seasons(self) -> list[dict[str, Any]]:
        return self._from_calendar("seasons") or copy.deepcopy(list(DEFAULT_SEASONS))
