"""Calendar-aware interval arithmetic on world timestamps."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from calendar_compat.authority import AuthorityHandle
from calendar_compat.models import SECONDS_PER_DAY, Interval

logger = logging.getLogger(__name__)

# Degraded-mode approximations used when no authority is available.
APPROX_DAYS_PER_YEAR = 365
APPROX_DAYS_PER_MONTH = 30

MONTHS_PER_YEAR = 12


def normalize_month(year: int, month: int) -> tuple[int, int]:
    """Carry or borrow whole years until ``month`` is within 1..12."""
    while month > MONTHS_PER_YEAR:
        month -= MONTHS_PER_YEAR
        year += 1
    while month < 1:
        month += MONTHS_PER_YEAR
        year -= 1
    return year, month


class IntervalEngine:
    """Apply sparse intervals to timestamps.

    Years and months have variable length, so they go through the authority:
    the timestamp is converted to a structured date, shifted, normalized and
    converted back. Days and smaller units are added as flat seconds.
    """

    def __init__(self, authority: AuthorityHandle | None) -> None:
        self._authority = authority

    def apply(self, timestamp: int, interval: Interval | Mapping[str, Any] | None) -> int:
        delta = Interval.coerce(interval)
        if delta.is_empty:
            return timestamp
        if not delta.has_calendar_component:
            return timestamp + delta.flat_seconds()
        if self._authority is None:
            return timestamp + self._approximate_calendar_seconds(delta) + delta.flat_seconds()

        try:
            shifted = self._shift_calendar(timestamp, delta)
        except Exception:
            logger.warning(
                "Failed to apply interval %s to timestamp %s; leaving it unchanged",
                delta.model_dump(exclude_none=True),
                timestamp,
                exc_info=True,
            )
            return timestamp
        return shifted + delta.flat_seconds()

    def _shift_calendar(self, timestamp: int, delta: Interval) -> int:
        authority = self._authority
        structured = authority.to_structured(timestamp)
        year, month = normalize_month(
            structured.year + (delta.year or 0),
            structured.month + (delta.month or 0),
        )
        return authority.to_timestamp(structured.model_copy(update={"year": year, "month": month}))

    @staticmethod
    def _approximate_calendar_seconds(delta: Interval) -> int:
        days = (delta.year or 0) * APPROX_DAYS_PER_YEAR + (delta.month or 0) * APPROX_DAYS_PER_MONTH
        return days * SECONDS_PER_DAY
