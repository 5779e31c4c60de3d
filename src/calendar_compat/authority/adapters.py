"""Adapter turning a duck-typed host calendar API object into an ``AuthorityHandle``."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import ValidationError

from calendar_compat.authority.base import (
    AuthorityEvent,
    AuthorityHandle,
    AuthorityHandler,
    TimeUnit,
    Unsubscribe,
)
from calendar_compat.errors import CapabilityMissingError, ConversionError
from calendar_compat.models import AuthorityDate

logger = logging.getLogger(__name__)

Subscriber = Callable[[AuthorityEvent, AuthorityHandler], Unsubscribe]

_ADVANCE_METHODS: dict[TimeUnit, str] = {
    TimeUnit.DAYS: "advance_days",
    TimeUnit.HOURS: "advance_hours",
    TimeUnit.MINUTES: "advance_minutes",
}


def authority_date_from_payload(payload: Any) -> AuthorityDate:
    """Validate an authority API result into an ``AuthorityDate``.

    Authority APIs may omit ``weekday`` or ``time``; both default to zero.
    """
    if isinstance(payload, AuthorityDate):
        return payload
    if not isinstance(payload, Mapping):
        raise ConversionError(f"Authority returned a non-date value: {payload!r}")
    data = dict(payload)
    data["weekday"] = data.get("weekday") or 0
    data["time"] = data.get("time") or {}
    try:
        return AuthorityDate.model_validate(data)
    except ValidationError as exc:
        raise ConversionError(f"Authority returned a malformed date: {exc}") from exc


class ApiAuthority(AuthorityHandle):
    """Authority backed by a host API object.

    The API object is expected to provide ``get_current_date()``,
    ``world_time_to_date(timestamp)`` and ``date_to_world_time(date)``.
    ``format_date``, ``get_active_calendar`` and ``advance_days`` /
    ``advance_hours`` / ``advance_minutes`` are used when present.
    Subscriptions are delegated to ``subscriber`` because each host shape
    publishes change notifications differently.
    """

    def __init__(
        self,
        api: Any,
        *,
        name: str,
        subscriber: Subscriber,
        version: str = "unknown",
    ) -> None:
        self._api = api
        self._name = name
        self._version = version
        self._subscriber = subscriber

    @property
    def name(self) -> str:
        return self._name

    @property
    def version(self) -> str:
        return self._version

    def _call(self, method: str, *args: Any) -> Any:
        try:
            return getattr(self._api, method)(*args)
        except ConversionError:
            raise
        except Exception as exc:
            raise ConversionError(f"{self._name}.{method} failed: {exc}") from exc

    def get_current_date(self) -> AuthorityDate:
        return authority_date_from_payload(self._call("get_current_date"))

    def to_structured(self, timestamp: int) -> AuthorityDate:
        return authority_date_from_payload(self._call("world_time_to_date", timestamp))

    def to_timestamp(self, date: AuthorityDate) -> int:
        result = self._call("date_to_world_time", date.to_payload())
        try:
            return int(result)
        except (TypeError, ValueError) as exc:
            raise ConversionError(f"{self._name} returned a non-numeric timestamp") from exc

    def subscribe(self, event: AuthorityEvent, handler: AuthorityHandler) -> Unsubscribe:
        return self._subscriber(event, handler)

    def supports_advance(self, unit: TimeUnit) -> bool:
        method = _ADVANCE_METHODS.get(unit)
        return method is not None and callable(getattr(self._api, method, None))

    async def advance_by(self, unit: TimeUnit, amount: int) -> None:
        if not self.supports_advance(unit):
            raise CapabilityMissingError(self._name, f"advancing {unit}")
        result = getattr(self._api, _ADVANCE_METHODS[unit])(amount)
        if inspect.isawaitable(result):
            await result

    def format_date(self, date: AuthorityDate, *, time_only: bool = False) -> str:
        formatter = getattr(self._api, "format_date", None)
        if time_only or not callable(formatter):
            return super().format_date(date, time_only=time_only)
        return str(formatter(date.to_payload()))

    def active_calendar(self) -> Mapping[str, Any] | None:
        getter = getattr(self._api, "get_active_calendar", None)
        if not callable(getter):
            return None
        try:
            calendar = getter()
        except Exception:
            logger.warning("%s failed to report its active calendar", self._name, exc_info=True)
            return None
        return calendar if isinstance(calendar, Mapping) else None
