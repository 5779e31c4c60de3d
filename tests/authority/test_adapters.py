"""Tests for ApiAuthority and the AuthorityHandle defaults."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from calendar_compat.authority import ApiAuthority, TimeUnit, authority_date_from_payload
from calendar_compat.errors import CapabilityMissingError, ConversionError
from calendar_compat.models import AuthorityDate
from calendar_compat.testing import GregorianAuthority

pytestmark = pytest.mark.unit


def _handle(api, name: str = "test api") -> ApiAuthority:
    return ApiAuthority(api, name=name, subscriber=MagicMock())


class TestAuthorityDateFromPayload:
    def test_defaults_weekday_and_time(self):
        date = authority_date_from_payload({"year": 2024, "month": 2, "day": 3})
        assert date.weekday == 0
        assert (date.time.hour, date.time.minute, date.time.second) == (0, 0, 0)

    def test_passes_models_through(self):
        date = AuthorityDate(year=5)
        assert authority_date_from_payload(date) is date

    def test_rejects_non_mapping(self):
        with pytest.raises(ConversionError, match="non-date"):
            authority_date_from_payload(42)

    def test_rejects_malformed_fields(self):
        with pytest.raises(ConversionError, match="malformed"):
            authority_date_from_payload({"year": "twenty", "month": 1, "day": 1})


class TestApiAuthorityConversions:
    def test_round_trip_through_api(self):
        handle = _handle(GregorianAuthority())
        date = handle.to_structured(86400 * 31)
        assert (date.year, date.month, date.day) == (1970, 2, 1)
        assert handle.to_timestamp(date) == 86400 * 31

    def test_api_errors_become_conversion_errors(self):
        api = GregorianAuthority()
        api.world_time_to_date = MagicMock(side_effect=ValueError("out of range"))
        with pytest.raises(ConversionError, match="world_time_to_date failed"):
            _handle(api).to_structured(0)

    def test_non_numeric_timestamp(self):
        api = GregorianAuthority()
        api.date_to_world_time = MagicMock(return_value="later")
        with pytest.raises(ConversionError, match="non-numeric"):
            _handle(api).to_timestamp(AuthorityDate(year=2000))

    def test_subscribe_delegates(self):
        subscriber = MagicMock()
        handle = ApiAuthority(GregorianAuthority(), name="x", subscriber=subscriber)
        handler = MagicMock()
        handle.subscribe("dateChanged", handler)
        subscriber.assert_called_once_with("dateChanged", handler)


class TestApiAuthorityAdvance:
    def test_supports_advance_reflects_api(self):
        api = SimpleNamespace(advance_days=MagicMock())
        handle = _handle(api)
        assert handle.supports_advance(TimeUnit.DAYS) is True
        assert handle.supports_advance(TimeUnit.HOURS) is False

    async def test_awaits_async_advance(self):
        api = SimpleNamespace(advance_hours=AsyncMock())
        await _handle(api).advance_by(TimeUnit.HOURS, 3)
        api.advance_hours.assert_awaited_once_with(3)

    async def test_calls_sync_advance(self):
        api = SimpleNamespace(advance_minutes=MagicMock(return_value=None))
        await _handle(api).advance_by(TimeUnit.MINUTES, 15)
        api.advance_minutes.assert_called_once_with(15)

    async def test_missing_capability(self):
        with pytest.raises(CapabilityMissingError, match="bare does not support advancing days"):
            await _handle(SimpleNamespace(), name="bare").advance_by(TimeUnit.DAYS, 1)


class TestCalendarMetadata:
    def test_names_from_active_calendar(self):
        handle = _handle(GregorianAuthority())
        assert handle.month_names()[0] == "January"
        assert handle.weekday_names()[-1] == "Sunday"
        assert handle.year_formatting() == ("", " AD")

    def test_no_calendar_means_no_names(self):
        handle = _handle(SimpleNamespace())
        assert handle.active_calendar() is None
        assert handle.month_names() == []
        assert handle.year_formatting() == ("", "")

    def test_failing_calendar_getter(self, caplog):
        api = SimpleNamespace(get_active_calendar=MagicMock(side_effect=RuntimeError("x")))
        assert _handle(api).active_calendar() is None
        assert "failed to report its active calendar" in caplog.text

    def test_format_date_prefers_api_formatter(self):
        api = SimpleNamespace(format_date=MagicMock(return_value="Midsummer"))
        assert _handle(api).format_date(AuthorityDate(year=1)) == "Midsummer"

    def test_format_date_default(self):
        date = AuthorityDate.model_validate(
            {"year": 2024, "month": 5, "day": 14, "time": {"hour": 7, "minute": 5}}
        )
        handle = _handle(SimpleNamespace())
        assert handle.format_date(date) == "14/5/2024"
        assert handle.format_date(date, time_only=True) == "07:05"
