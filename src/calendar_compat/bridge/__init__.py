"""Format conversion, interval arithmetic, election, event bridging and the legacy API."""

from calendar_compat.bridge.api import LegacyCalendarAPI
from calendar_compat.bridge.conversion import (
    authority_to_legacy,
    fallback_date,
    legacy_to_authority,
    ordinal_suffix,
)
from calendar_compat.bridge.election import PrimaryElector
from calendar_compat.bridge.events import EventBridge, LegacyHook, LifecycleState
from calendar_compat.bridge.intervals import IntervalEngine

__all__ = [
    "EventBridge",
    "IntervalEngine",
    "LegacyCalendarAPI",
    "LegacyHook",
    "LifecycleState",
    "PrimaryElector",
    "authority_to_legacy",
    "fallback_date",
    "legacy_to_authority",
    "ordinal_suffix",
]
