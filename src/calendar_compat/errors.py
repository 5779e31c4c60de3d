"""Error hierarchy for the calendar compatibility bridge.

Read paths (date lookups, conversions, interval math) recover from these
locally and log; write paths (privileged clock mutations) let them reach the
caller.
"""

from __future__ import annotations


class CalendarCompatError(Exception):
    """Base error for the calendar compatibility bridge."""


class AuthorityUnavailableError(CalendarCompatError):
    """Raised when an operation needs the calendar authority and none was detected."""


class ConversionError(CalendarCompatError):
    """Raised when the authority fails while converting a date or timestamp."""


class PrivilegeDeniedError(CalendarCompatError):
    """Raised when a privileged operation is invoked by an unprivileged participant."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Only privileged participants can {operation}")


class CapabilityMissingError(CalendarCompatError):
    """Raised when the authority is present but does not support the requested operation."""

    def __init__(self, authority_name: str, capability: str) -> None:
        self.authority_name = authority_name
        self.capability = capability
        super().__init__(f"{authority_name} does not support {capability}")


class BridgeLifecycleError(CalendarCompatError):
    """Raised on bridge lifecycle misuse that cannot be treated as a no-op."""
