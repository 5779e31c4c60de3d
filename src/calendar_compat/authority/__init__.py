"""Calendar authority handles and detection."""

from calendar_compat.authority.adapters import ApiAuthority, authority_date_from_payload
from calendar_compat.authority.base import (
    AuthorityEvent,
    AuthorityHandle,
    AuthorityHandler,
    TimeUnit,
    Unsubscribe,
)
from calendar_compat.authority.detection import (
    DEFAULT_STRATEGY_ORDER,
    STRATEGIES,
    DetectionStrategy,
    detect_authority,
    detect_integration_interface,
    detect_legacy_api,
)

__all__ = [
    "ApiAuthority",
    "AuthorityEvent",
    "AuthorityHandle",
    "AuthorityHandler",
    "DEFAULT_STRATEGY_ORDER",
    "DetectionStrategy",
    "STRATEGIES",
    "TimeUnit",
    "Unsubscribe",
    "authority_date_from_payload",
    "detect_authority",
    "detect_integration_interface",
    "detect_legacy_api",
]
