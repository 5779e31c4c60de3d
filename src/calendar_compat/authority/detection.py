"""Ordered authority detection strategies.

Each strategy is a pure function ``(host) -> AuthorityHandle | None``. They are
tried in priority order and the first handle wins; nothing downstream ever
inspects the shape of the host object again.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

from calendar_compat.authority.adapters import ApiAuthority
from calendar_compat.authority.base import (
    AuthorityEvent,
    AuthorityHandle,
    AuthorityHandler,
    Unsubscribe,
)
from calendar_compat.host import HostEnvironment

logger = logging.getLogger(__name__)

DetectionStrategy = Callable[[HostEnvironment], AuthorityHandle | None]

# Namespace keys probed on the host.
INTEGRATION_KEY = "calendar_integration"
LEGACY_API_KEY = "calendar_api"
# Prefix of the host hooks the legacy API fires, e.g. "calendar:dateChanged".
LEGACY_HOOK_PREFIX = "calendar:"

_REQUIRED_API_METHODS = ("get_current_date", "world_time_to_date", "date_to_world_time")


def _has_api_methods(api: Any) -> bool:
    return api is not None and all(
        callable(getattr(api, method, None)) for method in _REQUIRED_API_METHODS
    )


def detect_integration_interface(host: HostEnvironment) -> AuthorityHandle | None:
    """Detect an integration object exposing ``api`` plus its own ``hooks``.

    The object advertises readiness through ``is_available`` and publishes
    changes through ``hooks.on_date_changed`` / ``hooks.on_calendar_changed``
    with ``hooks.off(event, handler)`` to unsubscribe.
    """
    integration = host.namespace.get(INTEGRATION_KEY)
    if integration is None or not getattr(integration, "is_available", False):
        return None
    api = getattr(integration, "api", None)
    hooks = getattr(integration, "hooks", None)
    if not _has_api_methods(api) or hooks is None:
        return None

    registrars = {
        AuthorityEvent.DATE_CHANGED: getattr(hooks, "on_date_changed", None),
        AuthorityEvent.CALENDAR_CHANGED: getattr(hooks, "on_calendar_changed", None),
    }
    if not all(callable(registrar) for registrar in registrars.values()):
        return None

    def subscribe(event: AuthorityEvent, handler: AuthorityHandler) -> Unsubscribe:
        registrars[event](handler)

        def unsubscribe() -> None:
            off = getattr(hooks, "off", None)
            if callable(off):
                off(str(event), handler)

        return unsubscribe

    return ApiAuthority(
        api,
        name=str(getattr(integration, "name", "calendar integration")),
        version=str(getattr(integration, "version", "unknown")),
        subscriber=subscribe,
    )


def detect_legacy_api(host: HostEnvironment) -> AuthorityHandle | None:
    """Detect a bare API object whose notifications arrive on the host hook bus."""
    api = host.namespace.get(LEGACY_API_KEY)
    if not _has_api_methods(api):
        return None

    def subscribe(event: AuthorityEvent, handler: AuthorityHandler) -> Unsubscribe:
        hook_name = f"{LEGACY_HOOK_PREFIX}{event}"
        listener_id = host.hooks.on(hook_name, handler)
        return lambda: host.hooks.off(hook_name, listener_id)

    return ApiAuthority(
        api,
        name=str(getattr(api, "name", "calendar api")),
        version=str(getattr(api, "version", "unknown")),
        subscriber=subscribe,
    )


STRATEGIES: dict[str, DetectionStrategy] = {
    "integration": detect_integration_interface,
    "legacy": detect_legacy_api,
}

DEFAULT_STRATEGY_ORDER: tuple[str, ...] = ("integration", "legacy")


def detect_authority(
    host: HostEnvironment,
    strategies: Sequence[DetectionStrategy] | None = None,
) -> AuthorityHandle | None:
    """Return the first authority any strategy finds, or ``None``."""
    if strategies is None:
        strategies = [STRATEGIES[name] for name in DEFAULT_STRATEGY_ORDER]
    for strategy in strategies:
        try:
            handle = strategy(host)
        except Exception:
            logger.warning(
                "Authority detection strategy %s failed",
                getattr(strategy, "__name__", strategy),
                exc_info=True,
            )
            continue
        if handle is not None:
            logger.info("Detected calendar authority %s v%s", handle.name, handle.version)
            return handle
    logger.info("No calendar authority detected; running in fallback mode")
    return None
