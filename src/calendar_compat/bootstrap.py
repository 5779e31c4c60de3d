"""Wire the bridge components together for one host process."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from calendar_compat.authority import STRATEGIES, AuthorityHandle, detect_authority
from calendar_compat.bridge.api import LegacyCalendarAPI
from calendar_compat.bridge.celestial import CelestialSource
from calendar_compat.bridge.election import PrimaryElector
from calendar_compat.bridge.events import EventBridge, TimerScheduler
from calendar_compat.config import BridgeConfig
from calendar_compat.core.logging import configure_logging
from calendar_compat.core.telemetry import init_telemetry
from calendar_compat.core.throttle import NotificationThrottle, WidgetRenderRelay
from calendar_compat.host import HostEnvironment
from calendar_compat.registration import (
    CapabilityDescriptor,
    register_capability,
    unregister_capability,
)

logger = logging.getLogger(__name__)

TELEMETRY_SERVICE_NAME = "calendar-compat"


@dataclass
class CompatRuntime:
    """Everything ``start_bridge`` created; collaborators receive it by reference."""

    host: HostEnvironment
    api: LegacyCalendarAPI
    bridge: EventBridge
    authority: AuthorityHandle | None
    relay: WidgetRenderRelay
    descriptor: CapabilityDescriptor
    owns_descriptor: bool = False

    def shutdown(self) -> None:
        """Destroy the bridge and undo host registrations. Safe to call twice."""
        self.bridge.destroy()
        self.relay.close()
        if self.owns_descriptor:
            unregister_capability(self.host.capabilities, self.descriptor)
            self.owns_descriptor = False
        logger.info("Calendar compatibility bridge shut down")


def start_bridge(
    host: HostEnvironment,
    config: BridgeConfig | None = None,
    *,
    scheduler: TimerScheduler | None = None,
    descriptor: CapabilityDescriptor | None = None,
) -> CompatRuntime:
    """Detect the authority, build the bridge and facade, and initialize.

    An explicit ``config`` also configures logging from its
    ``[bridge.logging]`` section; with no config the process logging setup
    is left alone. The tracer provider is installed on first start.

    Without ``scheduler`` this must run inside an event loop; the ready
    notification is scheduled on the running loop.
    """
    if config is None:
        config = BridgeConfig()
    else:
        configure_logging(level=config.logging.level, fmt=config.logging.format)
    init_telemetry(TELEMETRY_SERVICE_NAME)

    authority = detect_authority(
        host, [STRATEGIES[name] for name in config.authority_strategies]
    )

    local = host.current_participant()
    celestial = CelestialSource(authority)
    bridge = EventBridge(
        hooks=host.hooks,
        authority=authority,
        elector=PrimaryElector(host.participants),
        local_id=local.id if local is not None else None,
        celestial=celestial,
        scheduler=scheduler,
        ready_delay=config.ready_delay_seconds,
    )
    api = LegacyCalendarAPI(
        host=host,
        authority=authority,
        bridge=bridge,
        celestial=celestial,
        fallback_anchor_year=config.fallback_anchor_year,
    )

    bridge.initialize()

    descriptor = descriptor or CapabilityDescriptor()
    owns_descriptor = register_capability(host.capabilities, descriptor)
    relay = WidgetRenderRelay(host.hooks, NotificationThrottle(config.widget_debounce_seconds))

    logger.info(
        "Calendar compatibility bridge started (authority=%s)",
        authority.name if authority is not None else "none",
    )
    return CompatRuntime(
        host=host,
        api=api,
        bridge=bridge,
        authority=authority,
        relay=relay,
        descriptor=descriptor,
        owns_descriptor=owns_descriptor,
    )
