"""Advertise the legacy calendar capability in the host's capability registry."""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

LEGACY_CAPABILITY_ID = "legacy-calendar"
# Version legacy consumers gate their feature checks on.
LEGACY_CAPABILITY_VERSION = "2.4.18"


class Compatibility(BaseModel):
    minimum: str = "13"
    verified: str = "13"
    maximum: str = "13"


class CapabilityDescriptor(BaseModel):
    """Entry other host components look up to find the legacy calendar API."""

    model_config = ConfigDict(frozen=True)

    id: str = LEGACY_CAPABILITY_ID
    title: str = "Legacy Calendar (Compatibility Bridge)"
    version: str = LEGACY_CAPABILITY_VERSION
    active: bool = True
    compatibility: Compatibility = Field(default_factory=Compatibility)


def register_capability(
    registry: MutableMapping[str, Any],
    descriptor: CapabilityDescriptor | None = None,
) -> bool:
    """Add ``descriptor`` to ``registry`` unless an entry with its id exists.

    Returns ``True`` when this call added the entry.
    """
    descriptor = descriptor or CapabilityDescriptor()
    if descriptor.id in registry:
        logger.info("Capability %s already registered; leaving it in place", descriptor.id)
        return False
    registry[descriptor.id] = descriptor
    logger.info("Registered capability %s v%s", descriptor.id, descriptor.version)
    return True


def unregister_capability(
    registry: MutableMapping[str, Any],
    descriptor: CapabilityDescriptor,
) -> bool:
    """Remove ``descriptor`` if it is still the registered entry for its id."""
    if registry.get(descriptor.id) is not descriptor:
        return False
    del registry[descriptor.id]
    logger.info("Unregistered capability %s", descriptor.id)
    return True
