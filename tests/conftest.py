"""Shared fixtures: an in-memory host with a Gregorian authority and a manual timer."""

from __future__ import annotations

import functools
import logging
from datetime import UTC, datetime

import pytest

from calendar_compat.authority import detect_authority
from calendar_compat.bootstrap import start_bridge
from calendar_compat.bridge.events import LegacyHook
from calendar_compat.core.hooks import HookBus
from calendar_compat.models import Participant
from calendar_compat.testing import GregorianAuthority, InMemoryHost, ManualScheduler

# 2024-11-15 10:30:00 UTC, a Friday.
HOST_START = int(datetime(2024, 11, 15, 10, 30, tzinfo=UTC).timestamp())


class HookRecorder:
    """Record every legacy notification delivered on a hook bus."""

    def __init__(self, hooks: HookBus) -> None:
        self.calls: list[tuple[str, tuple]] = []
        for hook in LegacyHook:
            hooks.on(hook.value, functools.partial(self._record, hook.value))

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, args))

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def payloads(self, name: str) -> list:
        return [args[0] if args else None for hook, args in self.calls if hook == name]


@pytest.fixture(autouse=True)
def _restore_root_logging():
    """Undo root logger changes made by start_bridge with an explicit config."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def gm() -> Participant:
    return Participant("gm-1", privileged=True)


@pytest.fixture
def player() -> Participant:
    return Participant("player-1")


@pytest.fixture
def host(gm, player) -> InMemoryHost:
    return InMemoryHost(time=HOST_START, participants=[gm, player], local_id=gm.id)


@pytest.fixture
def gregorian(host) -> GregorianAuthority:
    return GregorianAuthority(host).install()


@pytest.fixture
def authority(host, gregorian):
    return detect_authority(host)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def recorder(host) -> HookRecorder:
    return HookRecorder(host.hooks)


@pytest.fixture
def runtime(host, gregorian, scheduler, recorder):
    runtime = start_bridge(host, scheduler=scheduler)
    yield runtime
    runtime.shutdown()


@pytest.fixture
def fallback_runtime(host, scheduler, recorder):
    runtime = start_bridge(host, scheduler=scheduler)
    yield runtime
    runtime.shutdown()
