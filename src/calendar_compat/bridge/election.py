"""Deterministic primary election among active privileged participants."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from calendar_compat.models import Participant

logger = logging.getLogger(__name__)

ParticipantSource = Callable[[], Iterable[Participant]]


class PrimaryElector:
    """Pick the single primary participant.

    The candidates are the active privileged participants sorted by id; the
    first one is primary. Nothing is cached: membership can change between
    calls and every query re-reads the participant source.
    """

    def __init__(self, participants: ParticipantSource) -> None:
        self._participants = participants

    def candidates(self) -> list[Participant]:
        try:
            members = list(self._participants())
        except Exception:
            logger.warning("Could not read session participants", exc_info=True)
            return []
        eligible = [p for p in members if p.active and p.privileged]
        return sorted(eligible, key=lambda p: p.id)

    def primary(self) -> Participant | None:
        candidates = self.candidates()
        return candidates[0] if candidates else None

    def is_primary(self, local_id: str | None) -> bool:
        if local_id is None:
            return False
        primary = self.primary()
        return primary is not None and primary.id == local_id
