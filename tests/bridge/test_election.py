"""Tests for primary election among privileged participants."""

from __future__ import annotations

import pytest

from calendar_compat.bridge.election import PrimaryElector
from calendar_compat.models import Participant

pytestmark = pytest.mark.unit


def _elector(*participants: Participant) -> PrimaryElector:
    return PrimaryElector(lambda: list(participants))


class TestPrimaryElector:
    def test_no_participants_means_no_primary(self):
        elector = _elector()
        assert elector.primary() is None
        assert elector.is_primary("anyone") is False

    def test_lowest_identifier_wins(self):
        elector = _elector(
            Participant("gm-b", privileged=True),
            Participant("gm-a", privileged=True),
        )
        assert elector.is_primary("gm-a") is True
        assert elector.is_primary("gm-b") is False

    def test_unprivileged_participants_are_ignored(self):
        elector = _elector(Participant("a-player"), Participant("z-gm", privileged=True))
        assert elector.is_primary("a-player") is False
        assert elector.is_primary("z-gm") is True

    def test_inactive_participants_are_ignored(self):
        elector = _elector(
            Participant("gm-a", privileged=True, active=False),
            Participant("gm-b", privileged=True),
        )
        assert elector.primary().id == "gm-b"

    def test_only_unprivileged_means_no_primary(self):
        elector = _elector(Participant("p1"), Participant("p2"))
        assert elector.candidates() == []
        assert elector.is_primary("p1") is False

    def test_at_most_one_primary(self):
        members = [
            Participant("gm-3", privileged=True),
            Participant("gm-1", privileged=True),
            Participant("player", privileged=False),
            Participant("gm-2", privileged=True, active=False),
        ]
        elector = _elector(*members)
        assert sum(elector.is_primary(p.id) for p in members) == 1

    def test_none_local_id_is_never_primary(self):
        assert _elector(Participant("gm", privileged=True)).is_primary(None) is False

    def test_recomputed_on_every_query(self):
        members = [Participant("gm-b", privileged=True)]
        elector = PrimaryElector(lambda: members)
        assert elector.is_primary("gm-b") is True
        members.append(Participant("gm-a", privileged=True))
        assert elector.is_primary("gm-b") is False

    def test_failing_source_elects_nobody(self, caplog):
        def _broken():
            raise RuntimeError("participants unavailable")

        assert PrimaryElector(_broken).is_primary("gm") is False
        assert "Could not read session participants" in caplog.text
