"""Tests for the calendar-compat command-line interface."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest
from click.testing import CliRunner

from calendar_compat import __version__
from calendar_compat.cli import cli

pytestmark = pytest.mark.unit

# 2024-11-15 00:00:00 UTC
NOV_15_2024 = 1731628800
# 2025-02-15 00:00:00 UTC
FEB_15_2025 = 1739577600


@pytest.fixture(autouse=True)
def bridge_logging(monkeypatch) -> MagicMock:
    """Keep the CLI from installing root handlers bound to CliRunner streams."""
    monkeypatch.setattr("calendar_compat.cli.configure_logging", lambda **_: None)
    configure = MagicMock()
    monkeypatch.setattr("calendar_compat.bootstrap.configure_logging", configure)
    return configure


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_help_lists_commands(runner):
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    for command in ("date", "add", "to-timestamp", "import-calendars", "show-config"):
        assert command in result.output


class TestDate:
    def test_zero_based_fields(self, runner):
        result = runner.invoke(cli, ["date", str(NOV_15_2024)])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload["year"] == 2024
        assert payload["month"] == 10
        assert payload["day"] == 14
        assert payload["hour"] == 0

    def test_fallback(self, runner):
        result = runner.invoke(cli, ["date", "--fallback", "90061"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload["year"] == 2023
        assert payload["month"] == 0
        assert payload["day"] == 1
        assert payload["hour"] == 1
        assert payload["minute"] == 1
        assert payload["seconds"] == 1


class TestAdd:
    def test_months_cross_year(self, runner):
        result = runner.invoke(cli, ["add", str(NOV_15_2024), "-i", "month=3"])
        assert result.exit_code == 0, result.output
        assert int(result.output) == FEB_15_2025

    def test_components_accumulate(self, runner):
        result = runner.invoke(cli, ["add", "0", "-i", "hour=1", "-i", "minute=30"])
        assert int(result.output) == 5400

    def test_fallback_uses_thirty_day_months(self, runner):
        result = runner.invoke(cli, ["add", "0", "-i", "month=1", "--fallback"])
        assert int(result.output) == 30 * 86400

    @pytest.mark.parametrize("pair", ["fortnight=1", "month", "month=lots"])
    def test_bad_interval(self, runner, pair):
        result = runner.invoke(cli, ["add", "0", "-i", pair])
        assert result.exit_code == 2
        assert "-i/--interval" in result.output


def test_to_timestamp(runner):
    result = runner.invoke(
        cli, ["to-timestamp", "--year", "2024", "--month", "10", "--day", "14"]
    )
    assert result.exit_code == 0, result.output
    assert int(result.output) == NOV_15_2024


class TestImportCalendars:
    def test_lists_converted_calendars(self, runner, tmp_path):
        settings = tmp_path / "settings.json"
        settings.write_text(
            json.dumps(
                {
                    "calendars": json.dumps({"harptos": {"name": "Harptos"}, "plain": {}}),
                    "current-calendar": "harptos",
                }
            )
        )
        result = runner.invoke(cli, ["import-calendars", str(settings)])
        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        assert lines[0].startswith("legacy-harptos")
        assert lines[0].endswith("Harptos (default)")
        assert lines[1].endswith("Legacy Calendar")
        assert lines[-1] == "Converted 2 calendar(s)"

    def test_invalid_json(self, runner, tmp_path):
        settings = tmp_path / "settings.json"
        settings.write_text("{nope")
        result = runner.invoke(cli, ["import-calendars", str(settings)])
        assert result.exit_code == 1
        assert "Invalid JSON" in result.output

    def test_not_an_object(self, runner, tmp_path):
        settings = tmp_path / "settings.json"
        settings.write_text("[]")
        result = runner.invoke(cli, ["import-calendars", str(settings)])
        assert result.exit_code == 1
        assert "must contain a JSON object" in result.output


class TestShowConfig:
    def test_defaults(self, runner):
        result = runner.invoke(cli, ["show-config"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["ready_delay_seconds"] == 5.0
        assert data["authority_strategies"] == ["integration", "legacy"]
        assert data["logging"] == {"level": "INFO", "format": "text"}

    def test_from_directory(self, runner, tmp_path):
        (tmp_path / "calendar_compat.toml").write_text("[bridge]\nfallback_anchor_year = 1492\n")
        result = runner.invoke(cli, ["show-config", "--config", str(tmp_path)])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["fallback_anchor_year"] == 1492

    def test_invalid_config(self, runner, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text('[bridge]\nauthority_strategies = ["psychic"]\n')
        result = runner.invoke(cli, ["show-config", "--config", str(path)])
        assert result.exit_code == 1
        assert "Configuration error" in result.output


class TestConfigOption:
    def test_date_applies_config_logging(self, runner, tmp_path, bridge_logging):
        (tmp_path / "calendar_compat.toml").write_text(
            '[bridge.logging]\nlevel = "debug"\nformat = "json"\n'
        )
        result = runner.invoke(cli, ["date", str(NOV_15_2024), "--config", str(tmp_path)])
        assert result.exit_code == 0, result.output
        bridge_logging.assert_called_once_with(level="DEBUG", fmt="json")

    def test_without_config_flags_rule(self, runner, bridge_logging):
        result = runner.invoke(cli, ["date", str(NOV_15_2024)])
        assert result.exit_code == 0, result.output
        bridge_logging.assert_not_called()

    def test_date_fallback_anchor_from_config(self, runner, tmp_path):
        path = tmp_path / "bridge.toml"
        path.write_text("[bridge]\nfallback_anchor_year = 1492\n")
        result = runner.invoke(cli, ["date", "0", "--fallback", "--config", str(path)])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["year"] == 1492

    def test_to_timestamp_accepts_config(self, runner, tmp_path):
        path = tmp_path / "bridge.toml"
        path.write_text('[bridge]\nauthority_strategies = ["legacy"]\n')
        result = runner.invoke(
            cli,
            [
                "to-timestamp",
                "--year",
                "2024",
                "--month",
                "10",
                "--day",
                "14",
                "--config",
                str(path),
            ],
        )
        assert result.exit_code == 0, result.output
        assert int(result.output) == NOV_15_2024

    def test_invalid_config_exits(self, runner, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("[bridge]\nready_delay_seconds = -2\n")
        result = runner.invoke(cli, ["add", "0", "-i", "day=1", "--config", str(path)])
        assert result.exit_code == 1
        assert "Configuration error" in result.output
