"""CLI for the calendar compatibility bridge: inspect conversions against the reference calendar."""

from __future__ import annotations

import contextlib
import dataclasses
import json
import sys
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import click

from calendar_compat import __version__
from calendar_compat.bootstrap import start_bridge
from calendar_compat.bridge.api import LegacyCalendarAPI
from calendar_compat.config import BridgeConfig, ConfigError, load_config
from calendar_compat.core.logging import LOG_FORMATS, configure_logging
from calendar_compat.legacy_import import register_legacy_calendars
from calendar_compat.models import INTERVAL_FIELDS, LegacyDate
from calendar_compat.testing import GregorianAuthority, InMemoryHost, ManualScheduler


@click.group()
@click.version_option(version=__version__)
@click.option("--log-level", default="WARNING", show_default=True, help="Root log level")
@click.option(
    "--log-format",
    type=click.Choice(LOG_FORMATS),
    default="text",
    show_default=True,
    help="Log output format",
)
def cli(log_level: str, log_format: str) -> None:
    """Calendar compatibility bridge: legacy calendar API over a modern calendar authority."""
    configure_logging(level=log_level, fmt=log_format, bridge_name="cli")


config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="TOML file or directory containing calendar_compat.toml",
)


def _load_config_or_exit(config_path: Path) -> BridgeConfig:
    try:
        return load_config(config_path)
    except ConfigError as exc:
        click.echo(f"Configuration error: {exc}")
        sys.exit(1)


@contextlib.contextmanager
def _reference_api(
    *, fallback: bool = False, config_path: Path | None = None
) -> Iterator[LegacyCalendarAPI]:
    """A bridge over the in-memory Gregorian reference calendar, or none in fallback mode.

    With ``config_path`` the bridge starts from that configuration, including
    its logging section.
    """
    config = _load_config_or_exit(config_path) if config_path is not None else None
    host = InMemoryHost()
    if not fallback:
        GregorianAuthority(host).install()
    runtime = start_bridge(host, config, scheduler=ManualScheduler())
    try:
        yield runtime.api
    finally:
        runtime.shutdown()


def _echo_json(value: Any) -> None:
    click.echo(json.dumps(value, indent=2, sort_keys=True))


def _parse_interval(pairs: tuple[str, ...]) -> dict[str, int]:
    interval: dict[str, int] = {}
    for pair in pairs:
        unit, sep, amount = pair.partition("=")
        unit = unit.strip()
        if not sep or unit not in INTERVAL_FIELDS:
            raise click.BadParameter(
                f"{pair!r}: expected UNIT=AMOUNT with UNIT one of {', '.join(INTERVAL_FIELDS)}",
                param_hint="-i/--interval",
            )
        try:
            interval[unit] = interval.get(unit, 0) + int(amount)
        except ValueError as exc:
            raise click.BadParameter(
                f"{pair!r}: amount must be an integer", param_hint="-i/--interval"
            ) from exc
    return interval


@cli.command()
@click.argument("timestamp", type=int)
@click.option("--fallback", is_flag=True, help="Convert without a calendar authority")
@config_option
def date(timestamp: int, fallback: bool, config_path: Path | None) -> None:
    """Show the legacy (0-based) date for TIMESTAMP."""
    with _reference_api(fallback=fallback, config_path=config_path) as api:
        _echo_json(api.timestamp_to_date(timestamp).to_payload())


@cli.command()
@click.argument("timestamp", type=int)
@click.option(
    "-i",
    "--interval",
    "pairs",
    multiple=True,
    required=True,
    help="Interval component as UNIT=AMOUNT, e.g. -i month=3 -i day=-2",
)
@click.option("--fallback", is_flag=True, help="Use approximate arithmetic without an authority")
@config_option
def add(
    timestamp: int, pairs: tuple[str, ...], fallback: bool, config_path: Path | None
) -> None:
    """Apply an interval to TIMESTAMP and print the resulting timestamp."""
    interval = _parse_interval(pairs)
    with _reference_api(fallback=fallback, config_path=config_path) as api:
        click.echo(api.timestamp_plus_interval(timestamp, interval))


@cli.command("to-timestamp")
@click.option("--year", type=int, required=True)
@click.option("--month", type=int, required=True, help="0-based month")
@click.option("--day", type=int, required=True, help="0-based day of the month")
@click.option("--hour", type=int, default=0)
@click.option("--minute", type=int, default=0)
@click.option("--seconds", type=int, default=0)
@config_option
def to_timestamp(
    year: int,
    month: int,
    day: int,
    hour: int,
    minute: int,
    seconds: int,
    config_path: Path | None,
) -> None:
    """Convert a legacy (0-based) date into a world timestamp."""
    legacy = LegacyDate(
        year=year, month=month, day=day, hour=hour, minute=minute, seconds=seconds
    )
    with _reference_api(config_path=config_path) as api:
        click.echo(api.date_to_timestamp(legacy))


@cli.command("import-calendars")
@click.argument("settings_json", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def import_calendars(settings_json: Path) -> None:
    """Convert legacy calendars stored in a world-settings JSON file."""
    try:
        settings = json.loads(settings_json.read_text())
    except json.JSONDecodeError as exc:
        click.echo(f"Invalid JSON in {settings_json}: {exc}")
        sys.exit(1)
    if not isinstance(settings, dict):
        click.echo(f"{settings_json} must contain a JSON object")
        sys.exit(1)

    def _print(definition: dict[str, Any], source: dict[str, Any]) -> None:
        marker = " (default)" if source.get("isDefault") else ""
        label = definition["translations"]["en"]["label"]
        click.echo(f"{definition['id']:<30} {label}{marker}")

    count = register_legacy_calendars(settings, _print)
    click.echo(f"Converted {count} calendar(s)")


@cli.command("show-config")
@config_option
def show_config(config_path: Path | None) -> None:
    """Print the effective bridge configuration."""
    config = _load_config_or_exit(config_path) if config_path is not None else BridgeConfig()
    data = dataclasses.asdict(config)
    data["authority_strategies"] = list(config.authority_strategies)
    _echo_json(data)
