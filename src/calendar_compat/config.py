"""Bridge configuration loading and validation.

Reads ``calendar_compat.toml`` (or an explicit TOML file), resolves
``${VAR}`` references and returns a validated ``BridgeConfig`` dataclass.
"""

from __future__ import annotations

import os
import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from calendar_compat.authority.detection import DEFAULT_STRATEGY_ORDER, STRATEGIES
from calendar_compat.bridge.conversion import FALLBACK_ANCHOR_YEAR
from calendar_compat.bridge.events import DEFAULT_READY_DELAY_SECONDS
from calendar_compat.core.logging import LOG_FORMATS

CONFIG_FILENAME = "calendar_compat.toml"

# Pattern matching ${VAR_NAME}.
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


class ConfigError(Exception):
    """Raised when bridge configuration is missing, malformed, or invalid."""


@dataclass
class LoggingConfig:
    """Logging configuration from the [bridge.logging] section."""

    level: str = "INFO"
    format: str = "text"  # "text" or "json"


@dataclass
class BridgeConfig:
    """Parsed [bridge] section. ``BridgeConfig()`` carries the defaults."""

    ready_delay_seconds: float = DEFAULT_READY_DELAY_SECONDS
    fallback_anchor_year: int = FALLBACK_ANCHOR_YEAR
    widget_debounce_seconds: float = 1.0
    authority_strategies: tuple[str, ...] = DEFAULT_STRATEGY_ORDER
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def resolve_env_vars(value: Any) -> Any:
    """Recursively resolve ``${VAR_NAME}`` references in string values.

    Raises
    ------
    ConfigError
        If a referenced environment variable is not set.
    """
    if isinstance(value, dict):
        return {k: resolve_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [resolve_env_vars(item) for item in value]
    if isinstance(value, str):
        return _resolve_string(value)
    return value


def _resolve_string(s: str) -> str:
    missing: list[str] = []

    def _replace(match: re.Match) -> str:
        env_value = os.environ.get(match.group(1))
        if env_value is None:
            missing.append(match.group(1))
            return match.group(0)
        return env_value

    result = _ENV_VAR_PATTERN.sub(_replace, s)
    if missing:
        raise ConfigError(
            f"Unresolved environment variable(s) in config value: {', '.join(missing)} "
            f"(original: {s!r})"
        )
    return result


def _number(section: dict, key: str, default: float, *, path: str) -> float:
    raw = section.get(key, default)
    if isinstance(raw, bool):
        raise ConfigError(f"{path}.{key} must be a number, got {raw!r}")
    try:
        value = float(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{path}.{key} must be a number, got {raw!r}") from exc
    if value < 0:
        raise ConfigError(f"{path}.{key} must not be negative, got {value}")
    return value


def _parse_logging(bridge_section: dict) -> LoggingConfig:
    section = bridge_section.get("logging", {})
    if not isinstance(section, dict):
        raise ConfigError("[bridge.logging] must be a table")
    level = str(section.get("level", "INFO")).upper()
    fmt = str(section.get("format", "text")).lower()
    if fmt not in LOG_FORMATS:
        raise ConfigError(
            f"Invalid bridge.logging.format: {fmt!r}. Expected one of {', '.join(LOG_FORMATS)}"
        )
    return LoggingConfig(level=level, format=fmt)


def _parse_strategies(bridge_section: dict) -> tuple[str, ...]:
    raw = bridge_section.get("authority_strategies", list(DEFAULT_STRATEGY_ORDER))
    if not isinstance(raw, list) or not all(isinstance(name, str) for name in raw):
        raise ConfigError("bridge.authority_strategies must be a list of strings")
    unknown = [name for name in raw if name not in STRATEGIES]
    if unknown:
        raise ConfigError(
            f"Unknown authority strategies: {', '.join(unknown)}. "
            f"Known: {', '.join(sorted(STRATEGIES))}"
        )
    return tuple(raw)


def parse_config(data: dict[str, Any]) -> BridgeConfig:
    """Validate an already-decoded TOML document into a ``BridgeConfig``."""
    data = resolve_env_vars(data)
    bridge_section = data.get("bridge", {})
    if not isinstance(bridge_section, dict):
        raise ConfigError("[bridge] must be a table")

    anchor = bridge_section.get("fallback_anchor_year", FALLBACK_ANCHOR_YEAR)
    if isinstance(anchor, bool) or not isinstance(anchor, int):
        raise ConfigError(f"bridge.fallback_anchor_year must be an integer, got {anchor!r}")

    return BridgeConfig(
        ready_delay_seconds=_number(
            bridge_section, "ready_delay_seconds", DEFAULT_READY_DELAY_SECONDS, path="bridge"
        ),
        fallback_anchor_year=anchor,
        widget_debounce_seconds=_number(
            bridge_section, "widget_debounce_seconds", 1.0, path="bridge"
        ),
        authority_strategies=_parse_strategies(bridge_section),
        logging=_parse_logging(bridge_section),
    )


def load_config(path: Path) -> BridgeConfig:
    """Load and validate configuration.

    Parameters
    ----------
    path:
        A TOML file, or a directory containing ``calendar_compat.toml``.

    Raises
    ------
    ConfigError
        If the file is missing, is not valid TOML, or fails validation.
    """
    path = Path(path)
    toml_path = path / CONFIG_FILENAME if path.is_dir() else path

    if not toml_path.exists():
        raise ConfigError(f"Config file not found: {toml_path}")

    try:
        data = tomllib.loads(toml_path.read_bytes().decode())
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {toml_path}: {exc}") from exc

    return parse_config(data)
