#!/usr/bin/env python3
"""
Configuration for the WiFi hotspot fallback monitor.

The effective configuration is assembled once at startup from, in increasing
precedence: built-in defaults, ``AIRDANCER_*`` environment variables, the
optional config file, and command-line flags. The result is a frozen
Pydantic v2 model that is handed to the monitor and never changes afterwards.

The config file uses the same ``KEY=value`` assignments as the environment::

    AIRDANCER_WIFI_INTERFACE=wlan0
    AIRDANCER_HOTSPOT_SSID="My Hotspot"
    AIRDANCER_CONNECTION_TIMEOUT=60
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from dotenv import dotenv_values
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ConfigError
from .models import BandType, LogLevel

DEFAULT_CONFIG_FILE = Path("/etc/airdancer/wifi-fallback.conf")

# Config field -> environment variable / config file key
ENV_KEYS: Dict[str, str] = {
    "interface": "AIRDANCER_WIFI_INTERFACE",
    "hotspot_ssid": "AIRDANCER_HOTSPOT_SSID",
    "hotspot_password": "AIRDANCER_HOTSPOT_PASSWORD",
    "connection_timeout": "AIRDANCER_CONNECTION_TIMEOUT",
    "check_interval": "AIRDANCER_CHECK_INTERVAL",
    "log_level": "AIRDANCER_LOG_LEVEL",
    "config_file": "AIRDANCER_CONFIG_FILE",
    "hotspot_band": "AIRDANCER_HOTSPOT_BAND",
    "hotspot_connection_name": "AIRDANCER_HOTSPOT_CONNECTION",
    "admin_group": "AIRDANCER_ADMIN_GROUP",
}

_FIELDS_BY_KEY: Dict[str, str] = {key: name for name, key in ENV_KEYS.items()}


class FallbackConfig(BaseModel):
    """Immutable runtime configuration for the connectivity monitor."""

    # SSID and passphrase keep surrounding whitespace
    model_config = ConfigDict(frozen=True, extra="forbid")

    interface: str = Field(default="wlan0", min_length=1, description="WiFi interface")
    hotspot_ssid: str = Field(
        default="AirdancerSetup", min_length=1, max_length=32, description="Hotspot SSID"
    )
    hotspot_password: str = Field(
        default="airdancer123",
        min_length=8,
        max_length=63,
        description="Hotspot WPA2 passphrase",
    )
    connection_timeout: int = Field(
        default=120, ge=0, description="Seconds to wait for a connection"
    )
    check_interval: int = Field(
        default=5, gt=0, description="Seconds between state checks"
    )
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Log verbosity")
    config_file: Path = Field(default=DEFAULT_CONFIG_FILE, description="Config file path")
    hotspot_band: BandType = Field(default=BandType.G_ONLY, description="Hotspot band")
    hotspot_connection_name: str = Field(
        default="airdancer-setup",
        min_length=1,
        description="NetworkManager profile name of the fallback hotspot",
    )
    admin_group: str = Field(
        default="netdev", min_length=1, description="Group allowed to run without root"
    )

    @field_validator("interface", "hotspot_connection_name", "admin_group", mode="before")
    @classmethod
    def strip_names(cls, v: Any) -> Any:
        """Trim whitespace around interface, profile and group names."""
        return v.strip() if isinstance(v, str) else v

    @field_validator("log_level", mode="before")
    @classmethod
    def parse_log_level(cls, v: Any) -> LogLevel:
        """Accept level names in any case, including WARNING."""
        try:
            return LogLevel.parse(v)
        except ValueError:
            raise ValueError(
                f"log level must be one of DEBUG, INFO, WARN, ERROR (got {v!r})"
            ) from None

    def to_dict(self, mask_secrets: bool = True) -> Dict[str, Any]:
        """Convert configuration to a plain dictionary for display."""
        result = self.model_dump()
        result["log_level"] = self.log_level.value
        result["hotspot_band"] = self.hotspot_band.value
        result["config_file"] = str(self.config_file)
        if mask_secrets:
            result["hotspot_password"] = "*" * len(self.hotspot_password)
        return result


def _known_values(
    source: Mapping[str, Optional[str]], origin: str, skip_empty: bool = False
) -> Dict[str, str]:
    """
    Pick the AIRDANCER_* keys out of a mapping, keyed by config field name.

    With skip_empty, keys set to an empty string are treated as unset, the
    way ${VAR:-default} does in a shell.
    """
    values: Dict[str, str] = {}
    for key, value in source.items():
        name = _FIELDS_BY_KEY.get(key)
        if name is None:
            continue
        if value is None:
            logger.warning(f"Ignoring {key} without a value in {origin}")
            continue
        if skip_empty and value == "":
            logger.debug(f"{key} is empty in {origin}, using the default")
            continue
        values[name] = value
    return values


def read_config_file(path: Path) -> Dict[str, str]:
    """
    Read ``KEY=value`` assignments from a config file.

    Args:
        path: Config file location. A missing file yields no values.

    Returns:
        Dictionary keyed by config field name

    Raises:
        ConfigError: If the file exists but cannot be read
    """
    if not path.exists():
        logger.debug(f"No config file at {path}, using defaults")
        return {}
    if not path.is_file():
        raise ConfigError(f"Config path is not a file: {path}")

    try:
        raw = dotenv_values(path)
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    for key in raw:
        if key not in _FIELDS_BY_KEY:
            logger.warning(f"Ignoring unknown key {key} in {path}")

    values = _known_values(raw, str(path))
    # The file cannot redirect to another file
    if values.pop("config_file", None) is not None:
        logger.warning(f"Ignoring {ENV_KEYS['config_file']} set inside {path}")

    logger.debug(f"Loaded {len(values)} setting(s) from {path}")
    return values


def load_config(
    cli_overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> FallbackConfig:
    """
    Build the effective configuration.

    Args:
        cli_overrides: Values from command-line flags keyed by field name;
            ``None`` entries mean "flag not given"
        environ: Environment to read, defaults to ``os.environ``

    Returns:
        Frozen FallbackConfig

    Raises:
        ConfigError: If the config file is unreadable or a value is invalid
    """
    environ = os.environ if environ is None else environ
    flags = {k: v for k, v in (cli_overrides or {}).items() if v is not None}

    values: Dict[str, Any] = dict(_known_values(environ, "environment", skip_empty=True))

    config_path = Path(flags.get("config_file") or values.get("config_file") or DEFAULT_CONFIG_FILE)
    values.update(read_config_file(config_path))
    values.update(flags)
    values["config_file"] = config_path

    try:
        return FallbackConfig(**values)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigError(f"Invalid configuration: {problems}") from e
