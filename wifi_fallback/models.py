#!/usr/bin/env python3
"""
Data models for the WiFi hotspot fallback monitor.
Contains enum classes and dataclasses used throughout the application.
"""

from enum import Enum, IntEnum
from dataclasses import dataclass, field
from typing import Optional, List, Union


class LogLevel(Enum):
    """
    Log verbosity accepted in configuration.

    WARN is the configuration spelling; loguru calls the same level WARNING.
    """

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"

    @property
    def loguru_level(self) -> str:
        """Name of the matching loguru level."""
        return "WARNING" if self is LogLevel.WARN else self.value

    @classmethod
    def parse(cls, value: Union[str, "LogLevel"]) -> "LogLevel":
        """Parse a level name case-insensitively, accepting WARNING as WARN."""
        if isinstance(value, cls):
            return value
        name = str(value).strip().upper()
        if name == "WARNING":
            name = "WARN"
        return cls(name)


class BandType(Enum):
    """
    WiFi frequency bands that can be used for the fallback hotspot.
    """

    G_ONLY = "bg"  # 2.4 GHz band
    A_ONLY = "a"  # 5 GHz band


class MonitorState(Enum):
    """States the connectivity monitor moves through during one run."""

    CHECKING_PRIVILEGES = "checking_privileges"
    CHECKING_DEPENDENCY = "checking_dependency"
    WAITING_FOR_INTERFACE = "waiting_for_interface"
    CHECKING_CONNECTION = "checking_connection"
    WAITING_FOR_TIMEOUT = "waiting_for_timeout"
    ACTIVATING_HOTSPOT = "activating_hotspot"
    CONNECTED = "connected"
    HOTSPOT_ACTIVE = "hotspot_active"
    HOTSPOT_FAILED = "hotspot_failed"
    SHUTTING_DOWN = "shutting_down"
    TERMINATED = "terminated"


class MonitorResult(Enum):
    """
    Successful outcomes of a monitor run.

    A joined network and an activated fallback hotspot both count as success
    for the process, but they are different outcomes and are kept apart.
    """

    CONNECTED = "connected"
    HOTSPOT_FALLBACK_ACTIVE = "hotspot_fallback_active"


class ExitStatus(IntEnum):
    """Process exit codes."""

    SUCCESS = 0
    FAILURE = 1


@dataclass
class CommandResult:
    """
    Result of a command execution.

    This class standardizes command execution returns with fields for stdout,
    stderr, success status, and the original command executed.
    """

    success: bool
    stdout: str = ""
    stderr: str = ""
    return_code: int = 0
    command: List[str] = field(default_factory=list)

    @property
    def output(self) -> str:
        """Get combined output (stdout + stderr)."""
        return "\n".join(
            part for part in (self.stdout.strip(), self.stderr.strip()) if part
        )


# NetworkManager device state codes (NMDeviceState)
NM_STATE_CONNECTED = 100


@dataclass
class DeviceStatus:
    """State of a network device as reported by NetworkManager."""

    state_code: int = 0
    state_text: str = "unknown"
    connection: Optional[str] = None

    @property
    def connected(self) -> bool:
        """True when the device is fully activated."""
        return self.state_code == NM_STATE_CONNECTED


@dataclass
class PhyInfo:
    """Wireless PHY backing an interface and the interface modes it supports."""

    name: str
    interface_modes: List[str] = field(default_factory=list)

    @property
    def supports_ap(self) -> bool:
        """Check if the PHY can run an access point."""
        return "AP" in self.interface_modes
