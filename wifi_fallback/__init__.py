#!/usr/bin/env python3
"""
Airdancer WiFi Hotspot Fallback

Monitors WiFi connectivity on a Linux device and, if NetworkManager does not
join a known network within a timeout, turns the WiFi interface into an
access point so the device can be reached and configured.

Features:
- Layered configuration from defaults, environment, config file and flags
- Waits for late-attaching WiFi hardware
- Hotspot activation through nmcli, torn down again on SIGINT/SIGTERM
"""

from loguru import logger

from .models import (
    BandType,
    CommandResult,
    DeviceStatus,
    ExitStatus,
    LogLevel,
    MonitorResult,
    MonitorState,
    PhyInfo,
)
from .exceptions import (
    ConfigError,
    DependencyError,
    HotspotError,
    InterfaceNotFound,
    PrivilegeError,
    ShutdownRequested,
    WifiFallbackError,
)
from .config import FallbackConfig, load_config
from .command_utils import run_command
from .network import NetworkManagerClient, WirelessDevices
from .monitor import ConnectivityMonitor, run

# Module metadata
__version__ = "1.0.0"
__license__ = "GPL-3.0-or-later"

__all__ = [
    'BandType',
    'CommandResult',
    'ConfigError',
    'ConnectivityMonitor',
    'DependencyError',
    'DeviceStatus',
    'ExitStatus',
    'FallbackConfig',
    'HotspotError',
    'InterfaceNotFound',
    'LogLevel',
    'MonitorResult',
    'MonitorState',
    'NetworkManagerClient',
    'PhyInfo',
    'PrivilegeError',
    'ShutdownRequested',
    'WifiFallbackError',
    'WirelessDevices',
    'load_config',
    'logger',
    'run',
    'run_command',
]
