#!/usr/bin/env python3
"""
Wrappers around the external network tools used by the fallback monitor.

NetworkManagerClient talks to NetworkManager through ``systemctl`` and
``nmcli``; WirelessDevices inspects interfaces and PHYs through ``ip`` and
``iw``. Parsing of the tools' text output lives in small module-level
functions.
"""

import re
from typing import List, Optional

from loguru import logger

from .command_utils import run_command
from .exceptions import HotspotError, InterfaceNotFound
from .models import BandType, CommandResult, DeviceStatus, PhyInfo

NETWORK_MANAGER_SERVICE = "NetworkManager"

_STATE_PATTERN = re.compile(r"^(\d+)\s*(?:\((.*)\))?$")
_WIPHY_PATTERN = re.compile(r"^\s*wiphy\s+(\d+)\s*$", re.MULTILINE)
_INTERFACE_PATTERN = re.compile(r"^\s*Interface\s+(\S+)\s*$", re.MULTILINE)


def _unescape_terse(value: str) -> str:
    """Undo nmcli's terse-mode escaping of ':' and '\\'."""
    return value.replace("\\:", ":").replace("\\\\", "\\")


def parse_device_show(output: str) -> DeviceStatus:
    """
    Parse ``nmcli -t -f GENERAL.STATE,GENERAL.CONNECTION device show`` output.

    Example input::

        GENERAL.STATE:100 (connected)
        GENERAL.CONNECTION:HomeWifi
    """
    status = DeviceStatus()
    for line in output.splitlines():
        if ":" not in line:
            continue
        key, value = line.split(":", 1)
        value = _unescape_terse(value.strip())
        if key == "GENERAL.STATE":
            match = _STATE_PATTERN.match(value)
            if match:
                status.state_code = int(match.group(1))
                status.state_text = match.group(2) or value
            else:
                status.state_text = value or status.state_text
        elif key == "GENERAL.CONNECTION":
            # nmcli prints "--" or nothing when no profile is active
            status.connection = value if value and value != "--" else None
    return status


def parse_wiphy_index(output: str) -> Optional[str]:
    """Extract the PHY index from ``iw dev <iface> info`` output."""
    match = _WIPHY_PATTERN.search(output)
    return match.group(1) if match else None


def parse_interface_modes(output: str) -> List[str]:
    """
    Extract the "Supported interface modes" list from ``iw phy <phy> info``.

    Example input::

        Supported interface modes:
                 * IBSS
                 * managed
                 * AP
                 * AP/VLAN
        Band 1:
    """
    modes: List[str] = []
    in_section = False
    for line in output.splitlines():
        stripped = line.strip()
        if stripped.startswith("Supported interface modes"):
            in_section = True
            continue
        if in_section:
            if not stripped.startswith("*"):
                break
            modes.append(stripped.lstrip("*").strip())
    return modes


def parse_iw_dev_interfaces(output: str) -> List[str]:
    """List interface names from ``iw dev`` output."""
    return sorted(_INTERFACE_PATTERN.findall(output))


class NetworkManagerClient:
    """
    Queries and controls NetworkManager for the fallback monitor.

    Every method maps onto one or a few ``nmcli``/``systemctl`` invocations.
    """

    def is_service_active(self, service: str = NETWORK_MANAGER_SERVICE) -> bool:
        """Check whether the NetworkManager systemd unit is active."""
        result = run_command(
            ["systemctl", "is-active", "--quiet", service], log_failure=False
        )
        return result.success

    def device_status(self, interface: str) -> DeviceStatus:
        """
        Get state and active profile of a device.

        Returns:
            DeviceStatus; a default (disconnected) status if nmcli fails
        """
        result = run_command(
            [
                "nmcli", "-t", "-f", "GENERAL.STATE,GENERAL.CONNECTION",
                "device", "show", interface,
            ],
            log_failure=False,
        )
        if not result.success:
            return DeviceStatus()
        return parse_device_show(result.stdout)

    def disconnect_device(self, interface: str) -> bool:
        return run_command(
            ["nmcli", "device", "disconnect", interface], log_failure=False
        ).success

    def connection_exists(self, name: str) -> bool:
        return run_command(
            ["nmcli", "connection", "show", name], log_failure=False
        ).success

    def connection_down(self, name: str) -> bool:
        return run_command(
            ["nmcli", "connection", "down", name], log_failure=False
        ).success

    def delete_connection(self, name: str) -> bool:
        return run_command(
            ["nmcli", "connection", "delete", name], log_failure=False
        ).success

    def create_hotspot(
        self,
        interface: str,
        connection_name: str,
        ssid: str,
        password: str,
        band: BandType = BandType.G_ONLY,
    ) -> CommandResult:
        """Create and activate an access point profile in one nmcli call."""
        return run_command([
            "nmcli", "device", "wifi", "hotspot",
            "ifname", interface,
            "con-name", connection_name,
            "ssid", ssid,
            "password", password,
            "band", band.value,
        ])

    def activate_hotspot(
        self,
        interface: str,
        connection_name: str,
        ssid: str,
        password: str,
        band: BandType = BandType.G_ONLY,
    ) -> None:
        """
        Switch the interface from client mode to the fallback hotspot.

        Drops the current association and any stale fallback profile left by
        an earlier run, then creates the new access point profile.

        Raises:
            HotspotError: If nmcli could not create or activate the profile
        """
        logger.info(f"Enabling hotspot mode on {interface}...")

        if not self.disconnect_device(interface):
            logger.debug(f"Nothing to disconnect on {interface}")
        if self.delete_connection(connection_name):
            logger.debug(f"Removed stale hotspot profile '{connection_name}'")

        result = self.create_hotspot(interface, connection_name, ssid, password, band)
        if not result.success:
            raise HotspotError(
                f"Failed to enable hotspot '{ssid}' on {interface}",
                return_code=result.return_code,
                stderr=result.stderr,
            )
        logger.info(f"Hotspot '{ssid}' enabled successfully on {interface}")

    def deactivate_hotspot(self, connection_name: str) -> bool:
        """
        Bring down and delete the fallback hotspot profile.

        Safe to call repeatedly; does nothing when no such profile exists.

        Returns:
            True if a profile was found and torn down
        """
        logger.info("Disabling hotspot mode...")
        if not self.connection_exists(connection_name):
            logger.debug("No hotspot connection to disable")
            return False

        self.connection_down(connection_name)
        self.delete_connection(connection_name)
        logger.info("Hotspot disabled successfully")
        return True


class WirelessDevices:
    """Inspects wireless interfaces and their PHYs with ``ip`` and ``iw``."""

    def interface_exists(self, interface: str) -> bool:
        return run_command(["ip", "link", "show", interface], log_failure=False).success

    def require_interface(self, interface: str) -> None:
        """
        Raises:
            InterfaceNotFound: If the interface is not present
        """
        if not self.interface_exists(interface):
            raise InterfaceNotFound(interface)

    def list_wireless_interfaces(self) -> List[str]:
        """Get the names of all wireless interfaces known to ``iw``."""
        result = run_command(["iw", "dev"], log_failure=False)
        if not result.success:
            return []
        return parse_iw_dev_interfaces(result.stdout)

    def get_phy(self, interface: str) -> Optional[PhyInfo]:
        """
        Look up the PHY behind an interface and its supported modes.

        Returns:
            PhyInfo, or None if the PHY could not be determined. A PHY whose
            details cannot be read is returned with no modes.
        """
        info = run_command(["iw", "dev", interface, "info"], log_failure=False)
        if not info.success:
            return None
        index = parse_wiphy_index(info.stdout)
        if index is None:
            return None

        phy = PhyInfo(name=f"phy{index}")
        details = run_command(["iw", "phy", phy.name, "info"], log_failure=False)
        if details.success:
            phy.interface_modes = parse_interface_modes(details.stdout)
        return phy
