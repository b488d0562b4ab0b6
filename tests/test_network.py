#!/usr/bin/env python3
"""
Tests for the nmcli / iw wrappers and their output parsers.
"""

from unittest.mock import patch, call

import pytest

from wifi_fallback.exceptions import HotspotError, InterfaceNotFound
from wifi_fallback.models import BandType, CommandResult
from wifi_fallback.network import (
    NetworkManagerClient,
    WirelessDevices,
    parse_device_show,
    parse_interface_modes,
    parse_iw_dev_interfaces,
    parse_wiphy_index,
)

IW_PHY_INFO = """Wiphy phy0
	wiphy index: 0
	max # scan SSIDs: 10
	Supported interface modes:
		 * IBSS
		 * managed
		 * AP
		 * P2P-client
	Band 1:
		Capabilities: 0x1062
"""

IW_PHY_INFO_NO_AP = """Wiphy phy1
	Supported interface modes:
		 * managed
		 * AP/VLAN
		 * monitor
	Band 1:
"""

IW_DEV_INFO = """Interface wlan0
	ifindex 3
	wdev 0x1
	addr b8:27:eb:00:00:01
	type managed
	wiphy 0
	txpower 31.00 dBm
"""

IW_DEV = """phy#1
	Interface wlan1
		ifindex 4
		type managed
phy#0
	Interface wlan0
		ifindex 3
		type managed
"""


def ok(stdout: str = "") -> CommandResult:
    return CommandResult(success=True, stdout=stdout)


def failed(stderr: str = "", return_code: int = 10) -> CommandResult:
    return CommandResult(success=False, stderr=stderr, return_code=return_code)


class TestParsers:
    """Tests for the text output parsers."""

    def test_device_show_connected(self):
        status = parse_device_show("GENERAL.STATE:100 (connected)\nGENERAL.CONNECTION:HomeWifi\n")
        assert status.connected
        assert status.state_code == 100
        assert status.state_text == "connected"
        assert status.connection == "HomeWifi"

    def test_device_show_disconnected(self):
        status = parse_device_show("GENERAL.STATE:30 (disconnected)\nGENERAL.CONNECTION:\n")
        assert not status.connected
        assert status.state_text == "disconnected"
        assert status.connection is None

    def test_device_show_connecting_is_not_connected(self):
        status = parse_device_show("GENERAL.STATE:50 (connecting (configuring))\nGENERAL.CONNECTION:Cafe\n")
        assert not status.connected
        assert status.state_code == 50

    def test_device_show_unescapes_colons(self):
        status = parse_device_show("GENERAL.STATE:100 (connected)\nGENERAL.CONNECTION:Net\\:5G\n")
        assert status.connection == "Net:5G"

    def test_device_show_empty(self):
        status = parse_device_show("")
        assert not status.connected
        assert status.connection is None

    def test_interface_modes(self):
        assert parse_interface_modes(IW_PHY_INFO) == ["IBSS", "managed", "AP", "P2P-client"]

    def test_ap_vlan_is_not_ap(self):
        assert "AP" not in parse_interface_modes(IW_PHY_INFO_NO_AP)

    def test_wiphy_index(self):
        assert parse_wiphy_index(IW_DEV_INFO) == "0"
        assert parse_wiphy_index("Interface wlan0\n\ttype managed\n") is None

    def test_iw_dev_interfaces(self):
        assert parse_iw_dev_interfaces(IW_DEV) == ["wlan0", "wlan1"]


@pytest.fixture
def mock_run():
    with patch("wifi_fallback.network.run_command") as mock:
        yield mock


def argv_of(mock) -> list:
    return [c.args[0] for c in mock.call_args_list]


class TestNetworkManagerClient:
    """Tests for NetworkManagerClient against a mocked run_command."""

    def test_service_active(self, mock_run):
        mock_run.return_value = ok()
        assert NetworkManagerClient().is_service_active()
        assert argv_of(mock_run) == [["systemctl", "is-active", "--quiet", "NetworkManager"]]

    def test_service_inactive(self, mock_run):
        mock_run.return_value = failed(return_code=3)
        assert not NetworkManagerClient().is_service_active()

    def test_device_status(self, mock_run):
        mock_run.return_value = ok("GENERAL.STATE:100 (connected)\nGENERAL.CONNECTION:HomeWifi\n")
        status = NetworkManagerClient().device_status("wlan0")

        assert status.connected
        assert argv_of(mock_run) == [[
            "nmcli", "-t", "-f", "GENERAL.STATE,GENERAL.CONNECTION",
            "device", "show", "wlan0",
        ]]

    def test_device_status_nmcli_failure(self, mock_run):
        mock_run.return_value = failed("Error: Device 'wlan0' not found.")
        assert not NetworkManagerClient().device_status("wlan0").connected

    def test_activate_hotspot_command_sequence(self, mock_run):
        """Disconnect, remove the stale profile, then create the hotspot."""
        mock_run.return_value = ok()
        NetworkManagerClient().activate_hotspot(
            "wlan0", "airdancer-setup", "AirdancerSetup", "airdancer123", BandType.G_ONLY
        )

        assert argv_of(mock_run) == [
            ["nmcli", "device", "disconnect", "wlan0"],
            ["nmcli", "connection", "delete", "airdancer-setup"],
            [
                "nmcli", "device", "wifi", "hotspot",
                "ifname", "wlan0",
                "con-name", "airdancer-setup",
                "ssid", "AirdancerSetup",
                "password", "airdancer123",
                "band", "bg",
            ],
        ]

    def test_activate_hotspot_ignores_cleanup_failures(self, mock_run):
        mock_run.side_effect = [failed(), failed(), ok()]
        NetworkManagerClient().activate_hotspot("wlan0", "airdancer-setup", "Setup", "password1")
        assert mock_run.call_count == 3

    def test_activate_hotspot_failure(self, mock_run):
        mock_run.side_effect = [
            ok(),
            ok(),
            failed("Error: Connection activation failed.", return_code=4),
        ]
        with pytest.raises(HotspotError, match="Connection activation failed") as excinfo:
            NetworkManagerClient().activate_hotspot("wlan0", "airdancer-setup", "Setup", "password1")
        assert excinfo.value.return_code == 4

    def test_deactivate_existing_hotspot(self, mock_run):
        mock_run.return_value = ok()
        assert NetworkManagerClient().deactivate_hotspot("airdancer-setup")
        assert argv_of(mock_run) == [
            ["nmcli", "connection", "show", "airdancer-setup"],
            ["nmcli", "connection", "down", "airdancer-setup"],
            ["nmcli", "connection", "delete", "airdancer-setup"],
        ]

    def test_deactivate_without_hotspot_is_noop(self, mock_run):
        """Nothing is torn down when no fallback profile exists."""
        mock_run.return_value = failed("Error: airdancer-setup - no such connection profile.")
        client = NetworkManagerClient()

        assert not client.deactivate_hotspot("airdancer-setup")
        assert not client.deactivate_hotspot("airdancer-setup")
        assert mock_run.call_args_list == [
            call(["nmcli", "connection", "show", "airdancer-setup"], log_failure=False),
        ] * 2


class TestWirelessDevices:
    """Tests for WirelessDevices against a mocked run_command."""

    def test_interface_exists(self, mock_run):
        mock_run.return_value = ok()
        assert WirelessDevices().interface_exists("wlan0")
        assert argv_of(mock_run) == [["ip", "link", "show", "wlan0"]]

    def test_require_missing_interface(self, mock_run):
        mock_run.return_value = failed('Device "wlan9" does not exist.', return_code=1)
        with pytest.raises(InterfaceNotFound, match="wlan9"):
            WirelessDevices().require_interface("wlan9")

    def test_list_wireless_interfaces(self, mock_run):
        mock_run.return_value = ok(IW_DEV)
        assert WirelessDevices().list_wireless_interfaces() == ["wlan0", "wlan1"]

    def test_list_wireless_interfaces_without_iw(self, mock_run):
        mock_run.return_value = failed("No such file or directory", return_code=-1)
        assert WirelessDevices().list_wireless_interfaces() == []

    def test_get_phy(self, mock_run):
        mock_run.side_effect = [ok(IW_DEV_INFO), ok(IW_PHY_INFO)]
        phy = WirelessDevices().get_phy("wlan0")

        assert phy.name == "phy0"
        assert phy.supports_ap
        assert argv_of(mock_run)[1] == ["iw", "phy", "phy0", "info"]

    def test_get_phy_unknown_interface(self, mock_run):
        mock_run.return_value = failed("command failed: No such device (-19)")
        assert WirelessDevices().get_phy("wlan0") is None

    def test_get_phy_details_unreadable(self, mock_run):
        mock_run.side_effect = [ok(IW_DEV_INFO), failed()]
        phy = WirelessDevices().get_phy("wlan0")
        assert phy.name == "phy0"
        assert not phy.supports_ap
