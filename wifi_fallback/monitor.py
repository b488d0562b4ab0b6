#!/usr/bin/env python3
"""
Connectivity monitor for the WiFi hotspot fallback.

Waits a bounded time for NetworkManager to join a known network on the
configured interface and turns the interface into an access point when no
connection comes up. SIGINT/SIGTERM abandon the run and tear the fallback
hotspot down.
"""

import signal
import time
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from loguru import logger

from .config import FallbackConfig
from .exceptions import (
    DependencyError,
    HotspotError,
    InterfaceNotFound,
    PrivilegeError,
    ShutdownRequested,
)
from .models import ExitStatus, MonitorResult, MonitorState
from .network import NetworkManagerClient, WirelessDevices
from .privileges import check_privileges

TERMINATION_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def _raise_shutdown(signum, frame) -> None:
    # Later signals must not interrupt the teardown that follows
    for sig in TERMINATION_SIGNALS:
        signal.signal(sig, signal.SIG_IGN)
    raise ShutdownRequested(signum)


@contextmanager
def termination_signals(handler=_raise_shutdown) -> Iterator[None]:
    """
    Install a handler for SIGINT and SIGTERM for the duration of the block.

    The previous handlers are restored however the block exits.
    """
    previous = {sig: signal.getsignal(sig) for sig in TERMINATION_SIGNALS}
    for sig in TERMINATION_SIGNALS:
        signal.signal(sig, handler)
    try:
        yield
    finally:
        for sig, old_handler in previous.items():
            if old_handler is not None:
                signal.signal(sig, old_handler)


class ConnectivityMonitor:
    """
    Runs the connect-or-fallback sequence once.

    Collaborators are injectable so the sequence can be driven without real
    network tools or real time.
    """

    def __init__(
        self,
        config: FallbackConfig,
        network: Optional[NetworkManagerClient] = None,
        devices: Optional[WirelessDevices] = None,
        privilege_check: Optional[Callable[[str], None]] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config
        self.network = network or NetworkManagerClient()
        self.devices = devices or WirelessDevices()
        self._check_privileges = privilege_check or check_privileges
        self._sleep = sleep
        self._clock = clock
        self.state: Optional[MonitorState] = None

    def _transition(self, state: MonitorState) -> None:
        previous = self.state.value if self.state else "start"
        logger.debug(f"State: {previous} -> {state.value}")
        self.state = state

    def run(self) -> MonitorResult:
        """
        Wait for a connection and fall back to hotspot mode if none comes up.

        Returns:
            MonitorResult.CONNECTED if a network was joined, or
            MonitorResult.HOTSPOT_FALLBACK_ACTIVE if the hotspot was started

        Raises:
            PrivilegeError: Not root and not in the admin group
            DependencyError: NetworkManager is not running
            HotspotError: The fallback hotspot could not be activated
        """
        config = self.config

        self._transition(MonitorState.CHECKING_PRIVILEGES)
        self._check_privileges(config.admin_group)

        self._transition(MonitorState.CHECKING_DEPENDENCY)
        if not self.network.is_service_active():
            raise DependencyError("NetworkManager is not running")

        self._transition(MonitorState.WAITING_FOR_INTERFACE)
        self.wait_for_interface()
        self.check_ap_support()

        logger.info(f"Starting WiFi fallback monitor on interface: {config.interface}")
        logger.info(
            f"Hotspot fallback: SSID={config.hotspot_ssid}, "
            f"Password={config.hotspot_password}"
        )
        logger.info(f"Connection timeout: {config.connection_timeout}s")

        self._transition(MonitorState.CHECKING_CONNECTION)
        status = self.network.device_status(config.interface)
        if status.connected:
            logger.info(f"Already connected to '{status.connection}', no hotspot needed")
            self._transition(MonitorState.CONNECTED)
            return MonitorResult.CONNECTED

        self._transition(MonitorState.WAITING_FOR_TIMEOUT)
        if self.wait_for_connection():
            logger.info("NetworkManager successfully established connection, no hotspot needed")
            self._transition(MonitorState.CONNECTED)
            return MonitorResult.CONNECTED

        logger.info("No network connection available, enabling hotspot mode as fallback...")
        self._transition(MonitorState.ACTIVATING_HOTSPOT)
        try:
            self.network.activate_hotspot(
                config.interface,
                config.hotspot_connection_name,
                config.hotspot_ssid,
                config.hotspot_password,
                config.hotspot_band,
            )
        except HotspotError:
            self._transition(MonitorState.HOTSPOT_FAILED)
            raise

        self._transition(MonitorState.HOTSPOT_ACTIVE)
        logger.info(
            f"Hotspot enabled successfully. Connect to '{config.hotspot_ssid}' "
            f"to configure network settings."
        )
        return MonitorResult.HOTSPOT_FALLBACK_ACTIVE

    def wait_for_interface(self) -> None:
        """Block until the configured interface exists. Never times out."""
        interface = self.config.interface
        reported = False
        while True:
            try:
                self.devices.require_interface(interface)
                if reported:
                    logger.info(f"WiFi interface {interface} is now available")
                return
            except InterfaceNotFound as e:
                if not reported:
                    logger.error(str(e))
                    available = self.devices.list_wireless_interfaces()
                    logger.info(
                        f"Available WiFi interfaces: {', '.join(available) or 'none'}"
                    )
                    reported = True
                else:
                    logger.debug(f"Still waiting for {interface}...")
            self._sleep(self.config.check_interval)

    def check_ap_support(self) -> Optional[bool]:
        """
        Report whether the interface's PHY supports AP mode.

        Returns:
            True/False, or None when the PHY could not be determined
        """
        interface = self.config.interface
        phy = self.devices.get_phy(interface)
        if phy is None:
            logger.warning(f"Could not determine phy for interface {interface}")
            return None
        if phy.supports_ap:
            logger.debug(f"Interface {interface} ({phy.name}) supports AP mode")
        else:
            logger.warning(f"Interface {interface} ({phy.name}) may not support AP mode")
        return phy.supports_ap

    def wait_for_connection(self) -> bool:
        """
        Poll the connection state until connected or the timeout elapses.

        The initial check has already been made by the caller, so each round
        sleeps first. A zero timeout returns immediately.

        Returns:
            True if a connection came up within the timeout
        """
        config = self.config
        timeout = config.connection_timeout
        logger.info(f"Waiting up to {timeout}s for NetworkManager to establish connection...")

        started = self._clock()
        deadline = started + timeout
        while self._clock() < deadline:
            self._sleep(config.check_interval)
            elapsed = self._clock() - started
            logger.debug(f"Waiting for connection... ({elapsed:.0f}s/{timeout}s)")

            status = self.network.device_status(config.interface)
            if status.connected:
                logger.info(f"Network connection established to '{status.connection}'")
                return True

        logger.info(f"No network connection established within {timeout}s")
        return False

    def shutdown(self) -> None:
        """Tear down the fallback hotspot profile, if one exists."""
        self._transition(MonitorState.SHUTTING_DOWN)
        try:
            self.network.deactivate_hotspot(self.config.hotspot_connection_name)
        finally:
            self._transition(MonitorState.TERMINATED)


def run(config: FallbackConfig, monitor: Optional[ConnectivityMonitor] = None) -> ExitStatus:
    """
    Run the monitor once under signal-driven cancellation.

    Args:
        config: Effective configuration
        monitor: Pre-built monitor, mainly for tests

    Returns:
        ExitStatus.SUCCESS when connected, when the fallback hotspot is up,
        or after a signal-triggered shutdown; ExitStatus.FAILURE otherwise
    """
    monitor = monitor or ConnectivityMonitor(config)
    logger.info("Airdancer WiFi Hotspot Fallback starting...")

    with termination_signals():
        try:
            result = monitor.run()
            logger.debug(f"Monitor finished: {result.value}")
            return ExitStatus.SUCCESS
        except ShutdownRequested as e:
            logger.info(f"Received {signal.Signals(e.signum).name}, shutting down...")
            monitor.shutdown()
            return ExitStatus.SUCCESS
        except (PrivilegeError, DependencyError, HotspotError) as e:
            logger.error(str(e))
            return ExitStatus.FAILURE
