#!/usr/bin/env python3
"""
Exception types for the WiFi hotspot fallback monitor
"""

from typing import Optional


class WifiFallbackError(Exception):
    """Base exception for all fallback monitor errors"""
    pass


class ConfigError(WifiFallbackError):
    """Exception raised when the configuration is invalid or unreadable"""
    pass


class PrivilegeError(WifiFallbackError):
    """Exception raised when the process lacks root or admin group rights"""
    pass


class DependencyError(WifiFallbackError):
    """Exception raised when the NetworkManager service is not running"""
    pass


class InterfaceNotFound(WifiFallbackError):
    """Exception raised when the WiFi interface does not exist (yet)"""

    def __init__(self, interface: str):
        self.interface = interface
        super().__init__(f"WiFi interface {interface} not found")


class HotspotError(WifiFallbackError):
    """Exception raised when the fallback hotspot cannot be activated"""

    def __init__(self, message: str, return_code: Optional[int] = None, stderr: str = ""):
        self.return_code = return_code
        self.stderr = stderr.strip()
        if self.stderr:
            message = f"{message} (Return code: {return_code}): {self.stderr}"
        super().__init__(message)


class ShutdownRequested(BaseException):
    """
    Raised from the signal handler to abandon the current run.

    Derives from BaseException, like KeyboardInterrupt, so that generic
    ``except Exception`` blocks let it through.
    """

    def __init__(self, signum: int):
        self.signum = signum
        super().__init__(f"Received signal {signum}")
