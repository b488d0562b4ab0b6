#!/usr/bin/env python3
"""
Command-line interface for the Airdancer WiFi hotspot fallback.

Parses flags, configures loguru, assembles the layered configuration and runs
the connectivity monitor once.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional

from loguru import logger
from rich.console import Console
from rich.table import Table

from .config import DEFAULT_CONFIG_FILE, ENV_KEYS, FallbackConfig, load_config
from .exceptions import ConfigError
from .models import BandType, ExitStatus, LogLevel
from .monitor import run as run_monitor

LOG_FORMAT = "[{time:YYYY-MM-DD HH:mm:ss}] [{level}] {message}"


class LoggerManager:
    """Loguru setup for the fallback monitor."""

    @staticmethod
    def setup_logger(level: LogLevel = LogLevel.INFO, log_file: Optional[Path] = None) -> None:
        """Configure loguru with a stderr sink and an optional file sink."""
        # Remove default logger
        logger.remove()

        logger.add(
            sys.stderr,
            level=level.loguru_level,
            format=LOG_FORMAT,
            colorize=False,
        )

        if log_file:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            logger.add(
                log_file,
                level="DEBUG",
                format=(
                    "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
                    "{level: <8} | "
                    "{name}:{function}:{line} | "
                    "{message}"
                ),
                rotation="10 MB",
                retention="1 week",
            )


class UsageExit(Exception):
    """Raised instead of exiting when argument parsing fails or help is shown."""

    def __init__(self, code: int):
        self.code = code
        super().__init__(f"exit {code}")


class FallbackArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports usage errors with exit status 1."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self._print_message(f"{self.prog}: error: {message}\n", sys.stderr)
        raise UsageExit(ExitStatus.FAILURE)

    def exit(self, status: int = 0, message: Optional[str] = None) -> NoReturn:
        if message:
            self._print_message(message, sys.stderr)
        raise UsageExit(status)


def create_parser() -> FallbackArgumentParser:
    """Create the argument parser."""
    parser = FallbackArgumentParser(
        prog="airdancer-wifi-fallback",
        description=(
            "WiFi Hotspot Fallback for Airdancer.\n\n"
            "Monitors WiFi connectivity and enables hotspot mode when no known\n"
            "network connects within the timeout."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Configuration:
  Settings can also come from environment variables or a config file of
  KEY=value assignments; the config file overrides the environment and
  flags override both:

    {ENV_KEYS['interface']}=wlan0
    {ENV_KEYS['hotspot_ssid']}=MyHotspot
    {ENV_KEYS['hotspot_password']}=MyPassword
    {ENV_KEYS['connection_timeout']}=120
    {ENV_KEYS['check_interval']}=5
    {ENV_KEYS['log_level']}=INFO

Examples:
  airdancer-wifi-fallback
  airdancer-wifi-fallback -i wlan0
  airdancer-wifi-fallback -s "AirdancerSetup" -p "mypassword123"
  airdancer-wifi-fallback -t 60
  airdancer-wifi-fallback -v
        """,
    )

    parser.add_argument(
        "-c", "--config", dest="config_file", type=Path, metavar="FILE",
        help=f"Configuration file (default: {DEFAULT_CONFIG_FILE})",
    )
    parser.add_argument(
        "-i", "--interface", metavar="IFACE", help="WiFi interface (default: wlan0)"
    )
    parser.add_argument(
        "-s", "--ssid", dest="hotspot_ssid", metavar="SSID",
        help="Hotspot SSID (default: AirdancerSetup)",
    )
    parser.add_argument(
        "-p", "--password", dest="hotspot_password", metavar="PASS",
        help="Hotspot password, 8-63 characters (default: airdancer123)",
    )
    parser.add_argument(
        "-t", "--timeout", dest="connection_timeout", type=int, metavar="SECONDS",
        help="Connection timeout in seconds (default: 120)",
    )
    parser.add_argument(
        "--interval", dest="check_interval", type=int, metavar="SECONDS",
        help="Seconds between connection checks (default: 5)",
    )
    parser.add_argument(
        "--band", dest="hotspot_band", choices=[b.value for b in BandType],
        help="Hotspot frequency band (default: bg)",
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    verbosity.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARN", "WARNING", "ERROR"],
        type=str.upper, help="Log verbosity (default: INFO)",
    )

    parser.add_argument(
        "--log-file", type=Path, help="Also write debug logs to this file"
    )
    parser.add_argument(
        "--show-config", action="store_true",
        help="Print the effective configuration and exit",
    )
    return parser


def extract_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Map parsed flags onto config fields; flags not given map to None."""
    log_level = "DEBUG" if args.verbose else args.log_level
    return {
        "config_file": args.config_file,
        "interface": args.interface,
        "hotspot_ssid": args.hotspot_ssid,
        "hotspot_password": args.hotspot_password,
        "connection_timeout": args.connection_timeout,
        "check_interval": args.check_interval,
        "hotspot_band": args.hotspot_band,
        "log_level": log_level,
    }


def print_config(config: FallbackConfig, console: Optional[Console] = None) -> None:
    """Display the effective configuration in a table, password masked."""
    console = console or Console()
    table = Table(title="Airdancer WiFi Fallback Configuration", show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Environment / config key", style="blue")
    table.add_column("Value", style="green")

    for key, value in config.to_dict().items():
        table.add_row(key.replace("_", " ").title(), ENV_KEYS[key], str(value))

    console.print(table)


class FallbackCLI:
    """Command-line entry point for the fallback monitor."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.parser = create_parser()
        self.console = console or Console()

    def run(self, args: Optional[List[str]] = None) -> int:
        """Parse arguments, build the configuration and run the monitor."""
        try:
            parsed_args = self.parser.parse_args(args)
        except UsageExit as e:
            return int(e.code)

        # Provisional logging until the configured level is known
        LoggerManager.setup_logger(
            LogLevel.DEBUG if parsed_args.verbose else LogLevel.INFO,
            parsed_args.log_file,
        )

        try:
            config = load_config(extract_overrides(parsed_args))
        except ConfigError as e:
            logger.error(str(e))
            return ExitStatus.FAILURE

        LoggerManager.setup_logger(config.log_level, parsed_args.log_file)

        if parsed_args.show_config:
            print_config(config, self.console)
            return ExitStatus.SUCCESS

        return int(run_monitor(config))


def main() -> None:
    """Main entry point for the CLI application."""
    cli = FallbackCLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
