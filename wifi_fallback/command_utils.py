#!/usr/bin/env python3
"""
Command execution utilities for the WiFi hotspot fallback monitor.
Provides a helper for running external network tools synchronously.
"""

import subprocess
from typing import List, Optional
from loguru import logger

from .models import CommandResult

# External tools are expected to answer quickly; anything slower is a failure.
DEFAULT_COMMAND_TIMEOUT = 30.0


def run_command(
    cmd: List[str],
    timeout: Optional[float] = DEFAULT_COMMAND_TIMEOUT,
    log_failure: bool = True,
) -> CommandResult:
    """
    Run a command synchronously and return the result.

    Args:
        cmd: List of command parts to execute
        timeout: Seconds to wait before giving up on the command
        log_failure: Log a failure at error level. Checks whose failure
            is an ordinary answer (e.g. "interface missing") pass False and
            only get a debug line.

    Returns:
        CommandResult object containing the command output and status
    """
    logger.debug(f"Running command: {' '.join(cmd)}")
    try:
        result = subprocess.run(
            cmd,
            check=False,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
        success = result.returncode == 0

        if not success:
            if log_failure:
                logger.error(f"Command failed: {' '.join(cmd)}")
                logger.error(f"Error: {result.stderr.strip()}")
            else:
                logger.debug(
                    f"Command exited with {result.returncode}: {' '.join(cmd)}")

        return CommandResult(
            success=success,
            stdout=result.stdout,
            stderr=result.stderr,
            return_code=result.returncode,
            command=cmd
        )
    except subprocess.TimeoutExpired:
        logger.error(f"Command timed out after {timeout}s: {' '.join(cmd)}")
        return CommandResult(
            success=False,
            stderr=f"timed out after {timeout}s",
            return_code=-1,
            command=cmd
        )
    except OSError as e:
        # Missing binary or permission problem
        if log_failure:
            logger.error(f"Cannot execute {cmd[0]}: {e}")
        else:
            logger.debug(f"Cannot execute {cmd[0]}: {e}")
        return CommandResult(
            success=False,
            stderr=str(e),
            return_code=-1,
            command=cmd
        )
