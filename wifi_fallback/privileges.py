#!/usr/bin/env python3
"""
Privilege checks: the monitor needs root or membership in an admin group
(``netdev`` on Debian-based systems) to reconfigure NetworkManager.
"""

import grp
import os
import pwd

from loguru import logger

from .exceptions import PrivilegeError


def is_root() -> bool:
    return os.geteuid() == 0


def in_group(group_name: str) -> bool:
    """
    Check whether the current user belongs to a group.

    Both the process' supplementary groups and the group's member list are
    consulted, so membership counts even before the user has logged in again.
    """
    try:
        group = grp.getgrnam(group_name)
    except KeyError:
        logger.debug(f"Group {group_name} does not exist")
        return False

    if group.gr_gid == os.getegid() or group.gr_gid in os.getgroups():
        return True

    try:
        user = pwd.getpwuid(os.geteuid()).pw_name
    except KeyError:
        return False
    return user in group.gr_mem


def check_privileges(admin_group: str) -> None:
    """
    Raises:
        PrivilegeError: Unless running as root or as a member of admin_group
    """
    if is_root():
        logger.debug("Running as root")
        return
    if in_group(admin_group):
        logger.debug(f"Running as member of the {admin_group} group")
        return
    raise PrivilegeError(
        f"This program requires root privileges or membership in the {admin_group} group"
    )
