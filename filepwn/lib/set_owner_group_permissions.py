#!/usr/bin/env python3
"""Utilities for setting file permissions/ownership.
"""
import logging
from os import chown, chmod

from filepwn.lib.errors import ModeApplicationError, OwnershipApplicationError

def set_mode(path, mode):
    """
    Set the permission bits for the given path
    """

    try:
        chmod(path, mode)
    except OSError as exc:
        raise ModeApplicationError(path, exc) from exc


def set_owner(path, uid, gid):
    """
    Set the user/group ownership for the given path
    """

    try:
        chown(path, uid, gid)
    except OSError as exc:
        raise OwnershipApplicationError(path, exc) from exc


def set_owner_group_permissions(paths, uid, gid, mode):
    """
    Set the permissions and ownership for every path in the provided list.
    Failures are logged and do not stop processing of the remaining paths.
    Returns the list of failure reasons.
    """

    reasons = []

    for path in paths:
        logging.debug("Setting ownership/permissions for %s", path)

        try:
            set_mode(path, mode)
        except ModeApplicationError as exc:
            logging.warning(str(exc))
            reasons.append(str(exc))

        try:
            set_owner(path, uid, gid)
        except OwnershipApplicationError as exc:
            logging.warning(str(exc))
            reasons.append(str(exc))

    return reasons
