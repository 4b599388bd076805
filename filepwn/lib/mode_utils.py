#!/usr/bin/env python3
"""Utilities for parsing octal permission strings.
"""
import re

from filepwn.lib.errors import InvalidModeError

MAX_MODE = 0o777

mode_re = re.compile(r'[0-7]+')

def parse_mode(mode_str):
    """
    Convert an octal permission string (i.e. '644') to an integer, verifying
    it contains only octal digits and does not exceed 0o777
    """

    if not isinstance(mode_str, str):
        raise InvalidModeError(mode_str, "permissions must be given as an octal string, i.e. '644'")

    if not mode_re.fullmatch(mode_str):
        raise InvalidModeError(mode_str, "permissions may only contain the octal digits 0-7")

    mode = int(mode_str, 8)

    if mode > MAX_MODE:
        raise InvalidModeError(mode_str, f"value must be between 0 and {MAX_MODE:o}")

    return mode
