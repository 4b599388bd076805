#!/usr/bin/env python3
"""Utilities for walking a directory tree breadth-first.
"""
import logging
import os
import stat
from collections import deque
from dataclasses import dataclass, field
from typing import List, Tuple

from filepwn.lib.errors import DirectoryUnreadable

@dataclass
class WalkResult:
    """
    Canonical paths found beneath a root directory, in breadth-first order.
    The root directory itself is never included.
    """
    files: List[str] = field(default_factory=list)
    directories: List[str] = field(default_factory=list)
    failures: List[Tuple[str, str]] = field(default_factory=list)


def list_directory(directory):
    """
    Return the full paths of the entries in the given directory
    """

    try:
        return [os.path.join(directory, entry) for entry in os.listdir(directory)]
    except OSError as exc:
        raise DirectoryUnreadable(directory, exc) from exc


def walk_tree(root_dir):
    """
    Walk the directory tree beneath root_dir one level at a time using an
    explicit frontier of directory listings.  Returns a WalkResult holding the
    canonical paths of every regular file and directory found.  Symlinks,
    devices, sockets and fifos are ignored.

    Entries that cannot be canonicalized or stat'd, and sub-directories that
    cannot be listed, are logged and recorded in WalkResult.failures.  Failure
    to list root_dir itself raises DirectoryUnreadable.
    """

    results = WalkResult()

    def _record_failure(path, reason):
        logging.warning("Unable to process %s: %s", path, reason)
        results.failures.append((path, reason))

    frontier = deque([list_directory(root_dir)])
    expanded = {os.path.realpath(root_dir)}

    while frontier:
        batches = list(frontier)
        frontier.clear()

        for batch in batches:
            for path in batch:
                try:
                    canonical_path = os.path.realpath(path, strict=True)
                except OSError as exc:
                    _record_failure(path, f"unable to resolve path: {exc}")
                    continue

                try:
                    st_mode = os.lstat(path).st_mode
                except OSError as exc:
                    _record_failure(path, f"unable to determine type: {exc}")
                    continue

                if stat.S_ISREG(st_mode):
                    logging.debug("File: %s", canonical_path)
                    results.files.append(canonical_path)

                elif stat.S_ISDIR(st_mode):
                    # already reached through another mount point
                    if canonical_path in expanded:
                        continue
                    expanded.add(canonical_path)

                    logging.debug("Directory: %s", canonical_path)
                    results.directories.append(canonical_path)

                    try:
                        frontier.append(list_directory(canonical_path))
                    except DirectoryUnreadable as exc:
                        _record_failure(canonical_path, f"unable to list contents: {exc.cause}")

    logging.debug("Found %s file(s) and %s directory(ies) beneath %s", len(results.files), len(results.directories), root_dir)
    return results
