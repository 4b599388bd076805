#!/usr/bin/env python3
"""Exceptions raised while setting ownership/permissions on a directory tree.
"""

class FilePwnError(Exception):
    """
    Base class for all filepwn errors
    """


class DatabaseUnreadable(FilePwnError):
    """
    The passwd/group database could not be opened or read
    """

    def __init__(self, filepath, cause):
        self.filepath = filepath
        self.cause = cause
        super().__init__(f"Unable to read identity database {filepath}: {cause}")


class MalformedIdentityField(FilePwnError):
    """
    A record in the passwd/group database has an invalid numeric id field
    """

    def __init__(self, name, cause):
        self.name = name
        self.cause = cause
        super().__init__(f"Malformed id field for {name}: {cause}")


class UnknownUserError(FilePwnError):
    """
    The requested user is not in the passwd database
    """

    def __init__(self, name):
        self.name = name
        super().__init__(f"User not found: {name}")


class UnknownGroupError(FilePwnError):
    """
    The requested group is not in the group database
    """

    def __init__(self, name):
        self.name = name
        super().__init__(f"Group not found: {name}")


class InvalidModeError(FilePwnError):
    """
    A requested permission mode is not an octal value between 0 and 777
    """

    def __init__(self, mode_str, cause):
        self.mode_str = mode_str
        self.cause = cause
        super().__init__(f"Invalid permissions '{mode_str}': {cause}")


class DirectoryUnreadable(FilePwnError):
    """
    The contents of a directory could not be listed
    """

    def __init__(self, path, cause):
        self.path = path
        self.cause = cause
        super().__init__(f"Unable to list contents of {path}: {cause}")


class ModeApplicationError(FilePwnError):
    """
    chmod failed for a path
    """

    def __init__(self, path, cause):
        self.path = path
        self.cause = cause
        super().__init__(f"Unable to set permissions for {path}: {cause}")


class OwnershipApplicationError(FilePwnError):
    """
    chown failed for a path
    """

    def __init__(self, path, cause):
        self.path = path
        self.cause = cause
        super().__init__(f"Unable to set ownership for {path}: {cause}")
