#!/usr/bin/env python3
"""Utilities for reading the passwd/group flat-file databases.
"""
import logging
import re

from filepwn.lib.errors import (DatabaseUnreadable, MalformedIdentityField,
                                UnknownGroupError, UnknownUserError)

DEFAULT_PASSWD_FILE = '/etc/passwd'
DEFAULT_GROUP_FILE = '/etc/group'

MAX_ID = 2**32 - 1

id_field_re = re.compile(r'\+?[0-9]+')

def parse_id_field(name, field):
    """
    Convert the numeric id field of a record to an unsigned 32-bit integer
    """

    if not id_field_re.fullmatch(field):
        raise MalformedIdentityField(name, f"invalid digit found in '{field}'")

    value = int(field)
    if value > MAX_ID:
        raise MalformedIdentityField(name, f"'{field}' is too large for an id")

    return value


def read_identity_db(filepath):
    """
    Read a colon-delimited passwd/group style database and return a dict
    mapping each name (field 0) to its numeric id (field 2).  Later records
    overwrite earlier ones with the same name.
    """

    try:
        with open(filepath, mode='r', encoding='utf-8') as f:
            contents = f.read()
    except (OSError, UnicodeDecodeError) as exc:
        logging.error("Unable to read identity database %s: %s", filepath, str(exc))
        raise DatabaseUnreadable(filepath, exc) from exc

    identities = {}

    for line in contents.split('\n'):
        line = line.rstrip('\r')
        if not line:
            continue

        fields = line.split(':')
        name = fields[0]

        if not name:
            raise MalformedIdentityField(name, f"record has an empty name: '{line}'")

        if len(fields) < 3:
            raise MalformedIdentityField(name, f"expected at least 3 fields, found {len(fields)}")

        identities[name] = parse_id_field(name, fields[2])

    logging.debug("Read %s record(s) from %s", len(identities), filepath)
    return identities


def read_passwd(filepath=DEFAULT_PASSWD_FILE):
    """
    Return the user name -> uid mapping from the passwd database
    """

    return read_identity_db(filepath)


def read_group(filepath=DEFAULT_GROUP_FILE):
    """
    Return the group name -> gid mapping from the group database
    """

    return read_identity_db(filepath)


def lookup_uid(users, user):
    """Return the uid for the given user name"""
    try:
        return users[user]
    except KeyError as exc:
        raise UnknownUserError(user) from exc


def lookup_gid(groups, group):
    """Return the gid for the given group name"""
    try:
        return groups[group]
    except KeyError as exc:
        raise UnknownGroupError(group) from exc
