#!/usr/bin/env python3
"""
FILE:  filepwn.py

DESCRIPTION:  Recursively set the user/group ownership and file/directory
    permissions for everything beneath a directory.

     BUGS:
    NOTES:  All user/group/permission validation is done before the directory
            tree is walked.  Once the walk starts, failures for individual
            files/directories are reported but never stop the run.
  VERSION:  1.0
  CREATED:  2026-10-19
 REVISION:  2026-10-19
"""

import logging
from os.path import dirname, realpath, join

from filepwn.lib import read_config
from filepwn.lib.errors import InvalidModeError
from filepwn.lib.identity_db import (DEFAULT_GROUP_FILE, DEFAULT_PASSWD_FILE,
                                     lookup_gid, lookup_uid, read_group,
                                     read_passwd)
from filepwn.lib.mode_utils import parse_mode
from filepwn.lib.set_owner_group_permissions import set_owner_group_permissions
from filepwn.lib.tree_walker import walk_tree

DEFAULT_CONFIG_FILE = join(dirname(dirname(realpath(__file__))), 'etc/filepwn.yaml')

DEFAULT_FILE_PERMISSIONS = '644'
DEFAULT_DIRECTORY_PERMISSIONS = '755'


class FilePwn():
    """
    Class is a python wrapper around the filepwn configuration
    """

    def __init__(self, config_file = DEFAULT_CONFIG_FILE):

        self.config = read_config.read_config(config_file)


    def get_passwd_file(self):
        """
        Return the path to the passwd database
        """

        return self.config.get('passwdFile', DEFAULT_PASSWD_FILE)


    def get_group_file(self):
        """
        Return the path to the group database
        """

        return self.config.get('groupFile', DEFAULT_GROUP_FILE)


    def _get_permissions(self, key, default):
        """
        Return the permissions for the given key.  YAML reads an unquoted 0644
        as the integer 420, so only quoted (string) values are accepted.
        """

        value = self.config.get(key, default)

        if not isinstance(value, str):
            raise InvalidModeError(value, f"{key} must be quoted in the configuration file, i.e. {key}: '644'")

        return value


    def get_file_permissions(self):
        """
        Return the default file permissions, as an octal string
        """

        return self._get_permissions('filePermissions', DEFAULT_FILE_PERMISSIONS)


    def get_directory_permissions(self):
        """
        Return the default directory permissions, as an octal string
        """

        return self._get_permissions('directoryPermissions', DEFAULT_DIRECTORY_PERMISSIONS)


    def get_gearman_server(self):
        """
        Return the ip/port for the Gearman server
        """

        return self.config['gearmanServer']


    def filepwn_directory(self, path, user, group, file_permissions=None, directory_permissions=None):
        """
        Run filepwn_directory using the configured databases and default
        permissions
        """

        return filepwn_directory(
            path, user, group,
            file_permissions if file_permissions is not None else self.get_file_permissions(),
            directory_permissions if directory_permissions is not None else self.get_directory_permissions(),
            passwd_file=self.get_passwd_file(),
            group_file=self.get_group_file()
        )


def filepwn_directory(path, user, group, file_permissions, directory_permissions,
                      passwd_file=DEFAULT_PASSWD_FILE, group_file=DEFAULT_GROUP_FILE):
    """
    Set the ownership of every file and sub-directory beneath path to
    user:group and their permissions to file_permissions/directory_permissions.

    Raises a FilePwnError subclass, before anything is modified, if either
    database cannot be parsed, the user/group is unknown, a permission string
    is invalid or path cannot be listed.  Otherwise returns a verdict dict;
    the verdict is False when any file/directory could not be updated.
    """

    users = read_passwd(passwd_file)
    groups = read_group(group_file)

    uid = lookup_uid(users, user)
    gid = lookup_gid(groups, group)
    logging.debug("Resolved %s:%s to %s:%s", user, group, uid, gid)

    file_mode = parse_mode(file_permissions)
    directory_mode = parse_mode(directory_permissions)

    logging.info("Building file list for %s", path)
    tree = walk_tree(path)

    reasons = [f"Unable to process {failed_path}: {reason}" for failed_path, reason in tree.failures]

    logging.info("Setting ownership/permissions for %s file(s)", len(tree.files))
    reasons.extend(set_owner_group_permissions(tree.files, uid, gid, file_mode))

    logging.info("Setting ownership/permissions for %s directory(ies)", len(tree.directories))
    reasons.extend(set_owner_group_permissions(tree.directories, uid, gid, directory_mode))

    results = {
        'verdict': len(reasons) == 0,
        'files': len(tree.files),
        'directories': len(tree.directories),
        'failures': reasons
    }

    if len(reasons) > 0:
        results['reason'] = f"Unable to set ownership/permissions for {len(reasons)} item(s)"
        logging.error("Completed with errors: %s", results['reason'])
    else:
        logging.info("Completed: %s file(s), %s directory(ies)", results['files'], results['directories'])

    return results
