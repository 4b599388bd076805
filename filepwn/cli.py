#!/usr/bin/env python3
"""
FILE:  cli.py

DESCRIPTION:  Command-line utility for recursively setting the user/group
    ownership and file/directory permissions of a directory.

USAGE: filepwn -P <path> -u <user> -g <group> [-f <perms>] [-d <perms>]

     BUGS:
    NOTES:
  VERSION:  1.0
  CREATED:  2026-10-19
 REVISION:  2026-10-19
"""

import argparse
import logging
import sys

from filepwn.lib.errors import FilePwnError
from filepwn.lib.filepwn import DEFAULT_CONFIG_FILE, FilePwn

EX_SUCCESS = 0
EX_FAILURE = 1

LOGGING_FORMAT = '%(asctime)-15s %(levelname)s - %(message)s'
LOG_LEVELS = {0: logging.WARNING, 1: logging.INFO, 2: logging.DEBUG}


def build_parser():
    """
    Build the argument parser
    """

    parser = argparse.ArgumentParser(description='Recursively set ownership and permissions for a directory')
    parser.add_argument('-P', '--path', dest='path', required=True,
                        help="Path to directory you want to be filepwn'd")
    parser.add_argument('-u', '--user', dest='user', required=True,
                        help='name of user, as string')
    parser.add_argument('-g', '--group', dest='group', required=True,
                        help='name of group, as string')
    parser.add_argument('-f', '--file-permissions', dest='file_permissions',
                        help='File permissions, in octal')
    parser.add_argument('-d', '--directory-permissions', dest='directory_permissions',
                        help='Directory permissions, in octal')
    parser.add_argument('-c', '--config', dest='config_file', default=DEFAULT_CONFIG_FILE,
                        help='filepwn configuration file')
    parser.add_argument('--passwd-file', dest='passwd_file',
                        help='passwd database, overrides the configuration file')
    parser.add_argument('--group-file', dest='group_file',
                        help='group database, overrides the configuration file')
    parser.add_argument('-v', '--verbosity', dest='verbosity',
                        default=0, action='count',
                        help='Increase output verbosity')

    return parser


def main(argv=None):
    """
    Parse the arguments and run filepwn.  Returns the exit status.
    """

    parsed_args = build_parser().parse_args(argv)

    ############################
    # Set up logging before we do any other argument parsing (so that we
    # can log problems with argument parsing).

    logging.basicConfig(format=LOGGING_FORMAT)

    parsed_args.verbosity = min(parsed_args.verbosity, max(LOG_LEVELS))
    logging.getLogger().setLevel(LOG_LEVELS[parsed_args.verbosity])

    try:
        filepwn = FilePwn(parsed_args.config_file)
    except Exception as exc:
        logging.error("Unable to load configuration: %s", str(exc))
        return EX_FAILURE

    if parsed_args.passwd_file:
        filepwn.config['passwdFile'] = parsed_args.passwd_file

    if parsed_args.group_file:
        filepwn.config['groupFile'] = parsed_args.group_file

    try:
        results = filepwn.filepwn_directory(parsed_args.path, parsed_args.user, parsed_args.group,
                                            parsed_args.file_permissions, parsed_args.directory_permissions)
    except FilePwnError as exc:
        logging.error(str(exc))
        return EX_FAILURE

    if results['verdict']:
        print(f"Done! Set ownership/permissions for {results['files']} file(s) and {results['directories']} directory(ies)")
    else:
        print(f"Done, with errors. {results['reason']}")

    return EX_SUCCESS


# -------------------------------------------------------------------------------------
# Required python code for running the script as a stand-alone utility
# -------------------------------------------------------------------------------------
if __name__ == "__main__":
    sys.exit(main())
