#!/usr/bin/env python3
"""Utilities for reading the filepwn YAML configuration file.
"""
import logging
import yaml

def read_config(config_file):
    """
    Read the YAML-formatted configuration file and return its contents as a
    dict.  An empty file returns an empty dict.
    """

    try:
        with open(config_file, mode='r', encoding='utf-8') as f:
            config = yaml.safe_load(f)
    except OSError as exc:
        logging.error("Unable to read configuration file: %s", config_file)
        raise exc
    except yaml.YAMLError as exc:
        logging.error("Unable to parse configuration file: %s", config_file)
        raise exc

    if config is None:
        return {}

    if not isinstance(config, dict):
        raise ValueError(f"Configuration file {config_file} does not contain a mapping")

    return config
