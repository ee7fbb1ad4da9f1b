##############################################################################
# Copyright (c) dbtable Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details.
##############################################################################

"""
This module provides functionality for locating and loading the dbtable
configuration file (`dbtable.yaml`) and filling in default settings.

A configuration file looks like:

    database:
      path: ~/.dbtable/dbtable.db
    logging:
      level: INFO
      colors: true
"""
import logging
import os
from typing import Dict, Optional

from dbtable.config import Config
from dbtable.config.config_filepaths import APP_FILENAME, CONFIG_ENV_VAR, DBTABLE_HOME, DEFAULT_DB_PATH
from dbtable.utils import load_yaml, merge_dicts


LOG: logging.Logger = logging.getLogger(__name__)


def get_default_config() -> Dict:
    """
    Creates the default configuration used when no file is found.

    Returns:
        A configuration dictionary with every setting at its default value.
    """
    return {
        "database": {"path": DEFAULT_DB_PATH},
        "logging": {"level": "INFO", "colors": True},
    }


def find_config_file(path: Optional[str] = None) -> Optional[str]:
    """
    Locate the dbtable configuration file.

    If `path` is given, only that file (or `dbtable.yaml` inside that directory)
    is considered. Otherwise the lookup order is:
      1. The file named by the `DBTABLE_CONFIG` environment variable.
      2. `dbtable.yaml` in the current working directory.
      3. `dbtable.yaml` in the `~/.dbtable` directory.

    Args:
        path: A specific file or directory to look in.

    Returns:
        The full path to the configuration file if found, otherwise None.
    """
    if path is not None:
        path = os.path.expanduser(path)
        if os.path.isdir(path):
            path = os.path.join(path, APP_FILENAME)
        return path if os.path.isfile(path) else None

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path and os.path.isfile(os.path.expanduser(env_path)):
        return os.path.expanduser(env_path)

    local_app = os.path.join(os.getcwd(), APP_FILENAME)
    if os.path.isfile(local_app):
        return local_app

    home_app = os.path.join(DBTABLE_HOME, APP_FILENAME)
    if os.path.isfile(home_app):
        return home_app

    return None


def load_config(filepath: str) -> Optional[Dict]:
    """
    Reads a dbtable YAML configuration file and returns its contents as a dictionary.

    Args:
        filepath: The path to the YAML configuration file.

    Returns:
        A dictionary containing the contents of the YAML file or None if file doesn't exist.
    """
    if not os.path.isfile(filepath):
        LOG.info(f"No config file at {filepath}")
        return None
    LOG.info(f"Reading config from file {filepath}")
    return load_yaml(filepath)


def get_config(path: Optional[str] = None) -> Config:
    """
    Load the dbtable configuration, falling back to defaults for anything unset.

    Args:
        path: A specific file or directory to load the configuration from.
            If None, the default search locations are used.

    Returns:
        The loaded `Config`.
    """
    config = get_default_config()
    filepath = find_config_file(path)
    if filepath is None:
        LOG.debug("No dbtable config file found; using defaults.")
    else:
        config = merge_dicts(config, load_config(filepath) or {})

    config["database"]["path"] = os.path.expanduser(str(config["database"]["path"]))
    return Config(config)
