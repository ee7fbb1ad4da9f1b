##############################################################################
# Copyright (c) dbtable Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details.
##############################################################################

"""
Load table descriptions from YAML files.

A descriptor file uses the same shape as `SchemaDescriptor.from_dict`:

    table: user
    unique_keys:
      - [id]
      - [login]
    columns:
      id: {immutable: true, autoincrement: true, default: "NULL"}
      login: {quoted: true}
      group_name:
        foreign: {table: grp, lkey: group_id, rkey: id, actual_column: name}
    related:
      Group: {id: group_id}

Related tables are named by class name in files.
"""

import logging
import os

import yaml

from dbtable.exceptions import ConfigurationError
from dbtable.schema.descriptor import SchemaDescriptor
from dbtable.utils import load_yaml


LOG = logging.getLogger(__name__)


def load_descriptor(filepath: str) -> SchemaDescriptor:
    """
    Read a YAML table description and build its `SchemaDescriptor`.

    Args:
        filepath: Path to the YAML descriptor file.

    Returns:
        The validated descriptor.

    Raises:
        (exceptions.ConfigurationError): If the file is missing, unreadable,
            or describes an invalid table.
    """
    if not os.path.isfile(os.path.expanduser(filepath)):
        raise ConfigurationError(f"Table description file not found: {filepath}")

    LOG.debug(f"Reading table description from {filepath}")
    try:
        data = load_yaml(filepath)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Could not parse table description {filepath}: {exc}") from exc

    return SchemaDescriptor.from_dict(data)
