##############################################################################
# Copyright (c) dbtable Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details.
##############################################################################

"""
dbtable: object representations of database tables.

A table class describes its columns, unique keys and relations once; dbtable
turns that description into SELECT, INSERT, UPDATE and DELETE statements and
tracks which loaded values were changed so that only those are written back.

Settings come from an optional `dbtable.yaml` read by `get_config`, and
`configure_logging` applies its `logging` section to the `dbtable` logger.
"""

from dbtable.config.configfile import get_config
from dbtable.log_formatter import configure_logging
from dbtable.schema import NULL, SchemaDescriptor, load_descriptor
from dbtable.table import Table


__version__ = "0.3.0"
VERSION = __version__

__all__ = ["NULL", "SchemaDescriptor", "Table", "configure_logging", "get_config", "load_descriptor", "VERSION"]
