##############################################################################
# Copyright (c) dbtable Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details.
##############################################################################

"""
This module stores constants representing file paths that will be needed for
dbtable's configuration.
"""

import os


APP_FILENAME: str = "dbtable.yaml"
CONFIG_ENV_VAR: str = "DBTABLE_CONFIG"
USER_HOME: str = os.path.expanduser("~")
DBTABLE_HOME: str = os.path.join(USER_HOME, ".dbtable")
DEFAULT_DB_PATH: str = os.path.join(DBTABLE_HOME, "dbtable.db")
