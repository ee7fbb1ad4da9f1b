##############################################################################
# Copyright (c) dbtable Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details.
##############################################################################

"""
This module contains pytest fixtures to be used throughout the entire test suite.
"""
import logging
import os
from glob import glob

import pytest

from tests.fixture_types import FixtureCallable, FixtureModification


# pylint: disable=redefined-outer-name

#######################################
# Loading in Module Specific Fixtures #
#######################################

fixture_glob = os.path.join("tests", "fixtures", "**", "*.py")
pytest_plugins = [
    fixture_file.replace(os.sep, ".").replace(".py", "")
    for fixture_file in glob(fixture_glob, recursive=True)
    if not fixture_file.endswith("__init__.py")
]


@pytest.fixture(autouse=True)
def reset_dbtable_logger() -> FixtureModification:
    """
    Restore the `dbtable` logger after every test, since some tests attach
    handlers to it or stop it from propagating.
    """
    logger = logging.getLogger("dbtable")
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


@pytest.fixture(scope="session")
def write_yaml() -> FixtureCallable:
    """
    Fixture that provides a helper writing text to a file and returning its path.

    Returns:
        A function that takes a directory, a file name and the text of the file.
    """

    def _write_yaml(directory, filename: str, contents: str) -> str:
        filepath = os.path.join(str(directory), filename)
        with open(filepath, "w") as yaml_file:
            yaml_file.write(contents)
        return filepath

    return _write_yaml
