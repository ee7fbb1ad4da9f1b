##############################################################################
# Copyright (c) dbtable Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details.
##############################################################################

"""This module handles setting up logging for dbtable."""

import logging
import sys

import coloredlogs


FORMATS = {
    "DEFAULT": "[%(asctime)s: %(levelname)s] %(message)s",
    "DEBUG": "[%(asctime)s: %(levelname)s] [%(module)s: %(lineno)d] %(message)s",
}


def setup_logging(logger: logging.Logger, log_level: str = "INFO", colors: bool = True):
    """
    Setup and configure Python logging.

    Args:
        logger: A logging.Logger object.
        log_level: Logger level.
        colors: If True use colored logs.
    """
    fmt = FORMATS["DEBUG"] if log_level.upper() == "DEBUG" else FORMATS["DEFAULT"]
    formatter = logging.Formatter(fmt)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    logger.setLevel(log_level.upper())
    logger.propagate = False

    if colors is True:
        coloredlogs.install(level=log_level.upper(), logger=logger, fmt=fmt)


def configure_logging(config, logger: logging.Logger = None):
    """
    Setup logging from the `logging` section of a loaded configuration.

    Args:
        config (config.Config): The loaded configuration.
        logger: The logger to configure. Defaults to the `dbtable` logger.
    """
    logger = logger or logging.getLogger("dbtable")
    settings = config.logging
    setup_logging(
        logger=logger,
        log_level=str(getattr(settings, "level", "INFO")),
        colors=bool(getattr(settings, "colors", True)),
    )
