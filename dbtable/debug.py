##############################################################################
# Copyright (c) dbtable Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details.
##############################################################################

"""
Debug sinks for table objects.

Table objects report what they do through a sink with a single `emit(level,
message)` method. Three severities are used:

- `TRACE` (0): the SQL text of every statement.
- `INFO` (1): informational messages, such as why a unique key was skipped.
- `ERROR` (2): failures.

Each table object gates messages with its own threshold; only messages at or
above it reach the sink.
"""

import logging
from abc import ABC, abstractmethod


TRACE = 0
INFO = 1
ERROR = 2

DEFAULT_DEBUG_LEVEL = ERROR

LEVEL_MAP = {
    TRACE: logging.DEBUG,
    INFO: logging.INFO,
    ERROR: logging.ERROR,
}


class DebugSink(ABC):
    """
    Base class for debug sinks.

    Methods:
        emit: Receive one message at a severity.
    """

    @abstractmethod
    def emit(self, level: int, message: str):
        """
        Receive one message.

        Args:
            level: The severity, 0 (trace) to 2 (error).
            message: The message text.
        """
        raise NotImplementedError("Subclasses of `DebugSink` must implement an `emit` method.")


class LoggingDebugSink(DebugSink):
    """
    A debug sink that forwards messages to a Python logger.

    Severities map to `DEBUG`, `INFO` and `ERROR` log records.

    Attributes:
        logger (logging.Logger): The logger receiving the records.
    """

    def __init__(self, logger: logging.Logger = None):
        """
        Initialize the sink.

        Args:
            logger: The logger to forward to. Defaults to the `dbtable` logger.
        """
        self.logger: logging.Logger = logger or logging.getLogger("dbtable")

    def emit(self, level: int, message: str):
        self.logger.log(LEVEL_MAP.get(level, logging.ERROR), message)
