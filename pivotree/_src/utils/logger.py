# SPDX-FileCopyrightText: Copyright (c) 2025 The Newton Developers
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
PIVOTREE: Utilities: Message Logging

Messages go to the ``pivotree`` logger, which writes through a single
colored stream handler and does not propagate to the root logger. Modules
use the helpers of this module through ``from ..utils import logger as msg``.
"""

import logging
from enum import IntEnum
from typing import ClassVar


class LogLevel(IntEnum):
    """Enumeration for log levels."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    NOTIF = logging.INFO + 5
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL

    @classmethod
    def from_any(cls, level: "LogLevel | str | int") -> "LogLevel":
        if isinstance(level, str):
            try:
                return cls[level.upper()]
            except KeyError as err:
                raise ValueError(f"Invalid log level: {level}") from err
        return cls(level)


class Logger(logging.Formatter):
    """Colored formatter owning the stream handler of the package logger."""

    NAME = "pivotree"
    HEADER = "[PIVOTREE]"
    HEADERCOL = "\x1b[38;5;39m"

    WHITE = "\x1b[37m"
    RED = "\x1b[31;20m"
    BOLD_RED = "\x1b[31;1m"
    BLUE = "\x1b[34;20m"
    GREEN = "\x1b[32;20m"
    YELLOW = "\x1b[33;20m"
    RESET = "\x1b[0m"

    LINE_FORMAT = "[%(asctime)s][%(filename)s:%(lineno)d][%(levelname)s]: %(message)s"
    """Format of a log line after the header."""

    COLORS: ClassVar[dict[int, str]] = {
        LogLevel.DEBUG: BLUE,
        LogLevel.INFO: WHITE,
        LogLevel.NOTIF: GREEN,
        LogLevel.WARNING: YELLOW,
        LogLevel.ERROR: RED,
        LogLevel.CRITICAL: BOLD_RED,
    }
    """Line color of each log level."""

    def __init__(self):
        super().__init__()
        logging.addLevelName(LogLevel.NOTIF, "NOTIF")
        self._formatters: dict[int, logging.Formatter] = {}
        self._header: str | None = None
        self._streamhandler = logging.StreamHandler()
        self._streamhandler.setFormatter(self)
        self.get().setLevel(LogLevel.NOTIF)
        self.attach()

    def format(self, record):
        # Formatters are rebuilt whenever the header was changed through `set_log_header`
        if self._header != self.HEADER:
            self._header = self.HEADER
            self._formatters.clear()
        formatter = self._formatters.get(record.levelno)
        if formatter is None:
            color = self.COLORS.get(record.levelno, self.WHITE)
            formatter = logging.Formatter(self.HEADERCOL + self.HEADER + self.RESET + color + self.LINE_FORMAT + self.RESET)
            self._formatters[record.levelno] = formatter
        return formatter.format(record)

    def get(self) -> logging.Logger:
        """Get the package logger."""
        return logging.getLogger(self.NAME)

    @property
    def handler(self) -> logging.StreamHandler:
        """The stream handler writing through this formatter."""
        return self._streamhandler

    def attach(self):
        """
        Attaches the stream handler to the package logger and stops propagation to the root logger.

        Does nothing if both are already in place. Code replacing the handlers of
        the package logger, such as `unittest.TestCase.assertLogs`, may restore
        them without the stream handler, so this is checked on every access.
        """
        logger = self.get()
        if self._streamhandler not in logger.handlers:
            logger.addHandler(self._streamhandler)
        logger.propagate = False


###
# Globals
###


LOGGER: Logger | None = None
"""Formatter attached to the package logger, created on first use."""


###
# Configurations
###


def get_default_logger() -> logging.Logger:
    """Returns the package logger, attaching the colored handler if it is missing."""
    global LOGGER  # noqa: PLW0603
    if LOGGER is None:
        LOGGER = Logger()
    LOGGER.attach()
    return LOGGER.get()


def set_log_level(level: LogLevel | str | int):
    """Set the logging level of the package logger."""
    level = LogLevel.from_any(level)
    get_default_logger().setLevel(level)
    get_default_logger().debug(f"Log level set to: {level.name}")


def reset_log_level():
    """Reset the logging level of the package logger to NOTIF."""
    get_default_logger().setLevel(LogLevel.NOTIF)


def set_log_header(header: str):
    """Set the header printed in front of every message."""
    Logger.HEADER = header


###
# Logging
###


def debug(msg: str, *args, **kwargs):
    get_default_logger().debug(msg, *args, **kwargs, stacklevel=2)


def info(msg: str, *args, **kwargs):
    get_default_logger().info(msg, *args, **kwargs, stacklevel=2)


def notif(msg: str, *args, **kwargs):
    """Log a message at the NOTIF level, between INFO and WARNING."""
    get_default_logger().log(LogLevel.NOTIF, msg, *args, **kwargs, stacklevel=2)


def warning(msg: str, *args, **kwargs):
    get_default_logger().warning(msg, *args, **kwargs, stacklevel=2)


def error(msg: str, *args, **kwargs):
    get_default_logger().error(msg, *args, **kwargs, stacklevel=2)


def critical(msg: str, *args, **kwargs):
    get_default_logger().critical(msg, *args, **kwargs, stacklevel=2)
