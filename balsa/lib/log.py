"""
Centralized engine logging using Loguru.

This module provides a function-based logging mechanism (`LOG`) that dynamically
respects the `beQuiet` flag from the engine settings.

Features:
- A custom `LOG` function for pipeline debug logging (scan, parse, collect,
  resolve, render).
- Dynamic checking of the `beQuiet` flag to suppress logs when necessary.
- `logging_configure` to install the engine's stderr sink and format.

Importing the package installs no sink: the `balsa` loggers start disabled,
so an embedding application keeps its own loguru setup and decides with
`logger.enable("balsa")` whether engine records reach it. The command line
calls `logging_configure` instead.

Example:
    from balsa.lib.log import LOG
    LOG("Collected 3 variables")

Environment:
- Set `BALSA_BEQUIET=True` to suppress pipeline logging output.
"""

from loguru import logger
from typing import Any, TextIO
import sys

# Distinct logger instance for the engine
balsa_logger = logger.bind(app="BALSA")

logger_format = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> │ "
    "<level>{level: <5}</level> │ "
    "<yellow>{name: >24}</yellow>::"
    "<cyan>{function: <24}</cyan> @ "
    "<cyan>{line: <4}</cyan> ║ "
    "<level>{message}</level>"
)


def logging_configure(sink: TextIO | None = None) -> int:
    """
    Route engine logging to `sink` (stderr by default) in the engine format.

    Replaces every existing loguru handler, so it is meant for processes
    balsa owns, such as the `balsa` command.

    :param sink: Stream receiving the records.
    :return: The loguru handler id of the new sink.
    """
    logger.remove()
    handler_id: int = logger.add(sink or sys.stderr, format=logger_format)
    logger.enable("balsa")
    return handler_id


def LOG(*args: Any, **kwargs: Any) -> None:
    """
    Engine logging function.

    Checks the `beQuiet` flag in `appsettings` and logs the message at debug
    level only if logging is enabled.

    :param args: Positional arguments for the log message.
    :param kwargs: Keyword arguments for additional log metadata.
    """
    from balsa.config.settings import appsettings

    if not appsettings.beQuiet:
        balsa_logger.opt(depth=1).debug(*args, **kwargs)
