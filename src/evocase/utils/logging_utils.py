#  This file is part of evocase.
#
#  SPDX-FileCopyrightText: 2019–2025 evocase Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Logging utilities for evocase.

This module centralizes the logging format strings and installs the handler
that renders the debug output of mutation and execution.
"""

from __future__ import annotations

import logging

from typing import TYPE_CHECKING
from typing import Final

from rich.console import Console
from rich.logging import RichHandler


if TYPE_CHECKING:
    from pathlib import Path


DATE_LOG_FORMAT: Final[str] = "[%X]"
LOG_FORMAT: Final[str] = (
    "%(asctime)s [%(levelname)s](%(name)s:%(funcName)s:%(lineno)d): %(message)s"
)
RICH_LOG_FORMAT: Final[str] = "%(message)s"


def verbosity_to_level(verbosity: int, *, log_file: Path | None = None) -> int:
    """Maps a verbosity count, e.g., the number of ``-v`` flags, to a log level.

    Args:
        verbosity: The verbosity count
        log_file: The file the log is written to, if any

    Returns:
        The log level
    """
    level = logging.WARNING
    if log_file is not None:
        level = logging.INFO
    if verbosity == 1:
        level = logging.INFO
    if verbosity >= 2:  # noqa: PLR2004
        level = logging.DEBUG
    return level


def setup_logging(
    verbosity: int,
    no_rich: bool,  # noqa: FBT001
    log_file: Path | None = None,
) -> Console | None:
    """Installs the root handler for all evocase loggers.

    Args:
        verbosity: The verbosity count
        no_rich: Use a plain stream handler instead of rich
        log_file: Write the log to this file instead of the console

    Returns:
        The rich console, if one is used
    """
    console = None
    handler: logging.Handler
    if no_rich:
        handler = logging.StreamHandler()
    else:
        console = Console(tab_size=4)
        handler = RichHandler(
            rich_tracebacks=True, log_time_format=DATE_LOG_FORMAT, console=console
        )
        handler.setFormatter(logging.Formatter(RICH_LOG_FORMAT))

    if log_file is not None:
        console = None
        handler = logging.FileHandler(log_file)

    logging.basicConfig(
        level=verbosity_to_level(verbosity, log_file=log_file),
        format=LOG_FORMAT,
        datefmt=DATE_LOG_FORMAT,
        handlers=[handler],
        force=True,
    )
    return console
