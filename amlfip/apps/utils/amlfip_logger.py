#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2024-2025 AMLFIP Developers
#
# SPDX-License-Identifier: BSD-3-Clause

"""Logging setup of the command line applications.

Records go to a console handler, colored when the console supports it, and to a rotating
debug log file that keeps every DEBUG record of recent runs.
"""

import logging
import logging.handlers
import os
import platform
import re
import sys
from datetime import datetime
from typing import Optional, TextIO

import colorama

from amlfip import AMLFIP_DEBUG_LOG_FILE, AMLFIP_DEBUG_LOGGING_DISABLED, __version__

colorama.just_fix_windows_console()

BRIEF_FORMAT = logging.BASIC_FORMAT
DETAILED_FORMAT = BRIEF_FORMAT + " (%(filename)s:%(lineno)d)"

LEVEL_COLORS = {
    logging.DEBUG: colorama.Fore.BLUE,
    logging.INFO: colorama.Fore.WHITE + colorama.Style.BRIGHT,
    logging.WARNING: colorama.Fore.YELLOW,
    logging.ERROR: colorama.Fore.RED,
    logging.CRITICAL: colorama.Fore.RED + colorama.Style.BRIGHT,
}

ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*m")

DEBUG_LOG_MAX_BYTES = 1_000_000
DEBUG_LOG_BACKUPS = 5


class AmlfipFormatter(logging.Formatter):
    """Formatter printing INFO records briefly and other levels with their source line."""

    def __init__(self, colored: bool = False) -> None:
        """Initialize the formatter.

        :param colored: Wrap records into ANSI colors of their level, strip colors otherwise.
        """
        super().__init__()
        self.colored = colored
        self._brief = logging.Formatter(BRIEF_FORMAT)
        self._detailed = logging.Formatter(DETAILED_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        formatter = self._brief if record.levelno == logging.INFO else self._detailed
        text = formatter.format(record)
        if not self.colored:
            return ANSI_ESCAPE.sub("", text)
        return f"{LEVEL_COLORS.get(record.levelno, '')}{text}{colorama.Style.RESET_ALL}"


class ConsoleHandler(logging.StreamHandler):
    """Console handler added by :func:`install`, a logger has at most one."""


def _add_debug_file_handler(target: logging.Logger) -> None:
    log_file = os.path.abspath(AMLFIP_DEBUG_LOG_FILE)
    for handler in target.handlers:
        if isinstance(handler, logging.handlers.RotatingFileHandler):
            if handler.baseFilename == log_file:
                return
    os.makedirs(os.path.dirname(log_file), exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=DEBUG_LOG_MAX_BYTES, backupCount=DEBUG_LOG_BACKUPS, encoding="utf-8"
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(AmlfipFormatter(colored=False))
    target.addHandler(handler)

    target.debug(f"AMLFIP DEBUG LOGGING STARTED {datetime.now():%Y-%m-%d %H:%M:%S}")
    target.debug(
        f"AMLFIP {__version__}, Python {platform.python_version()}, {platform.platform()}"
    )
    target.debug(f"Command line: {sys.argv}")


def install(
    level: Optional[int] = None,
    stream: Optional[TextIO] = None,
    colored: Optional[bool] = None,
    logger: Optional[logging.Logger] = None,
    create_debug_logger: bool = True,
) -> None:
    """Set up logging of an application.

    A repeated call replaces the console handler of the previous one.

    :param level: Console level, WARNING by default.
    :param stream: Console stream, standard error by default.
    :param colored: Colored console, detected from the stream by default.
    :param logger: Configured logger, the ``amlfip`` package logger by default.
    :param create_debug_logger: Add the rotating debug log file.
    """
    target = logger or logging.getLogger("amlfip")
    target.setLevel(logging.DEBUG)
    for handler in [h for h in target.handlers if isinstance(h, ConsoleHandler)]:
        target.removeHandler(handler)

    stream = stream or sys.stderr
    if colored is None:
        colored = stream.isatty() and "NO_COLOR" not in os.environ
    console = ConsoleHandler(stream)
    console.setLevel(level or logging.WARNING)
    console.setFormatter(AmlfipFormatter(colored=colored))
    target.addHandler(console)

    if create_debug_logger and not AMLFIP_DEBUG_LOGGING_DISABLED:
        try:
            _add_debug_file_handler(target)
        except OSError as exc:
            target.warning(f"Debug log file {AMLFIP_DEBUG_LOG_FILE} not available: {exc}")
