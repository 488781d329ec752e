#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2024-2025 AMLFIP Developers
#
# SPDX-License-Identifier: BSD-3-Clause

"""Error handling and output formatting of the command line applications."""

import logging
import os
import sys
from functools import wraps
from typing import Any, Callable, Optional

import click
import hexdump

from amlfip import AMLFIP_DEBUG_LOG_FILE, AMLFIP_DEBUG_LOGGING_DISABLED
from amlfip.exceptions import AMLFIPError

logger = logging.getLogger(__name__)


class AMLFIPAppError(AMLFIPError):
    """Error of a command reported without a traceback, with its own exit code."""

    fmt = "{description}"

    def __init__(self, desc: Optional[str] = None, error_code: int = 1) -> None:
        """Initialize the error.

        :param desc: Message printed on the console.
        :param error_code: Exit code of the application, 1 when out of the 1-255 range.
        """
        super().__init__(desc)
        self.error_code = error_code if 0 < error_code < 256 else 1


def get_printable_path(path: str) -> str:
    """Get path relative to the working directory when it is inside it, absolute otherwise."""
    abs_path = os.path.abspath(path)
    relative = os.path.relpath(abs_path)
    return abs_path if relative.startswith(os.pardir) else relative


def _split_string(string: str, length: int) -> list[str]:
    return [string[i : i + length] for i in range(0, len(string), length)]


def format_raw_data(data: bytes, use_hexdump: bool = False, line_length: int = 16) -> str:
    """Format binary data as hex bytes.

    :param data: Data to format.
    :param use_hexdump: Add offsets and ASCII column.
    :param line_length: Bytes per line of the plain format.
    :return: Multi-line text.
    """
    if use_hexdump:
        return hexdump.hexdump(data, result="return")
    lines = _split_string(data.hex(), line_length * 2)
    return "\n".join(" ".join(_split_string(line, 2)) for line in lines)


def print_files(files: list[str], title: Optional[str] = None) -> None:
    """Print list of files."""
    click.echo(title or "Created files:")
    for file in files:
        click.echo(f" - {get_printable_path(file)}")


def _hint_debug_log() -> None:
    if not AMLFIP_DEBUG_LOGGING_DISABLED:
        click.secho(f"See debug log file: {AMLFIP_DEBUG_LOG_FILE} for more info.", fg="yellow")


def catch_amlfip_error(function: Callable) -> Callable:
    """Turn exceptions of an application into exit codes.

    :class:`AMLFIPAppError` exits with its own code, any other :class:`AMLFIPError` or a
    failed assertion with 2 and any other exception with 3.

    :param function: Application entry point.
    :return: Wrapped entry point.
    """

    @wraps(function)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return function(*args, **kwargs)
        except AMLFIPAppError as exc:
            if exc.description:
                click.echo(f"{type(exc).__name__}: {exc}", err=True)
            sys.exit(exc.error_code)
        except (AssertionError, AMLFIPError) as exc:
            click.echo(f"{type(exc).__name__}: {exc}", err=True)
            logger.debug(str(exc), exc_info=True)
            _hint_debug_log()
            sys.exit(2)
        except (Exception, KeyboardInterrupt) as exc:  # pylint: disable=broad-except
            click.echo(f"GENERAL ERROR: {type(exc).__name__}: {exc}", err=True)
            logger.debug(str(exc), exc_info=True)
            _hint_debug_log()
            sys.exit(3)

    return wrapper
