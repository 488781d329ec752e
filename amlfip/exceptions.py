#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2024-2025 AMLFIP Developers
#
# SPDX-License-Identifier: BSD-3-Clause

"""Exceptions raised by the AMLFIP library.

Every library failure derives from :class:`AMLFIPError`. The subclasses that describe a
standard failure also derive from the matching built-in exception.
"""

from typing import Optional


class AMLFIPError(Exception):
    """Base of all AMLFIP exceptions.

    :cvar fmt: Template of the message, ``{description}`` is replaced by the description.
    """

    fmt = "AMLFIP: {description}"

    def __init__(self, desc: Optional[str] = None) -> None:
        """Initialize the exception.

        :param desc: Description of the failure.
        """
        super().__init__()
        self.description = desc

    def __str__(self) -> str:
        return self.fmt.format(description=self.description or "Unknown Error")


class AMLFIPKeyError(AMLFIPError, KeyError):
    """Missing key, e.g. a required provider parameter or enumeration label."""


class AMLFIPValueError(AMLFIPError, ValueError):
    """Value outside of the accepted range or format."""


class AMLFIPIOError(AMLFIPError, IOError):
    """File or stream operation failed.

    The system error code is kept in ``errno`` when the failure comes from the OS.
    """

    def __init__(self, desc: Optional[str] = None, errno: Optional[int] = None) -> None:
        """Initialize the IO error.

        :param desc: Description of the failure.
        :param errno: System error code, if known.
        """
        super().__init__(desc)
        self.errno = errno


class AMLFIPUnsupportedOperation(AMLFIPError):
    """The object does not implement the requested operation."""


class AMLFIPParsingError(AMLFIPError):
    """Binary data do not hold a valid structure."""
