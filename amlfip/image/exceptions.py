#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2024-2025 AMLFIP Developers
#
# SPDX-License-Identifier: BSD-3-Clause

"""AMLFIP image processing exceptions."""

from amlfip.exceptions import AMLFIPError


class AMLFIPTocFullError(AMLFIPError):
    """The FIP TOC entry table has no free slot left.

    Raised when an entry would reach the BL31 marker at 0x400, or a BL31 header copy would
    reach the sentinel at 0xC00.
    """


class AMLFIPEncryptionBlockError(AMLFIPError):
    """Encryption block failed to render the TOC blob."""


class AMLFIPNotEnoughBytesException(AMLFIPError):
    """Input data are shorter than the structure being read from them."""
