#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2024-2025 AMLFIP Developers
#
# SPDX-License-Identifier: BSD-3-Clause

"""Amlogic GXL Firmware Image Package (FIP).

The package assembles the boot image read by the S905X boot ROM: BL2 at offset 0, the
encoded FIP table of contents at ``BL2_SIZE`` and the BL30, BL31 and BL33 images behind it.
"""

from amlfip.image.fip.assembler import build_fip
from amlfip.image.fip.container import FipContainer
from amlfip.image.fip.encryption_block import (
    EncryptionBlock,
    ExternalToolEncryptionBlock,
    NoEncryption,
)
from amlfip.image.fip.stages import BootStageType, identifier_for, stage_for
from amlfip.image.fip.toc import FipToc, TocBuilder, TocEntry, TocHeader

__all__ = [
    "BootStageType",
    "EncryptionBlock",
    "ExternalToolEncryptionBlock",
    "FipContainer",
    "FipToc",
    "NoEncryption",
    "TocBuilder",
    "TocEntry",
    "TocHeader",
    "build_fip",
    "identifier_for",
    "stage_for",
]
