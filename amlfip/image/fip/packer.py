#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2024-2025 AMLFIP Developers
#
# SPDX-License-Identifier: BSD-3-Clause

"""Packing of a single boot stage image into the FIP."""

import logging
import os
import struct
from typing import BinaryIO

from amlfip.image.fip.constants import (
    BL2_SIZE,
    BL31_HEADER_SIZE,
    BL31_MAGIC,
    BL31_TAG_OFFSET,
)
from amlfip.image.fip.stages import BootStageType
from amlfip.image.fip.stream import copy_stream, read_block
from amlfip.image.fip.toc import TocBuilder, TocEntry
from amlfip.utils.misc import extend_block

logger = logging.getLogger(__name__)


def is_bl31_image(header: bytes) -> bool:
    """Check whether the image header carries the BL31 tag.

    :param header: Image bytes read from ``BL31_TAG_OFFSET``.
    :return: True for BL31 image.
    """
    if len(header) < 4:
        return False
    return struct.unpack_from("<I", header)[0] == BL31_MAGIC


def pack_image(
    toc_builder: TocBuilder, image_source: BinaryIO, stage: BootStageType, output: BinaryIO
) -> TocEntry:
    """Add one boot stage image into the FIP.

    Records the TOC entry of the image and copies the image into the output at
    ``BL2_SIZE + entry.offset``. BL31 is recognized by the content of the image, not by
    ``stage``: any image with the BL31 tag gets its header copied into the TOC.

    :param toc_builder: TOC under construction.
    :param image_source: Seekable stream with the image.
    :param stage: Boot stage of the image.
    :param output: Seekable output stream of the final boot image.
    :return: Recorded TOC entry.
    """
    size = image_source.seek(0, os.SEEK_END)
    entry = TocEntry.from_stage(stage, offset=toc_builder.next_offset(), size=size)
    toc_builder.record_entry(entry)
    entry_index = toc_builder.entry_count() - 1
    logger.debug(f"Entry #{entry_index} {entry}")

    image_source.seek(BL31_TAG_OFFSET)
    header = read_block(image_source, BL31_HEADER_SIZE)
    if is_bl31_image(header):
        logger.info(f"BL31 header found in {stage.label.upper()} image (entry #{entry_index})")
        if len(header) < BL31_HEADER_SIZE:
            logger.warning(
                f"BL31 header is truncated to {len(header)} bytes, padding with zeros"
            )
            header = extend_block(header, BL31_HEADER_SIZE)
        toc_builder.patch_bl31_header(entry_index, header)

    image_source.seek(0)
    copy_stream(image_source, output, BL2_SIZE + entry.offset)
    toc_builder.advance_cursor(size)
    return entry
